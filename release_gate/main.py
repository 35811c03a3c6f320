"""CLI entrypoint for the release gate."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from release_gate.config import GateConfig, load_config
from release_gate.discovery import ManifestDiscoverer
from release_gate.fs import RealFs
from release_gate.models import ConfigError, DiscoveryError, ReleaseGateError
from release_gate.validate import validate_post_fix, validate_pre_fix
from release_gate.versions import load_version_map

logger = logging.getLogger("release_gate")


def _fail(error: ReleaseGateError) -> dict[str, Any]:
    out: dict[str, Any] = {"status": "FAIL", "kind": type(error).__name__, "error": str(error)}
    if isinstance(error, DiscoveryError):
        out["code"] = error.code
        if error.details:
            out["details"] = error.details
    return out


def _emit(payload: dict[str, Any]) -> int:
    print(json.dumps(payload, indent=2))
    return 0 if payload.get("status") in ("OK", "PASS") else 1


async def _pre(location: Path, config: GateConfig) -> dict[str, Any]:
    versions = await load_version_map(location, RealFs(), config)
    validate_pre_fix(versions)
    return {"status": "PASS", "phase": "pre", "packages": len(versions)}


async def _post(location: Path, config: GateConfig) -> dict[str, Any]:
    batches = await validate_post_fix(location, ManifestDiscoverer(RealFs(), config))
    return {"status": "PASS", "phase": "post", **batches.to_dict()}


def cmd_versions(args: argparse.Namespace, config: GateConfig) -> int:
    """Print the version of every discovered crate."""
    try:
        versions = asyncio.run(load_version_map(args.location, RealFs(), config))
    except ReleaseGateError as e:
        return _emit(_fail(e))
    return _emit({"status": "OK",
                  "versions": {name: str(v) for name, v in versions.items()}})


def cmd_pre(args: argparse.Namespace, config: GateConfig) -> int:
    """Run the pre-fix group-version check."""
    try:
        return _emit(asyncio.run(_pre(args.location, config)))
    except ReleaseGateError as e:
        return _emit(_fail(e))


def cmd_post(args: argparse.Namespace, config: GateConfig) -> int:
    """Run the post-fix discovery validation."""
    try:
        return _emit(asyncio.run(_post(args.location, config)))
    except ReleaseGateError as e:
        return _emit(_fail(e))


def cmd_check(args: argparse.Namespace, config: GateConfig) -> int:
    """Pre-fix then post-fix, stopping at the first failure."""
    try:
        pre = asyncio.run(_pre(args.location, config))
        post = asyncio.run(_post(args.location, config))
    except ReleaseGateError as e:
        return _emit(_fail(e))
    return _emit({"status": "PASS", "pre": pre, "post": post})


def main(argv: list[str] | None = None) -> None:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="release-gate",
        description="Check that crates in each release group share one version",
    )
    parser.add_argument("--config", type=Path, help="Path to a release_gate.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("versions", "Print discovered crate versions"),
        ("pre", "Validate group versions before fixing manifests"),
        ("post", "Validate the package graph after fixing manifests"),
        ("check", "Run pre and post validation"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--location", type=Path, required=True,
                         help="Directory containing the crate manifests")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(2)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(json.dumps(_fail(e), indent=2))
        sys.exit(2)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logger.debug("Command %s at %s", args.command, args.location)

    dispatch = {
        "versions": cmd_versions,
        "pre": cmd_pre,
        "post": cmd_post,
        "check": cmd_check,
    }
    exit_code = dispatch[args.command](args, config)
    sys.exit(exit_code)
