"""Allow `python -m release_gate`."""
from release_gate.main import main

if __name__ == "__main__":
    main()
