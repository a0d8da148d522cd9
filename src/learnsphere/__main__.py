"""Entry point for ``python -m learnsphere``."""

from learnsphere.cli import main

if __name__ == "__main__":
    main()
