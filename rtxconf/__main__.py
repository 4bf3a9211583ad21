"""Entry point for ``python -m rtxconf``."""

from rtxconf.cli import main

if __name__ == "__main__":
    main()
