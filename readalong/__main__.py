"""Package entry point for ``python -m readalong``."""

from readalong.cli import main

if __name__ == "__main__":
    main()
