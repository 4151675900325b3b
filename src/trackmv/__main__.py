"""Allow ``python -m trackmv``."""

from trackmv.cli import main

if __name__ == "__main__":
    main()
