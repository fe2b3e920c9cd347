"""Allow ``python -m polycascade``."""

from polycascade.cli import main

if __name__ == "__main__":
    main()
