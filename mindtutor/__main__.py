"""Allow running as ``python -m mindtutor``."""

from mindtutor.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
