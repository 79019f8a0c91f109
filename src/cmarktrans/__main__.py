"""Entry point for running with python -m cmarktrans."""

from cmarktrans.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
