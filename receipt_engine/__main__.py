"""
Module entrypoint for `python -m receipt_engine`.

This allows running the renderer from the repository root:
    python -m receipt_engine template.json --html preview.html
"""
import sys

from receipt_engine.app import main

if __name__ == "__main__":
    sys.exit(main())
