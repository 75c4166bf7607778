"""Main entry point for running calcdeck_pkg as a module.

This allows running Calcdeck with:
    python -m calcdeck_pkg list
    python -m calcdeck_pkg run bmi --set weight=70 --set height=175

This is equivalent to running the ``calcdeck`` console script.
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
