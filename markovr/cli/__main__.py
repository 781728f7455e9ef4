"""
markovr CLI entry point.

Usage:
    python -m markovr.cli alphabet
    python -m markovr.cli months -n 5
    python -m markovr.cli tilemap --width 24 --height 6
    python -m markovr.cli inspect <snapshot.json>
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
