"""
Entry point for running canvas_bridge as a module.

This allows running: python -m canvas_bridge [command]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
