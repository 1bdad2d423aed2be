"""
Entry point for running sitepipe as a module: python -m sitepipe
"""

import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
