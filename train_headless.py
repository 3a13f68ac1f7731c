#!/usr/bin/env python3
"""
Headless training script: trains the agent without a window and prints a summary.
"""

import sys

from gridq.cli import main

if __name__ == "__main__":
    sys.exit(main())
