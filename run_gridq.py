#!/usr/bin/env python3
"""
Launch script for the grid Q-learning window with proper environment setup.
This script sets the Qt environment variables before importing PySide6.
"""

import os
import sys

# Set Qt environment variables BEFORE any Qt imports
os.environ['QT_AUTO_SCREEN_SCALE_FACTOR'] = '0'
os.environ['QT_SCALE_FACTOR'] = '1'
os.environ['QT_LOGGING_RULES'] = '*=false;qt.qpa.backingstore=false;qt.qpa.drawing=false'

from gridq.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
