#!/usr/bin/env python3
"""
operator-dev entry point for ``python -m operator_dev``.
"""

import sys

from .libs.main_app import main

if __name__ == "__main__":
    sys.exit(main())
