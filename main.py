#!/usr/bin/env python3
"""GrowthTrack entry point.

Run with:
    python main.py rest 90
    python -m growthtrack meditation body_scan
"""

import sys

from growthtrack.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
