#!/usr/bin/env python3
"""video2bas conversion runner.

Usage:
    python scripts/run_video2bas.py --video clip.mp4
    python scripts/run_video2bas.py --video clip.mp4 --config scripts/user_config.py
    python scripts/run_video2bas.py --video clip.mp4 --fps 12 --colors 6 --low-memory

Note: User config in scripts/user_config.py, expert defaults in
video2bas.schemas.param.ParamConfig
"""

import sys

from video2bas.cli.run_video2bas import main


if __name__ == "__main__":
    sys.exit(main())
