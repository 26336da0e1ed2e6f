"""video2bas User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the conversion. Advanced settings live in video2bas.schemas.param.

Usage:
    python scripts/run_video2bas.py --video clip.mp4 --config scripts/user_config.py
    video2bas --video clip.mp4 --config scripts/user_config.py --colors 6
"""

CONFIG = {
    # ========================================================================
    # FRAME SAMPLING
    # ========================================================================
    "FPS": 10,                # Frames per second sampled from the video
    "MAX_WIDTH": 96,          # Frame width in pixels (height keeps aspect)

    # ========================================================================
    # PALETTE
    # ========================================================================
    "COLORS": 4,              # Colors per frame (median cut)
    "PALETTE": None,          # Fixed palette for every frame, e.g. ["FFFFFF", "000000"]

    # ========================================================================
    # TRACING
    # ========================================================================
    "TRACE_METHOD": "contours",   # "contours" (built in) or "potrace" (needs the binary)

    # ========================================================================
    # SCRIPT
    # ========================================================================
    "START_TIME_MS": 0,       # Subtracted from every frame's start offset
    "SKIP_COLORS": ["000000"],  # Layers left out of the script

    # ========================================================================
    # OUTPUT
    # ========================================================================
    "OUTPUT": "output.bas",           # Segments are written as OUTPUT_0.bas, OUTPUT_1.bas, ...
    "MAX_SEGMENT_BYTES": 2 * 1024 * 1024,
    "SAVE_FRAME_JSON": False,         # Also write OUTPUT_frames.jsonl

    # ========================================================================
    # RUNNER
    # ========================================================================
    "PARALLEL": 4,            # Concurrent frame workers
    "LOW_MEMORY": False,      # One frame at a time (forces PARALLEL = 1)
    "FAILURE_POLICY": "fail_fast",  # or "collect" to skip failing frames

    "LOG_LEVEL": "INFO",

    # Nested sections override the flat keys above, e.g.:
    # "tracer": {"turdsize": 4, "opttolerance": 0.5},
}
