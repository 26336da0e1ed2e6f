"""Formal pipeline invariants.

This file documents what each stage MUST produce. Use it as a reviewer
anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "decode": [
        "Frames are RGB uint8 arrays of shape (H, W, 3)",
        "Frame indices are 0..N-1 in decode order",
        "Width equals the configured max_width",
    ],

    "quantize": [
        "Palette has between 1 and color_count entries",
        "Every palette color is the rounded mean of one median-cut box",
    ],

    "classify": [
        "One layer per palette entry, in palette order",
        "Mask shape equals frame shape",
        "Every pixel is foreground (0) in exactly one mask",
    ],

    "trace": [
        "One SVG document per layer, same color",
        "viewBox is '0 0 W H' in pixels, path units are tenths of a pixel, y up",
    ],

    "parse": [
        "One data entry per traced layer, same order",
        "Path data of all <path> elements joined by single spaces",
    ],

    "generate": [
        "Layers in skip_colors produce no text",
        "Element names p{frame}_{RRGGBB} are unique across the run",
    ],

    "write": [
        "Segments are numbered 0..K-1",
        "Segment bytes <= max_segment_bytes unless it holds a single oversized line",
    ],
}

STAGE_REQUIREMENTS = {
    "decode": "REQUIRED",
    "quantize": "OPTIONAL",   # Skipped when a global palette is configured
    "classify": "REQUIRED",
    "trace": "REQUIRED",
    "parse": "REQUIRED",
    "generate": "REQUIRED",
    "write": "REQUIRED",
}
