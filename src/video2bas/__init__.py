"""`video2bas` - video to palette-layered vector animation script.

Subpackages:
- raster: Frame decoding, palette quantization, layer classification
- vector: Tracing, SVG parsing, path transformation, script generation
- pipeline: Batch runner, frame processor, segment writer, orchestrator
- schemas: Pydantic configuration
"""

__version__ = "0.1.0"
