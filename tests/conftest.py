"""Root-level pytest fixtures for the video2bas test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests use these fixtures instead of building raw dict configs.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

import numpy as np

from video2bas.schemas import ParamConfig, UserConfig, resolve_config
from video2bas.types import Frame


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_tracer_init(internal_config):
    ...     tracer = MaskTracer(internal_config)
    ...     assert tracer.method == "contours"
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs (field
    names, flat aliases or nested sections).

    Examples
    --------
    >>> def test_custom_colors(make_config):
    ...     config = make_config(color_count=2)
    ...     assert config.quantizer.color_count == 2
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


# =============================================================================
# Image Fixtures
# =============================================================================

@pytest.fixture
def two_color_frame():
    """8x8 frame: left half red, right half blue."""
    image = np.zeros((8, 8, 3), dtype=np.uint8)
    image[:, :4] = (255, 0, 0)
    image[:, 4:] = (0, 0, 255)
    return Frame(index=0, image=image)


@pytest.fixture
def make_frames():
    """Factory for synthetic frames: a white band over exactly half the
    pixels moving right on black, so median cut splits them cleanly."""
    def _make(count=3, height=12, width=16):
        frames = []
        for i in range(count):
            image = np.zeros((height, width, 3), dtype=np.uint8)
            x0 = 2 + i
            image[:, x0:x0 + width // 2] = (255, 255, 255)
            frames.append(Frame(index=i, image=image))
        return frames

    return _make
