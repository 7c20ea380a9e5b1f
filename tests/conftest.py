"""Shared fixtures for the graymap test suite."""
import numpy as np
import pytest

from graymap.models.instrumentation import Instrumentation
from graymap.services.image_service import ImageService


@pytest.fixture
def image_service():
    """ImageService counting pixel accesses regardless of the environment."""
    return ImageService(Instrumentation())


@pytest.fixture
def make_image(image_service):
    """Build a PixelBuffer from a list of rows."""
    def _make(rows, maxval=255):
        return image_service.from_array(np.array(rows, dtype=np.uint8), maxval)
    return _make


@pytest.fixture
def random_image(image_service):
    """Build a PixelBuffer of reproducible random levels in [0, maxval]."""
    def _make(width, height, maxval=255, seed=0):
        rng = np.random.default_rng(seed)
        levels = rng.integers(0, maxval, size=(height, width), dtype=np.uint8, endpoint=True)
        return image_service.from_array(levels, maxval)
    return _make
