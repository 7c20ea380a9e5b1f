"""In-memory 8-bit grayscale images: PGM I/O, point and geometric transforms, box blur and subimage search."""
from .models.errors import (
    AllocationError,
    ContractError,
    ImageError,
    RasterFormatError,
    RasterIOError,
)
from .models.pixel_buffer import PixelBuffer
from .models.search_result import SearchResult
from .services.image_service import ImageService
from .services.intensity_service import IntensityService
from .services.geometry_service import GeometryService
from .services.blur_service import BlurService
from .services.search_service import SearchService

__version__ = "1.0.0"
