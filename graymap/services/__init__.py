"""Business-level operations on PixelBuffers."""
from .image_service import ImageService
from .intensity_service import IntensityService
from .geometry_service import GeometryService
from .blur_service import BlurService
from .search_service import SearchService
