"""Value objects: the pixel buffer and what operations report back."""
from .errors import AllocationError, ContractError, ImageError, RasterFormatError, RasterIOError
from .instrumentation import Instrumentation, NullInstrumentation
from .pixel_buffer import PixelBuffer
from .result import Result
from .search_result import ComparisonCounter, SearchResult
from .summed_area_table import SummedAreaTable
