"""ImageService: lifecycle, Result-style I/O, instrumentation and Pillow interop."""
import errno

import numpy as np
import pytest
from PIL import Image as PILImage

from graymap.models.errors import ContractError, RasterIOError
from graymap.models.instrumentation import NullInstrumentation
from graymap.services.image_service import ImageService


def test_try_load_missing_file(image_service, tmp_path):
    result = image_service.try_load(tmp_path / "missing.pgm")
    assert not result.ok
    assert result.value is None
    assert result.cause == "Open failed"
    assert result.errno == errno.ENOENT
    with pytest.raises(RasterIOError):
        result.unwrap()


def test_try_load_malformed_file(image_service, tmp_path):
    path = tmp_path / "short.pgm"
    path.write_bytes(b"P5\n4 4\n255\n" + bytes(10))
    result = image_service.try_load(path)
    assert not result.ok
    assert result.cause == "Reading pixels"


def test_try_save_then_try_load(image_service, make_image, tmp_path):
    img = make_image([[10, 20], [30, 40]], maxval=50)
    saved = image_service.try_save(img, tmp_path / "img.pgm")
    assert saved.ok
    loaded = image_service.try_load(saved.unwrap())
    assert loaded.ok
    assert loaded.unwrap() == img


def test_try_save_failure(image_service, make_image, tmp_path):
    result = image_service.try_save(make_image([[1]]), tmp_path / "no" / "dir.pgm")
    assert not result.ok
    assert result.errno == errno.ENOENT


def test_load_and_save_count_pixel_accesses(image_service, make_image, tmp_path):
    img = make_image([[1, 2, 3], [4, 5, 6]])
    start = image_service.pixel_accesses
    image_service.save(img, tmp_path / "count.pgm")
    assert image_service.pixel_accesses == start + 6
    image_service.load(tmp_path / "count.pgm")
    assert image_service.pixel_accesses == start + 12


def test_instrumentation_can_be_disabled(monkeypatch):
    monkeypatch.setenv("GRAYMAP_INSTRUMENTATION", "0")
    service = ImageService()
    assert isinstance(service.instrumentation, NullInstrumentation)
    img = service.create_image(2, 2, 255)
    img.set_pixel(0, 0, 1)
    img.get_pixel(0, 0)
    assert service.pixel_accesses == 0


def test_release(image_service):
    img = image_service.create_image(3, 3, 255)
    image_service.release(img)
    assert img.released
    with pytest.raises(ContractError):
        img.set_pixel(0, 0, 1)


def test_from_array_saturates_to_maxval(image_service):
    img = image_service.from_array(np.array([[0, 50, 200]], dtype=np.uint8), maxval=100)
    assert img.samples.tolist() == [0, 50, 100]
    assert image_service.get_image_dimensions(img) == (1, 3)
    assert image_service.get_stats(img) == (0, 100)


def test_pil_round_trip(image_service, random_image):
    img = random_image(8, 5, seed=11)
    pil = image_service.to_pil_image(img)
    assert pil.mode == "L"
    assert pil.size == (8, 5)
    back = image_service.from_pil_image(pil)
    assert back == img


def test_from_pil_image_converts_color(image_service):
    pil = PILImage.new("RGB", (3, 2), (255, 255, 255))
    img = image_service.from_pil_image(pil, maxval=200)
    assert (img.width, img.height, img.maxval) == (3, 2, 200)
    assert img.samples.tolist() == [200] * 6


def test_stream_and_save_gallery(image_service, make_image, tmp_path):
    first = make_image([[1, 2]])
    first.path = tmp_path / "first.pgm"
    second = make_image([[3, 4]])
    second.path = tmp_path / "second.pgm"
    assert image_service.save_gallery([first, second]) == [first.path, second.path]

    streamed = list(image_service.stream_gallery(tmp_path))
    assert streamed == [first, second]


def test_instrumentation_reset(image_service, make_image):
    img = make_image([[1, 2]])
    img.get_pixel(0, 0)
    assert image_service.pixel_accesses > 0
    image_service.instrumentation.reset()
    assert image_service.pixel_accesses == 0


def test_from_array_rounds_fractional_levels(image_service):
    img = image_service.from_array(np.array([[1.7, 2.5, 0.4, -3.0, 300.0]]))
    assert img.samples.tolist() == [2, 3, 0, 0, 255]
