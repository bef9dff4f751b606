"""
Unit Tests - Input handling and image normalization
"""

import numpy as np
import pytest

from warranty_invoice.input_handler.handler import InputHandler, RawDocument
from warranty_invoice.input_handler.image_processor import ImageNormalizer
from warranty_invoice.utils.exceptions import (
    DecodeError,
    DocumentNotFoundError,
    UnsupportedFileTypeError,
)


class TestImageNormalizer:
    """Tests for the OCR image normalizer"""

    @pytest.fixture
    def normalizer(self):
        return ImageNormalizer()

    def test_upscales_by_factor_two(self, normalizer, png_document):
        image = normalizer.normalize(png_document)

        assert (image.width, image.height) == (80, 60)
        assert image.pixels.shape == (60, 80)

    def test_output_is_strictly_binary(self, normalizer, image_bytes):
        document = RawDocument(data=image_bytes(color=(120, 200, 90)), media_type="image/png")

        image = normalizer.normalize(document)

        assert set(np.unique(image.pixels)) <= {0, 255}

    def test_threshold_splits_light_and_dark(self, normalizer, image_bytes):
        # Neutral grey keeps its value in "L" mode; the cutoff is 180
        light = normalizer.normalize(RawDocument(image_bytes(color=(190, 190, 190)), "image/png"))
        dark = normalizer.normalize(RawDocument(image_bytes(color=(170, 170, 170)), "image/png"))

        assert (light.pixels == 255).all()
        assert (dark.pixels == 0).all()

    def test_transparent_pixels_become_white(self, normalizer, image_bytes):
        data = image_bytes(color=(0, 0, 0, 0), mode="RGBA")

        image = normalizer.normalize(RawDocument(data, "image/png"))

        assert (image.pixels == 255).all()

    def test_default_threshold_drops_light_blue_logo(self, normalizer, image_bytes):
        # Pale blue tint, luma about 190
        logo = normalizer.normalize(RawDocument(image_bytes(color=(150, 200, 240)), "image/png"))

        assert normalizer.threshold == 180
        assert (logo.pixels == 255).all()

    def test_oversized_photo_is_capped_before_upscaling(self, image_bytes):
        normalizer = ImageNormalizer(max_width=100, max_height=100)
        document = RawDocument(image_bytes(size=(400, 300), color=(0, 0, 0)), "image/png")

        image = normalizer.normalize(document)

        assert (image.width, image.height) == (200, 150)
        assert image.pixels.dtype == np.uint8

    def test_small_images_are_not_capped(self, image_bytes):
        normalizer = ImageNormalizer(max_width=100, max_height=100)
        document = RawDocument(image_bytes(size=(100, 50)), "image/png")

        assert normalizer.normalize(document).width == 200

    def test_upscale_factor_below_two_is_raised(self):
        assert ImageNormalizer(upscale_factor=1).upscale_factor == 2

    def test_pixels_are_read_only(self, normalizer, png_document):
        image = normalizer.normalize(png_document)

        with pytest.raises(ValueError):
            image.pixels[0, 0] = 0

    def test_garbage_bytes_raise_decode_error(self, normalizer):
        with pytest.raises(DecodeError):
            normalizer.normalize(RawDocument(b"not an image", "image/jpeg", "broken.jpg"))

    def test_encode_for_upload_passes_images_through(self, normalizer, png_document):
        data, media_type = normalizer.encode_for_upload(png_document)

        assert data == png_document.data
        assert media_type == "image/png"

    def test_to_pil_round_trips_dimensions(self, normalizer, png_document):
        pil_image = normalizer.normalize(png_document).to_pil()

        assert pil_image.size == (80, 60)
        assert pil_image.mode == "L"


class TestInputHandler:
    """Tests for loading documents from disk"""

    def test_load_image(self, tmp_path, image_bytes):
        path = tmp_path / "faktura.png"
        path.write_bytes(image_bytes())

        document = InputHandler().load(path)

        assert document.media_type == "image/png"
        assert document.filename == "faktura.png"
        assert not document.is_pdf

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentNotFoundError):
            InputHandler().load(tmp_path / "nope.jpg")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "faktura.docx"
        path.write_bytes(b"x")

        with pytest.raises(UnsupportedFileTypeError):
            InputHandler().load(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.jpg"
        path.write_bytes(b"")

        with pytest.raises(DecodeError):
            InputHandler().load(path)

    def test_discover_filters_and_sorts(self, tmp_path, image_bytes):
        for name in ("b.jpg", "a.png", "notes.txt"):
            (tmp_path / name).write_bytes(image_bytes())

        found = InputHandler().discover(tmp_path)

        assert [p.name for p in found] == ["a.png", "b.jpg"]
