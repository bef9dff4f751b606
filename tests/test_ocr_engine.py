"""
Unit Tests - Tesseract OCR adapter

pytesseract is monkeypatched; the Tesseract binary is not needed.
"""

import pytest
from PIL import Image

from warranty_invoice.ocr_engine import engine as engine_module
from warranty_invoice.ocr_engine import tesseract_backend
from warranty_invoice.ocr_engine.engine import OCREngine
from warranty_invoice.ocr_engine.ocr_result import OcrText
from warranty_invoice.ocr_engine.tesseract_backend import TesseractBackend
from warranty_invoice.utils.exceptions import OcrEngineError


class FakeTesseract:
    """Stand-in for the pytesseract module."""

    class Output:
        DICT = "dict"

    def __init__(self, text="", data=None, version="5.3.0", error=None):
        self.text = text
        self.data = data
        self.version = version
        self.error = error
        self.calls = []

    def get_tesseract_version(self):
        if self.version is None:
            raise EnvironmentError("tesseract is not installed")
        return self.version

    def image_to_string(self, image, lang=None, config=None):
        self.calls.append({"lang": lang, "config": config})
        if self.error:
            raise self.error
        return self.text

    def image_to_data(self, image, lang=None, config=None, output_type=None):
        self.calls.append({"lang": lang, "config": config, "output_type": output_type})
        return self.data


@pytest.fixture
def blank_image():
    return Image.new("L", (20, 20), 255)


def install(monkeypatch, fake):
    monkeypatch.setattr(tesseract_backend, "pytesseract", fake)
    return fake


class TestTesseractBackend:
    """Tests for the Tesseract backend configuration and output"""

    def test_config_string(self, monkeypatch):
        install(monkeypatch, FakeTesseract())

        config = TesseractBackend().build_config()

        assert "--psm 6" in config
        assert "--dpi 300" in config
        assert "preserve_interword_spaces=1" in config
        assert "tessedit_char_whitelist=" in config

    def test_norwegian_language_pack(self, monkeypatch, blank_image):
        fake = install(monkeypatch, FakeTesseract(text="Faktura nr. 2313044\n"))

        TesseractBackend().extract(blank_image)

        assert fake.calls[0]["lang"] == "nor+eng"

    def test_lines_keep_double_spaces(self, monkeypatch, blank_image):
        install(monkeypatch, FakeTesseract(text="T1  Arbeid  3,00  650,00  1 950,00\n\n"))

        ocr_text = TesseractBackend().extract(blank_image)

        assert ocr_text.lines[0].text == "T1  Arbeid  3,00  650,00  1 950,00"

    def test_missing_binary_raises(self, monkeypatch):
        install(monkeypatch, FakeTesseract(version=None))

        with pytest.raises(OcrEngineError):
            TesseractBackend()

    def test_crash_raises(self, monkeypatch, blank_image):
        install(monkeypatch, FakeTesseract(error=RuntimeError("segfault")))

        with pytest.raises(OcrEngineError):
            TesseractBackend().extract(blank_image)

    def test_data_mode_inserts_column_gaps(self, monkeypatch, blank_image):
        data = {
            "text": ["T1", "Arbeid", "650,00"],
            "left": [10, 40, 300],
            "top": [5, 5, 5],
            "width": [20, 50, 60],
            "height": [20, 20, 20],
            "conf": [95, 90, 88],
            "block_num": [1, 1, 1],
            "par_num": [1, 1, 1],
            "line_num": [1, 1, 1],
        }
        install(monkeypatch, FakeTesseract(data=data))

        ocr_text = TesseractBackend(mode="data").extract(blank_image)

        assert ocr_text.lines[0].text == "T1 Arbeid  650,00"


class TestOCREngine:
    """Tests for the engine facade"""

    def test_empty_output_is_an_error(self, monkeypatch, blank_image):
        install(monkeypatch, FakeTesseract(text="   \n\n"))

        with pytest.raises(OcrEngineError):
            OCREngine().recognize(blank_image)

    def test_recognize_returns_lines(self, monkeypatch, blank_image):
        install(monkeypatch, FakeTesseract(text="Faktura nr. 2313044\nFakturadato: 03.11.2023"))

        ocr_text = OCREngine().recognize(blank_image)

        assert isinstance(ocr_text, OcrText)
        assert ocr_text.line_count == 2
        assert "2313044" in ocr_text.text

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setattr(engine_module, "get_config", lambda key, default=None: "easyocr")

        with pytest.raises(ValueError):
            OCREngine()
