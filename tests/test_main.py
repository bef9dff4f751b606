"""
Unit Tests - Command-line entry point
"""

import json

from warranty_invoice import main as cli
from warranty_invoice.ocr_engine import tesseract_backend


class FakeTesseract:
    def __init__(self, text):
        self.text = text

    def get_tesseract_version(self):
        return "5.3.0"

    def image_to_string(self, image, lang=None, config=None):
        return self.text


class TestCommandLine:
    """Tests for running the pipeline over files"""

    def test_directory_run_writes_json(self, tmp_path, monkeypatch, image_bytes, sample_text):
        monkeypatch.setattr(tesseract_backend, "pytesseract", FakeTesseract(sample_text))
        inbox = tmp_path / "inbox"
        inbox.mkdir()
        (inbox / "faktura_1.png").write_bytes(image_bytes())
        (inbox / "readme.txt").write_text("ignored")
        out = tmp_path / "out"

        exit_code = cli.main(["--input", str(inbox), "--output", str(out), "--no-ai", "--quiet"])

        assert exit_code == 0
        written = json.loads((out / "faktura_1.json").read_text(encoding="utf-8"))
        assert written["invoiceNumber"] == "2313044"
        assert written["laborCost"] == 1950.0
        assert written["source"] == "DETERMINISTIC"

    def test_unreadable_file_is_skipped(self, tmp_path, monkeypatch):
        monkeypatch.setattr(tesseract_backend, "pytesseract", FakeTesseract("x"))
        bad = tmp_path / "broken.jpg"
        bad.write_bytes(b"not an image")

        results = cli.run_extraction(str(bad), use_ai=False)

        assert results == []

    def test_missing_input(self, tmp_path):
        assert cli.main(["--input", str(tmp_path / "missing.jpg"), "--quiet"]) == 1
