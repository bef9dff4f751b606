"""
PDF Processor Module.

Renders the first page of a PDF document to a bitmap so it can travel
through the same normalization and OCR path as a photographed invoice.
Only the first page is used: supplier invoices in this flow are single
page documents and all header fields live on page one.

Two renderers are supported:
    - PyMuPDF (default, no external binaries)
    - pdf2image (Poppler based)

Author: ML Engineering Team
"""

import io
from typing import Optional

import fitz  # PyMuPDF
import pdf2image
from PIL import Image

from warranty_invoice.config import get_config
from warranty_invoice.utils.logger import get_logger
from warranty_invoice.utils.exceptions import DecodeError

# Initialize module logger
logger = get_logger(__name__)


class PDFProcessor:
    """
    Renderer for single-page PDF invoices.

    Attributes:
        dpi: Resolution for PDF to image conversion
        renderer: 'pymupdf' or 'pdf2image'

    Example:
        >>> processor = PDFProcessor()
        >>> page = processor.render_first_page(pdf_bytes, "faktura.pdf")
        >>> page.size
        (2480, 3508)
    """

    RENDERERS = ('pymupdf', 'pdf2image')

    def __init__(self, dpi: Optional[int] = None, renderer: Optional[str] = None) -> None:
        """
        Initialize the PDF processor with configuration.

        Args:
            dpi: Rendering resolution. Defaults to input.pdf.dpi.
            renderer: Rendering backend. Defaults to input.pdf.renderer.
        """
        self.dpi = dpi or get_config("input.pdf.dpi", 300)
        self.renderer = (renderer or get_config("input.pdf.renderer", "pymupdf")).lower()

        if self.renderer not in self.RENDERERS:
            raise ValueError(
                f"Unknown PDF renderer '{self.renderer}'. Choose from {self.RENDERERS}"
            )

        logger.debug(f"PDFProcessor initialized (DPI={self.dpi}, renderer={self.renderer})")

    def render_first_page(self, data: bytes, source: str = "<bytes>") -> Image.Image:
        """
        Render page one of a PDF to an RGB image.

        Args:
            data: Raw PDF bytes.
            source: Name used in log lines and error details.

        Returns:
            RGB PIL Image of the first page.

        Raises:
            DecodeError: If the PDF cannot be opened or has no pages.
        """
        logger.info(f"Rendering first PDF page: {source}")

        if self.renderer == 'pymupdf':
            image = self._render_with_pymupdf(data, source)
        else:
            image = self._render_with_pdf2image(data, source)

        if image.mode != 'RGB':
            image = image.convert('RGB')

        logger.debug(f"Rendered PDF page at {image.width}x{image.height}")
        return image

    def _render_with_pymupdf(self, data: bytes, source: str) -> Image.Image:
        """Render using PyMuPDF."""
        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                if doc.page_count == 0:
                    raise DecodeError(source, "PDF has no pages")

                page = doc.load_page(0)

                # Default PDF resolution is 72 DPI
                zoom = self.dpi / 72.0
                pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom))
                img_data = pix.tobytes("png")

            image = Image.open(io.BytesIO(img_data))
            image.load()
            return image

        except DecodeError:
            raise
        except Exception as e:
            logger.error(f"PyMuPDF rendering failed for {source}: {e}")
            raise DecodeError(source, str(e)) from e

    def _render_with_pdf2image(self, data: bytes, source: str) -> Image.Image:
        """Render using pdf2image (requires Poppler)."""
        try:
            pages = pdf2image.convert_from_bytes(
                data,
                dpi=self.dpi,
                first_page=1,
                last_page=1,
                fmt='png'
            )
        except Exception as e:
            logger.error(f"pdf2image rendering failed for {source}: {e}")
            raise DecodeError(source, str(e)) from e

        if not pages:
            raise DecodeError(source, "PDF has no pages")

        return pages[0]
