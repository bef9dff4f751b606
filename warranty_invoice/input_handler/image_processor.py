"""
Image Normalizer Module.

Turns a photographed or scanned invoice into a clean black-on-white
bitmap for OCR:
    1. Decode the bytes (PDFs are rendered first)
    2. Fix orientation from EXIF data
    3. Flatten transparency onto white
    4. Cap oversized photos at a maximum width and height
    5. Upscale by a fixed factor to help small glyphs
    6. Luminance grayscale (Pillow "L": 0.299R + 0.587G + 0.114B)
    7. Fixed-threshold binarization

Coloured logos and watermarks fall above the threshold and vanish,
while black print survives.

Author: ML Engineering Team
"""

import io
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from warranty_invoice.config import get_config
from warranty_invoice.utils.logger import get_logger
from warranty_invoice.utils.exceptions import DecodeError

from .handler import RawDocument
from .pdf_processor import PDFProcessor

# Initialize module logger
logger = get_logger(__name__)

MIN_UPSCALE_FACTOR = 2


@dataclass(frozen=True, eq=False)
class NormalizedImage:
    """
    Binarized, upscaled pixel buffer ready for OCR.

    Attributes:
        pixels: 2-D uint8 array, every value 0 (ink) or 255 (paper).
        width: Width in pixels.
        height: Height in pixels.
    """
    pixels: np.ndarray = field(repr=False)
    width: int
    height: int

    def __post_init__(self) -> None:
        self.pixels.setflags(write=False)

    def to_pil(self) -> Image.Image:
        """Return the buffer as a single-channel PIL image."""
        return Image.fromarray(self.pixels)


class ImageNormalizer:
    """
    Deterministic, side-effect-free image normalizer.

    Attributes:
        upscale_factor: Integer resize factor (at least 2).
        threshold: Luminance cutoff; pixels above become white.
        max_width: Largest source width kept before upscaling.
        max_height: Largest source height kept before upscaling.
        auto_orient: Whether to apply EXIF orientation.

    Example:
        >>> normalizer = ImageNormalizer()
        >>> image = normalizer.normalize(document)
        >>> image.width, image.height
        (2400, 3200)
    """

    def __init__(
        self,
        upscale_factor: Optional[int] = None,
        threshold: Optional[int] = None,
        auto_orient: Optional[bool] = None,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
        pdf_processor: Optional[PDFProcessor] = None
    ) -> None:
        factor = upscale_factor or get_config("input.image.upscale_factor", MIN_UPSCALE_FACTOR)
        self.upscale_factor = max(int(factor), MIN_UPSCALE_FACTOR)
        self.threshold = threshold if threshold is not None else get_config(
            "input.image.binarize_threshold", 180
        )
        self.auto_orient = auto_orient if auto_orient is not None else get_config(
            "input.image.auto_orient", True
        )
        self.max_width = max_width or get_config("input.image.max_width", 2480)
        self.max_height = max_height or get_config("input.image.max_height", 3508)
        self._pdf_processor = pdf_processor

        logger.debug(
            f"ImageNormalizer initialized (factor={self.upscale_factor}, "
            f"threshold={self.threshold})"
        )

    @property
    def pdf_processor(self) -> PDFProcessor:
        if self._pdf_processor is None:
            self._pdf_processor = PDFProcessor()
        return self._pdf_processor

    def normalize(self, document: RawDocument) -> NormalizedImage:
        """
        Normalize a raw document for OCR.

        Args:
            document: Raw input document (image or PDF).

        Returns:
            NormalizedImage with values 0/255.

        Raises:
            DecodeError: If the bytes are not a readable image or PDF.
        """
        image = self.load(document)
        original_size = image.size

        image = self._upscale(self._resize_if_needed(image))
        pixels = np.array(self._binarize(image), dtype=np.uint8)

        height, width = pixels.shape
        logger.info(
            f"Normalized {document.display_name}: {original_size[0]}x{original_size[1]} "
            f"-> {width}x{height}"
        )
        return NormalizedImage(pixels=pixels, width=width, height=height)

    def load(self, document: RawDocument) -> Image.Image:
        """
        Decode a document into an upright RGB image.

        Raises:
            DecodeError: If decoding fails.
        """
        if document.is_pdf:
            image = self.pdf_processor.render_first_page(document.data, document.display_name)
        else:
            image = self._decode(document)

        if self.auto_orient:
            image = ImageOps.exif_transpose(image)

        return self._flatten(image)

    def encode_for_upload(self, document: RawDocument) -> Tuple[bytes, str]:
        """
        Produce image bytes suitable for a vision service.

        Images are sent as-is. PDFs are rendered and re-encoded as JPEG.

        Returns:
            Tuple of (bytes, media type).
        """
        if not document.is_pdf:
            # Decode once so corrupt input fails here, not at the remote end
            self._decode(document)
            return document.data, document.media_type

        buffer = io.BytesIO()
        self.load(document).save(buffer, format='JPEG', quality=90)
        return buffer.getvalue(), 'image/jpeg'

    def _decode(self, document: RawDocument) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(document.data))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error(f"Cannot decode {document.display_name}: {e}")
            raise DecodeError(document.display_name, str(e)) from e
        return image

    @staticmethod
    def _flatten(image: Image.Image) -> Image.Image:
        """Convert to RGB, compositing any alpha channel onto white."""
        if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
            image = image.convert('RGBA')
            background = Image.new('RGB', image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])
            return background

        if image.mode != 'RGB':
            image = image.convert('RGB')
        return image

    def _resize_if_needed(self, image: Image.Image) -> Image.Image:
        """Shrink to fit max_width x max_height, keeping the aspect ratio."""
        width, height = image.size
        if width <= self.max_width and height <= self.max_height:
            return image

        ratio = min(self.max_width / width, self.max_height / height)
        new_size = (max(1, int(width * ratio)), max(1, int(height * ratio)))
        logger.debug(f"Capped image from {width}x{height} to {new_size[0]}x{new_size[1]}")
        return image.resize(new_size, Image.Resampling.LANCZOS)

    def _upscale(self, image: Image.Image) -> Image.Image:
        new_size = (image.width * self.upscale_factor, image.height * self.upscale_factor)
        return image.resize(new_size, Image.Resampling.LANCZOS)

    def _binarize(self, image: Image.Image) -> Image.Image:
        threshold = self.threshold
        gray = image.convert('L')
        return gray.point(lambda x: 255 if x > threshold else 0, 'L')
