"""
Main Input Handler Module.

This module provides the RawDocument record that enters the extraction
pipeline and the InputHandler that builds it from files on disk.

Usage:
    from warranty_invoice.input_handler import InputHandler

    handler = InputHandler()
    document = handler.load("faktura.jpg")

Classes:
    RawDocument: Immutable input bytes + media type
    InputHandler: File discovery and loading
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from warranty_invoice.config import get_config
from warranty_invoice.utils.logger import get_logger
from warranty_invoice.utils.helpers import format_file_size, get_file_extension
from warranty_invoice.utils.exceptions import (
    DecodeError,
    DocumentNotFoundError,
    InputError,
    UnsupportedFileTypeError,
)


# Initialize module logger
logger = get_logger(__name__)


MEDIA_TYPES = {
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.tif': 'image/tiff',
    '.tiff': 'image/tiff',
    '.bmp': 'image/bmp',
    '.pdf': 'application/pdf',
}


@dataclass(frozen=True)
class RawDocument:
    """
    Immutable input document.

    Attributes:
        data: Raw file bytes.
        media_type: Declared media type, e.g. 'image/jpeg' or 'application/pdf'.
        filename: Optional original file name.
    """
    data: bytes
    media_type: str = 'image/jpeg'
    filename: Optional[str] = None

    @property
    def is_pdf(self) -> bool:
        return self.media_type == 'application/pdf'

    @property
    def display_name(self) -> str:
        return self.filename or f"<{self.media_type}>"

    def __repr__(self) -> str:
        return (
            f"RawDocument(filename='{self.filename}', "
            f"media_type='{self.media_type}', "
            f"size={len(self.data)})"
        )


class InputHandler:
    """
    Loads invoice files into RawDocument records.

    Attributes:
        supported_extensions: Set of accepted file extensions.

    Example:
        >>> handler = InputHandler()
        >>> document = handler.load("faktura.pdf")
        >>> document.is_pdf
        True
    """

    def __init__(self, supported_extensions: Optional[List[str]] = None) -> None:
        extensions = supported_extensions or get_config(
            "input.supported_extensions", list(MEDIA_TYPES)
        )
        self.supported_extensions = {ext.lower() for ext in extensions}

        logger.debug(f"InputHandler initialized with extensions: {sorted(self.supported_extensions)}")

    def detect_media_type(self, filepath: Union[str, Path]) -> str:
        """
        Map a file extension to its media type.

        Raises:
            UnsupportedFileTypeError: If the extension is not accepted.
        """
        extension = get_file_extension(filepath)
        if extension not in self.supported_extensions or extension not in MEDIA_TYPES:
            raise UnsupportedFileTypeError(extension, sorted(self.supported_extensions))
        return MEDIA_TYPES[extension]

    def load(self, filepath: Union[str, Path]) -> RawDocument:
        """
        Read an invoice file into a RawDocument.

        Args:
            filepath: Path to the invoice file.

        Returns:
            RawDocument with the file bytes and detected media type.

        Raises:
            DocumentNotFoundError: If the file does not exist.
            InputError: If the path is not a regular file.
            UnsupportedFileTypeError: If the extension is not accepted.
            DecodeError: If the file is empty.
        """
        path = Path(filepath)

        if not path.exists():
            raise DocumentNotFoundError(str(filepath))
        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        media_type = self.detect_media_type(path)
        data = path.read_bytes()

        if not data:
            raise DecodeError(str(filepath), "File is empty")

        logger.info(f"Loaded {path.name} ({media_type}, {format_file_size(len(data))})")
        return RawDocument(data=data, media_type=media_type, filename=path.name)

    def discover(self, directory: Union[str, Path], recursive: bool = False) -> List[Path]:
        """
        List supported files in a directory, sorted by path.

        Raises:
            DocumentNotFoundError: If the directory does not exist.
            InputError: If the path is not a directory.
        """
        directory = Path(directory)

        if not directory.exists():
            raise DocumentNotFoundError(str(directory))
        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}")

        pattern = "**/*" if recursive else "*"
        files = sorted(
            p for p in directory.glob(pattern)
            if p.is_file() and get_file_extension(p) in self.supported_extensions
        )

        logger.info(f"Found {len(files)} invoice file(s) in {directory}")
        return files
