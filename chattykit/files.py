"""Loading, checking and preparing files that are attached to chat messages."""

from __future__ import annotations

import hashlib
import io
import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from PIL import Image

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_IMAGE_QUALITY = 85
DEFAULT_MAX_IMAGE_DIMENSION = 2048

SUPPORTED_IMAGE_TYPES = (
    "image/jpeg", "image/jpg", "image/png", "image/gif",
    "image/bmp", "image/webp", "image/svg+xml",
)

SUPPORTED_DOCUMENT_TYPES = (
    "text/plain", "text/markdown", "text/csv",
    "application/pdf", "application/json", "application/xml",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
)

SUPPORTED_CODE_TYPES = (
    "text/x-c", "text/x-cpp", "text/x-java", "text/x-python", "text/x-scala",
    "text/javascript", "text/typescript", "text/css", "text/html", "text/xml",
)

_IMAGE_EXTENSIONS = ("*.jpg", "*.jpeg", "*.png", "*.gif", "*.bmp", "*.webp", "*.svg")
_DOCUMENT_EXTENSIONS = (
    "*.txt", "*.md", "*.csv", "*.pdf", "*.json", "*.xml",
    "*.doc", "*.docx", "*.xls", "*.xlsx", "*.ppt", "*.pptx",
)
_CODE_EXTENSIONS = (
    "*.c", "*.cpp", "*.h", "*.hpp", "*.java", "*.py", "*.scala",
    "*.js", "*.ts", "*.css", "*.html", "*.htm", "*.xml",
)

_MIME_BY_EXTENSION = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".pdf": "application/pdf",
    ".json": "application/json",
    ".xml": "application/xml",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".c": "text/x-c",
    ".h": "text/x-c",
    ".cpp": "text/x-cpp",
    ".hpp": "text/x-cpp",
    ".java": "text/x-java",
    ".py": "text/x-python",
    ".scala": "text/x-scala",
    ".js": "text/javascript",
    ".ts": "text/typescript",
    ".css": "text/css",
    ".html": "text/html",
    ".htm": "text/html",
}

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024


class FileProcessingError(Exception):
    """A file could not be read, checked or written."""


@dataclass
class ProcessedFile:
    """A file ready to be attached: its kind, name, MIME type, bytes and id."""

    kind: str
    filename: str
    mime_type: str
    data: bytes
    id: str


def format_file_size(size: int) -> str:
    """A size in whole bytes, KB, MB or GB (units truncated to an integer)."""
    if size >= _GB:
        return f"{size // _GB:.1f} GB"
    if size >= _MB:
        return f"{size // _MB:.1f} MB"
    if size >= _KB:
        return f"{size // _KB:.1f} KB"
    return f"{size} bytes"


def generate_file_id(data: bytes) -> str:
    """The SHA-256 digest of ``data`` as lower-case hex."""
    return hashlib.sha256(data).hexdigest()


def _sniff_mime_type(data: bytes) -> str:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    if data.startswith(b"BM"):
        return "image/bmp"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data.startswith(b"%PDF"):
        return "application/pdf"
    if b"\x00" not in data:
        try:
            data.decode("utf-8")
        except UnicodeDecodeError:
            pass
        else:
            return "text/plain"
    return "application/octet-stream"


def _mime_type_for(filename: str, data: bytes) -> str:
    extension = os.path.splitext(filename)[1].lower()
    if extension in _MIME_BY_EXTENSION:
        return _MIME_BY_EXTENSION[extension]
    guessed, _ = mimetypes.guess_type(filename)
    if guessed:
        return guessed
    return _sniff_mime_type(data)


def _has_alpha(image: Image.Image) -> bool:
    if image.mode in ("RGBA", "LA", "PA", "La", "RGBa"):
        return True
    return image.mode == "P" and "transparency" in image.info


class FileManager:
    """Checks files against size and type limits and prepares them for upload."""

    def __init__(
        self,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        image_quality: int = DEFAULT_IMAGE_QUALITY,
        max_image_dimension: int = DEFAULT_MAX_IMAGE_DIMENSION,
    ) -> None:
        self.max_file_size = max_file_size
        self.image_quality = image_quality
        self.max_image_dimension = max_image_dimension
        self.supported_image_types: tuple[str, ...] = SUPPORTED_IMAGE_TYPES
        self.supported_document_types: tuple[str, ...] = SUPPORTED_DOCUMENT_TYPES
        self.supported_code_types: tuple[str, ...] = SUPPORTED_CODE_TYPES

    @property
    def image_quality(self) -> int:
        return self._image_quality

    @image_quality.setter
    def image_quality(self, quality: int) -> None:
        self._image_quality = max(1, min(quality, 100))

    @property
    def max_image_dimension(self) -> int:
        return self._max_image_dimension

    @max_image_dimension.setter
    def max_image_dimension(self, dimension: int) -> None:
        self._max_image_dimension = max(100, dimension)

    def process_file(self, file_path: str | os.PathLike[str]) -> ProcessedFile:
        """Read, check and prepare one file; raise FileProcessingError if it fails."""
        path = Path(file_path)
        if not path.is_file() or not os.access(path, os.R_OK):
            raise FileProcessingError(
                f"File does not exist or is not readable: {file_path}"
            )

        size = path.stat().st_size
        if size > self.max_file_size:
            raise FileProcessingError(
                f"File size ({format_file_size(size)}) exceeds maximum allowed size "
                f"({format_file_size(self.max_file_size)})"
            )

        try:
            data = path.read_bytes()
        except OSError as exc:
            raise FileProcessingError(f"Failed to open file: {file_path}") from exc

        mime_type = _mime_type_for(path.name, data)
        if not self.is_file_type_supported(mime_type):
            raise FileProcessingError(f"Unsupported file type: {mime_type}")

        if self.is_image_file(mime_type):
            data = self.process_image(data, mime_type)
            kind = "image"
        elif self.is_document_file(mime_type) or self.is_code_file(mime_type):
            kind = "document"
        else:
            kind = "file"

        return ProcessedFile(
            kind=kind,
            filename=path.name,
            mime_type=mime_type,
            data=data,
            id=generate_file_id(data),
        )

    def process_files(
        self, file_paths: Iterable[str | os.PathLike[str]]
    ) -> list[ProcessedFile]:
        """Process each file in turn, leaving out those that fail."""
        processed = []
        for file_path in file_paths:
            try:
                processed.append(self.process_file(file_path))
            except FileProcessingError:
                continue
        return processed

    def process_image(self, image_data: bytes, mime_type: str) -> bytes:
        """Shrink and recompress an image; return the input if that fails."""
        try:
            image = Image.open(io.BytesIO(image_data))
            image.load()
        except (OSError, ValueError, SyntaxError):
            return image_data

        limit = self.max_image_dimension
        if image.width > limit or image.height > limit:
            image.thumbnail((limit, limit), Image.Resampling.LANCZOS)

        if mime_type == "image/png" and _has_alpha(image):
            output_format = "PNG"
        else:
            output_format = "JPEG"
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")

        buffer = io.BytesIO()
        try:
            image.save(buffer, format=output_format, quality=self.image_quality)
        except (OSError, ValueError):
            return image_data
        return buffer.getvalue()

    def is_file_type_supported(self, mime_type: str) -> bool:
        return (
            self.is_image_file(mime_type)
            or self.is_document_file(mime_type)
            or self.is_code_file(mime_type)
        )

    def is_image_file(self, mime_type: str) -> bool:
        return mime_type in self.supported_image_types

    def is_document_file(self, mime_type: str) -> bool:
        return mime_type in self.supported_document_types

    def is_code_file(self, mime_type: str) -> bool:
        return mime_type in self.supported_code_types

    def file_filter(self) -> str:
        """A file-dialog filter string listing the supported extensions."""
        all_extensions = [*_IMAGE_EXTENSIONS, *_DOCUMENT_EXTENSIONS, *_CODE_EXTENSIONS]
        filters = [
            "All Supported Files (" + " ".join(all_extensions) + ")",
            "Image Files (" + " ".join(_IMAGE_EXTENSIONS) + ")",
            "Document Files (" + " ".join(_DOCUMENT_EXTENSIONS) + ")",
            "Code Files (" + " ".join(_CODE_EXTENSIONS) + ")",
            "All Files (*.*)",
        ]
        return ";;".join(filters)

    def save_file(self, file_path: str | os.PathLike[str], data: bytes) -> None:
        """Write ``data`` to ``file_path``; raise FileProcessingError on failure."""
        try:
            with open(file_path, "wb") as handle:
                written = handle.write(data)
        except OSError as exc:
            raise FileProcessingError(f"Failed to create file: {file_path}") from exc
        if written != len(data):
            raise FileProcessingError(f"Failed to write complete file: {file_path}")