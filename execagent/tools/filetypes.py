"""Binary detection and image format validation for the read tool."""

from __future__ import annotations

from pathlib import Path

from execagent.constants import BINARY_NON_PRINTABLE_RATIO, BINARY_SNIFF_BYTES

BINARY_EXTENSIONS = frozenset({
    ".zip", ".tar", ".gz", ".exe", ".dll", ".so", ".class", ".jar", ".war", ".7z",
    ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt", ".ods", ".odp",
    ".bin", ".dat", ".obj", ".o", ".a", ".lib", ".wasm", ".pyc", ".pyo",
})

IMAGE_FORMATS: dict[str, str] = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
    ".bmp": "BMP",
    ".webp": "WebP",
    ".tiff": "TIFF",
    ".tif": "TIFF",
    ".svg": "SVG",
    ".ico": "ICO",
    ".avif": "AVIF",
}

IMAGE_MIME_TYPES: dict[str, str] = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "BMP": "image/bmp",
    "WebP": "image/webp",
    "TIFF": "image/tiff",
    "SVG": "image/svg+xml",
    "ICO": "image/x-icon",
    "AVIF": "image/avif",
}

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"
GIF_SIGNATURE = b"GIF8"
BMP_SIGNATURE = b"BM"
WEBP_RIFF = b"RIFF"
WEBP_TAG = b"WEBP"
TIFF_LE = b"II*\x00"
TIFF_BE = b"MM\x00*"
ICO_SIGNATURE = b"\x00\x00\x01\x00"


def is_binary_extension(path: Path) -> bool:
    return path.suffix.lower() in BINARY_EXTENSIONS


def image_format(path: Path) -> str | None:
    """Image format name for a recognized image extension, else None."""
    return IMAGE_FORMATS.get(path.suffix.lower())


def is_binary_file(path: Path, content: bytes) -> bool:
    """Classify content as binary.

    Known binary extensions always are. Otherwise the first 4KB are sniffed:
    any null byte, or more than 30% control bytes outside TAB..CR.
    """
    if is_binary_extension(path):
        return True
    if not content:
        return False

    sample = content[:BINARY_SNIFF_BYTES]
    if b"\x00" in sample:
        return True

    non_printable = sum(1 for b in sample if b < 9 or 13 < b < 32)
    return non_printable / len(sample) > BINARY_NON_PRINTABLE_RATIO


def validate_image_format(data: bytes, expected_format: str) -> bool:
    """Check that data starts with the magic bytes of expected_format."""
    if len(data) < 8 and expected_format != "SVG":
        return False

    match expected_format:
        case "PNG":
            return data.startswith(PNG_SIGNATURE)
        case "JPEG":
            return data.startswith(JPEG_SIGNATURE)
        case "GIF":
            return data.startswith(GIF_SIGNATURE)
        case "BMP":
            return data.startswith(BMP_SIGNATURE)
        case "WebP":
            return data.startswith(WEBP_RIFF) and len(data) >= 12 and data[8:12] == WEBP_TAG
        case "TIFF":
            return data.startswith(TIFF_LE) or data.startswith(TIFF_BE)
        case "ICO":
            return data.startswith(ICO_SIGNATURE)
        case "SVG":
            head = data[:1000].decode("utf-8", errors="replace")
            return "<svg" in head or "<?xml" in head
        case "AVIF":
            return len(data) >= 12 and data[4:8] == b"ftyp" and data[8:12] in (b"avif", b"avis")
        case _:
            return True
