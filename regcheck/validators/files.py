"""Checks for uploaded files: extension allow-lists, byte sizes, and pixel
dimensions.

Extension checks look only at the path. Size and dimension checks read the
file, and raise `MissingFileError` when it does not exist or cannot be read
rather than returning a verdict.
"""

import logging
import os
import struct
from typing import Iterable, Tuple, Union

from PIL import Image, UnidentifiedImageError

from ..core.errors import MissingFileError, ParseError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

DEFAULT_MAX_IMAGE_SIZE = 2 * 1024 * 1024
DEFAULT_MAX_DOCUMENT_SIZE = 5 * 1024 * 1024

IMAGE_EXTENSIONS = frozenset({
    "jpg", "jpeg", "png", "gif", "bmp", "webp", "tiff", "svg", "ico", "heif", "heic",
})

DOCUMENT_EXTENSIONS = frozenset({
    "pdf",    # Portable Document Format
    "rtf",    # Rich Text Format
    "doc",    # Word 97-2003
    "docx",   # Word 2007+
    "txt",
    "odt",    # OpenDocument Text
    "wps",    # Microsoft Works
    "dot",    # Word template
    "dotx",   # Word 2007+ template
    "xml",
    "xls",    # Excel 97-2003
    "xlsx",   # Excel 2007+
    "ppt",    # PowerPoint 97-2003
    "pptx",   # PowerPoint 2007+
    "csv",
    "epub",
    "md",
    "pages",  # Apple Pages
})


def get_extension(path: PathLike) -> str:
    """Returns the lower-cased extension of a path, without the dot.

    The extension is whatever follows the last "." of the final path
    component, so ".htaccess" yields "htaccess" and "archive.tar.gz" yields
    "gz". A name without a dot has no extension.
    """
    name = os.path.basename(os.fspath(path))
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def get_file_size(path: PathLike) -> int:
    """Returns the size of a file in bytes.

    Raises:
        MissingFileError: If the file does not exist or cannot be stat'ed.
    """
    try:
        return os.stat(path).st_size
    except OSError as e:
        raise MissingFileError(f"Cannot read file {os.fspath(path)!r}: {e}") from e


def get_image_dimensions(path: PathLike) -> Tuple[int, int]:
    """Reads the pixel width and height from an image header.

    Pillow opens images lazily, so only the header is decoded. Headers that
    trip Pillow's decompression-bomb limit still yield their dimensions.

    Returns:
        Tuple[int, int]: The (width, height) of the image.

    Raises:
        MissingFileError: If the file does not exist or cannot be opened.
        ParseError: If the file is not an image format Pillow can identify.
    """
    try:
        with Image.open(path) as img:
            return img.size
    except Image.DecompressionBombError:
        logger.info(f"Image header of {os.fspath(path)!r} exceeds Pillow's pixel limit")
        return _read_header_size(path)
    except UnidentifiedImageError as e:
        raise ParseError(f"Cannot decode image header of {os.fspath(path)!r}") from e
    except OSError as e:
        raise MissingFileError(f"Cannot read file {os.fspath(path)!r}: {e}") from e


def _read_header_size(path: PathLike) -> Tuple[int, int]:
    """Reads the header size through Pillow's format registry.

    This mirrors how `Image.open` picks a format plugin, minus the pixel
    limit `Image.open` enforces afterwards.
    """
    Image.init()
    try:
        with open(path, "rb") as fp:
            prefix = fp.read(16)
            for format_id in Image.ID:
                factory, accept = Image.OPEN[format_id]
                if accept is not None:
                    accepted = accept(prefix)
                    # A str result is a warning message, not a match.
                    if not accepted or isinstance(accepted, str):
                        continue
                fp.seek(0)
                try:
                    return factory(fp, os.fspath(path)).size
                except (SyntaxError, IndexError, TypeError, EOFError, struct.error):
                    continue
    except OSError as e:
        raise MissingFileError(f"Cannot read file {os.fspath(path)!r}: {e}") from e
    raise ParseError(f"Cannot decode image header of {os.fspath(path)!r}")


def _has_extension_and_fits(path: PathLike, extensions: Iterable[str], max_size: int) -> bool:
    extension = get_extension(path)
    if extension not in extensions:
        logger.debug(f"Extension {extension!r} of {os.fspath(path)!r} is not allowed")
        return False
    return get_file_size(path) <= max_size


def is_valid_image(path: PathLike, max_size: int = DEFAULT_MAX_IMAGE_SIZE) -> bool:
    """Checks that a file has an image extension and is at most `max_size` bytes.

    Args:
        path (PathLike): The file to check.
        max_size (int): The size limit in bytes. Defaults to 2 MiB.

    Returns:
        bool: True if both the extension and the size are acceptable.

    Raises:
        MissingFileError: If the extension is acceptable but the file is missing.
    """
    return _has_extension_and_fits(path, IMAGE_EXTENSIONS, max_size)


def is_valid_document(path: PathLike, max_size: int = DEFAULT_MAX_DOCUMENT_SIZE) -> bool:
    """Checks that a file has a document extension and is at most `max_size` bytes.

    Args:
        path (PathLike): The file to check.
        max_size (int): The size limit in bytes. Defaults to 5 MiB.

    Returns:
        bool: True if both the extension and the size are acceptable.

    Raises:
        MissingFileError: If the extension is acceptable but the file is missing.
    """
    return _has_extension_and_fits(path, DOCUMENT_EXTENSIONS, max_size)


def is_valid_custom_extension(path: PathLike, allowed_extensions: Iterable[str]) -> bool:
    """Checks a file's extension against a caller-supplied allow-list.

    Both sides are compared lower-cased, and a leading dot on an allowed
    entry is ignored, so "IMAGE.JPG" matches "jpg" and ".jpg". No I/O.
    """
    allowed = {ext.lower().lstrip(".") for ext in allowed_extensions}
    return get_extension(path) in allowed


def has_minimum_dimensions(path: PathLike, min_width: int, min_height: int) -> bool:
    """Checks that an image is at least `min_width` x `min_height` pixels."""
    width, height = get_image_dimensions(path)
    return width >= min_width and height >= min_height


def exceeds_maximum_dimensions(path: PathLike, max_width: int, max_height: int) -> bool:
    """Checks whether an image is wider than `max_width` or taller than `max_height`."""
    width, height = get_image_dimensions(path)
    return width > max_width or height > max_height


def meets_minimum_size(path: PathLike, min_size: int) -> bool:
    return get_file_size(path) >= min_size


def exceeds_maximum_size(path: PathLike, max_size: int) -> bool:
    return get_file_size(path) > max_size
