"""Heuristic scan of uploaded file content for suspicious code signatures.

This is NOT a malware detector. It flags any file whose text contains one
of a fixed list of patterns that commonly appear in web shells and
obfuscated scripts (calls to eval, shell execution, base64 decoding, and
so on). Legitimate files trip it often (any document that mentions
"exec(" for example, or a minified embed with a bare "<?php>" tag), and
anything that avoids these exact spellings passes. Use it as a cheap
pre-filter, never as a security guarantee.
"""

import logging
import os
import re
from typing import List, Optional, Pattern, Tuple, Union

from ..core.errors import MissingFileError

logger = logging.getLogger(__name__)

# Ordered: the first match wins and is the one reported.
MALWARE_SIGNATURES: List[Tuple[str, Pattern[str]]] = [
    ("eval", re.compile(r"eval\(", re.IGNORECASE)),
    ("base64_decode", re.compile(r"base64_decode\(", re.IGNORECASE)),
    ("exec", re.compile(r"exec\(", re.IGNORECASE)),
    ("shell_exec", re.compile(r"shell_exec\(", re.IGNORECASE)),
    ("system", re.compile(r"system\(", re.IGNORECASE)),
    ("passthru", re.compile(r"passthru\(", re.IGNORECASE)),
    ("preg_replace", re.compile(r"preg_replace\(", re.IGNORECASE)),
    ("phpinfo", re.compile(r"phpinfo\(", re.IGNORECASE)),
    ("fopen", re.compile(r"fopen\(", re.IGNORECASE)),
    ("empty_php_tag", re.compile(r"<\?php\s*?>", re.IGNORECASE)),
    # "." does not cross newlines: die( must share a line with the tag.
    ("php_die", re.compile(r"\s*<\?php\s*.*?die\(", re.IGNORECASE)),
]


def _read_text(path: Union[str, os.PathLike]) -> str:
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            return f.read()
    except OSError as e:
        raise MissingFileError(f"Cannot read file {os.fspath(path)!r}: {e}") from e


def find_malware_signature(path: Union[str, os.PathLike]) -> Optional[str]:
    """Returns the name of the first signature found in a file, if any.

    Args:
        path: The file to scan. It is read in full as UTF-8 text; bytes that
            do not decode are dropped.

    Returns:
        Optional[str]: The signature name (e.g. "eval"), or None.

    Raises:
        MissingFileError: If the file does not exist or cannot be read.
    """
    content = _read_text(path)
    for name, pattern in MALWARE_SIGNATURES:
        if pattern.search(content):
            logger.info(f"Signature '{name}' matched in {os.fspath(path)}")
            return name
    return None


def contains_malware(path: Union[str, os.PathLike]) -> bool:
    """Checks whether a file matches any of the heuristic signatures.

    See the module docstring for the limits of this check.
    """
    return find_malware_signature(path) is not None
