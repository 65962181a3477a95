"""Display-name normalization for strict function-name consumers.

Some MCP clients (Gemini among them) require tool/server names to:

* start with a letter or underscore,
* contain only ``a-z``, ``A-Z``, ``0-9``, ``_``, ``.``, ``:`` or ``-``,
* be at most 64 characters long.

:func:`normalize_name` maps any display name onto that alphabet.
"""

from __future__ import annotations

import re
from typing import Dict

MAX_NAME_LENGTH = 64
FALLBACK_NAME = "_unnamed"

_CHAR_REPLACEMENTS: Dict[str, str] = {
    # Spanish
    "ñ": "n", "Ñ": "N",
    "á": "a", "é": "e", "í": "i", "ó": "o", "ú": "u", "ü": "u",
    "Á": "A", "É": "E", "Í": "I", "Ó": "O", "Ú": "U", "Ü": "U",
    # French
    "à": "a", "â": "a", "ç": "c", "è": "e", "ê": "e", "ë": "e",
    "î": "i", "ï": "i", "ô": "o", "ù": "u", "û": "u", "ÿ": "y",
    "À": "A", "Â": "A", "Ç": "C", "È": "E", "Ê": "E", "Ë": "E",
    "Î": "I", "Ï": "I", "Ô": "O", "Ù": "U", "Û": "U", "Ÿ": "Y",
    # German
    "ä": "a", "ö": "o", "ß": "ss", "Ä": "A", "Ö": "O",
    # Portuguese
    "ã": "a", "õ": "o", "Ã": "A", "Õ": "O",
    # Quotes and brackets
    "'": "", "’": "", '"': "", "“": "", "”": "",
    "(": "", ")": "", "[": "", "]": "", "{": "", "}": "",
    # Common symbols
    "/": "-", "\\": "-",
    "&": "and", "+": "plus", "@": "at",
    "#": "", "!": "", "?": "", ",": "", ";": "", "=": "",
    "*": "", "%": "", "$": "", "€": "", "£": "", "¥": "",
}

_TRANSLATION = str.maketrans(_CHAR_REPLACEMENTS)
_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_CHARS_RE = re.compile(r"[^A-Za-z0-9_.:\-]")
_VALID_START_RE = re.compile(r"^[A-Za-z_]")


def normalize_name(name: str) -> str:
    """Return *name* rewritten as a valid function-style identifier.

    Never raises; an input with no usable characters yields ``_unnamed``.
    Already-valid names are returned unchanged.
    """
    result = name.translate(_TRANSLATION)
    result = _WHITESPACE_RE.sub("_", result)
    result = _INVALID_CHARS_RE.sub("", result)

    if result and not _VALID_START_RE.match(result):
        result = "_" + result

    result = result[:MAX_NAME_LENGTH]

    if not result:
        result = FALLBACK_NAME
    return result
