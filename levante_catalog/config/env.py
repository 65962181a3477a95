"""``${VAR}`` substitution in raw configuration data."""

from __future__ import annotations

import os
import re
from typing import Any

_PLACEHOLDER = re.compile(r"\$\{(\w+)\}")


def _substitute(match: "re.Match[str]") -> str:
    # Unset variables keep their placeholder so callers can detect them.
    return os.environ.get(match.group(1), match.group(0))


def expand_env_vars(value: Any) -> Any:
    """Copy of *value* with ``${VAR}`` replaced inside every string.

    Mappings and lists are walked; other scalars are returned untouched.
    """
    if isinstance(value, str):
        return _PLACEHOLDER.sub(_substitute, value)
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return list(map(expand_env_vars, value))
    return value


def is_unresolved(value: Any) -> bool:
    """True if *value* is a string still holding a ``${VAR}`` placeholder."""
    return isinstance(value, str) and bool(_PLACEHOLDER.search(value))
