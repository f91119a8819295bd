"""Argument validation for commands that take a quiz ``<id>``."""

from __future__ import annotations

import re
from typing import Optional

from .errors import MissingParameterError, NotANumberError

__all__ = ["validate_id"]

_leading_int_re = re.compile(r"\s*([+-]?[0-9]+)")


def validate_id(raw: Optional[str]) -> int:
    """Return the integer id encoded at the start of ``raw``.

    Parsing is permissive: leading whitespace and an optional sign are
    accepted and anything after the leading digits is ignored, so ``"12x"``
    yields ``12``. The id is not checked against the store.
    """

    if raw is None:
        raise MissingParameterError("Missing the <id> parameter.")
    match = _leading_int_re.match(raw)
    if match is None:
        raise NotANumberError("The value of the <id> parameter is not a number.")
    return int(match.group(1))
