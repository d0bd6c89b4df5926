from __future__ import annotations

from functools import reduce
from typing import Sequence

from css_concat.core import InputError
from css_concat.model import ParsedStylesheet, Stylesheet


def concat_stylesheets(parsed: Sequence[ParsedStylesheet]) -> Stylesheet:
    """
    Fold parsed sheets left to right into one tree. Order is the input
    order; nothing is reordered, deduplicated or merged by selector.
    """
    if not parsed:
        raise InputError("No stylesheets provided")
    sheets = [Stylesheet.from_parsed(p) for p in parsed]
    return reduce(lambda acc, sheet: acc.append(sheet), sheets)
