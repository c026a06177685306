"""Small text helpers used when rendering results."""
from __future__ import annotations

import re

_SCHEME = re.compile(r"(^\w+:|^)//|www\.")
_TRAILING_SLASHES = re.compile(r"/+$")


def remove_hyphen(text: str) -> str:
    """Turn a rule id such as ``color-contrast`` into ``color contrast``."""
    if not isinstance(text, str):
        return text
    return text.replace("-", " ")


def remove_scheme(url: str) -> str:
    """Strip the scheme, ``www.`` and trailing slashes for display headings."""
    return _TRAILING_SLASHES.sub("", _SCHEME.sub("", url))
