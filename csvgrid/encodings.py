"""
Code page resolution.

File sources name their text encoding either with a Windows code page
number (``1252``, ``65001``) or with a Python codec name (``"latin-1"``).
"""

from __future__ import annotations

import codecs
from typing import Union

from csvgrid.errors import ConfigurationError

CodePage = Union[int, str]

_CODE_PAGE_ALIASES = {
    65001: "utf-8",
    1200: "utf-16-le",
    1201: "utf-16-be",
    12000: "utf-32-le",
    12001: "utf-32-be",
    20127: "ascii",
    28591: "latin-1",
    28605: "iso8859-15",
}


def resolve_encoding(code_page: CodePage) -> str:
    """
    Resolve a code page identifier to a Python codec name.

    UTF-8 resolves to ``utf-8-sig`` so that a leading byte order mark does
    not end up in the first header cell.

    Args:
        code_page: Windows code page number or codec name

    Returns:
        Codec name usable with ``open(..., encoding=...)``

    Raises:
        ConfigurationError: If no codec exists for the identifier

    Example:
        >>> resolve_encoding(1252)
        'cp1252'
        >>> resolve_encoding(65001)
        'utf-8-sig'
        >>> resolve_encoding("Latin-1")
        'iso8859-1'
    """
    if isinstance(code_page, int):
        name = _CODE_PAGE_ALIASES.get(code_page, f"cp{code_page}")
    else:
        name = code_page.strip()

    try:
        info = codecs.lookup(name)
    except LookupError as e:
        raise ConfigurationError(f"Unknown code page: {code_page!r}") from e

    if info.name == "utf-8":
        return "utf-8-sig"
    return info.name
