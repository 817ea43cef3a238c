"""
Character-level escaping for vCard text values.

The five reserved tokens (backslash, comma, semicolon, colon and newline) are
written as two-character escape sequences. Splitting helpers in this module
treat an escape pair as a single opaque unit so that an escaped delimiter is
never mistaken for a real one.
"""

import re
from typing import Iterator, List

ESCAPE_CHAR = '\\'

_ESCAPES = {
    '\\': '\\\\',
    ',': '\\,',
    ';': '\\;',
    ':': '\\:',
    '\n': '\\n',
}

_UNESCAPES = {
    '\\': '\\',
    ',': ',',
    ';': ';',
    ':': ':',
    'n': '\n',
    'N': '\n',
}

_NEWLINES = re.compile(r'\r\n|\r')


def escape(text: str) -> str:
    """
    Escape the reserved characters of a text value.

    Line endings are normalized first: ``\\r\\n`` and a lone ``\\r`` are escaped
    as ``\\n``, so :func:`unescape` gives back ``\\n`` for them.

    :param text: Raw text
    :return: Text safe to place inside a content line
    """
    text = _NEWLINES.sub('\n', text)
    return ''.join(_ESCAPES.get(char, char) for char in text)


def unescape(text: str) -> str:
    """
    Undo :func:`escape`.

    Unknown escape pairs and a trailing lone backslash are kept as they are.

    :param text: Escaped text
    :return: Raw text
    """
    chars = []
    index = 0
    end = len(text)

    while index < end:
        char = text[index]
        index += 1

        if char == ESCAPE_CHAR and index < end:
            next_char = text[index]
            index += 1

            if next_char in _UNESCAPES:
                chars.append(_UNESCAPES[next_char])
            else:
                chars.append(char)
                chars.append(next_char)
        else:
            chars.append(char)

    return ''.join(chars)


def escape_units(text: str) -> Iterator[str]:
    """
    Yield the units of an escaped string.

    An escape pair (backslash plus the following character) is one unit, every
    other character is a unit of its own.
    """
    index = 0
    end = len(text)

    while index < end:
        if text[index] == ESCAPE_CHAR and index + 1 < end:
            yield text[index:index + 2]
            index += 2
        else:
            yield text[index]
            index += 1


def split_escaped(text: str, separator: str, maxsplit: int = -1) -> List[str]:
    """
    Split escaped text on separators that are not part of an escape pair.

    Segments are returned still escaped and empty segments are preserved, so
    ``split_escaped(';;a', ';')`` gives ``['', '', 'a']``.

    :param text: Escaped text
    :param separator: Single delimiter character
    :param maxsplit: Maximum number of splits, -1 for no limit
    :return: List of escaped segments
    :raises ValueError: If the separator is not a single character
    """
    if len(separator) != 1:
        raise ValueError(f"Separator must be a single character: {separator!r}")

    parts = []
    current = []

    for unit in escape_units(text):
        if unit == separator and maxsplit != 0:
            parts.append(''.join(current))
            current = []
            maxsplit -= 1
        else:
            current.append(unit)

    parts.append(''.join(current))
    return parts
