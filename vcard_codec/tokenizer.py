"""
Tokenizer turning raw vCard text into structured line tokens.

Each logical line becomes a :class:`Token` holding its property key, its
parameters and its values, all unescaped. Lines sharing a group label
(``item1.ADR`` / ``item1.X-ABLabel``) are merged into a single token.
"""
# pylint: disable=logging-fstring-interpolation

import logging
import re
from typing import Dict, List, Optional

from vcard_codec.errors import VCardFormatError
from vcard_codec.escaping import split_escaped, unescape

logger = logging.getLogger("vcard_codec")

GROUP_SEPARATOR = '.'
GROUP_LABEL_ALIASES = {'X-ABLABEL': 'LABEL'}

_LINE_BREAKS = re.compile(r'\r\n|\r')
_FOLD_MARKER = '\n '


class Parameter:
    """A ``NAME=v1,v2`` parameter of a content line."""

    def __init__(self, name: str, values: List[str]) -> None:
        self.name = name
        self.values = values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Parameter):
            return NotImplemented
        return self.name == other.name and self.values == other.values

    def __repr__(self) -> str:
        return f"Parameter({self.name!r}, {self.values!r})"


class Token:
    """One logical content line: key, parameters and values."""

    def __init__(
        self,
        key: str,
        properties: Optional[List[Parameter]] = None,
        values: Optional[List[str]] = None
    ) -> None:
        self.key = key
        self.properties = properties if properties is not None else []
        self.values = values if values is not None else []

    @property
    def group(self) -> Optional[str]:
        """Group label of the key, or None for an ungrouped key."""
        if GROUP_SEPARATOR not in self.key:
            return None
        return self.key.split(GROUP_SEPARATOR, 1)[0]

    @property
    def name(self) -> str:
        """Key without its group label."""
        return self.key.split(GROUP_SEPARATOR, 1)[-1]

    def get_parameters(self, name: str) -> List[Parameter]:
        """
        Return every parameter with the given name, in line order.

        Args:
            name: Parameter name, compared case-insensitively

        Returns:
            Matching parameters, possibly empty
        """
        wanted = name.upper()
        return [parameter for parameter in self.properties if parameter.name.upper() == wanted]

    def get_parameter(self, name: str) -> Optional[Parameter]:
        """Return the first parameter with the given name, or None."""
        matches = self.get_parameters(name)
        return matches[0] if matches else None

    def has_parameter(self, name: str) -> bool:
        return self.get_parameter(name) is not None

    def __repr__(self) -> str:
        return (
            f"Token(key={self.key!r}, properties={self.properties!r}, "
            f"values={self.values!r})"
        )


def unfold(text: str) -> str:
    """
    Undo line folding.

    Line endings are normalized to ``\\n`` first; every newline followed by a
    single space is a continuation marker and is removed.
    """
    text = _LINE_BREAKS.sub('\n', text)
    return text.replace(_FOLD_MARKER, '')


def _parse_parameter(raw: str) -> Parameter:
    """
    Parse one ``NAME=v1,v2`` parameter.

    A parameter without ``=`` is the vCard 2.1 shorthand for a TYPE value.

    Args:
        raw: Escaped parameter text

    Returns:
        Parameter with unescaped name and values
    """
    pair = split_escaped(raw, '=', maxsplit=1)

    if len(pair) == 2:
        name, raw_values = pair
    else:
        name, raw_values = 'TYPE', pair[0]

    values = [unescape(value) for value in split_escaped(raw_values, ',')]
    return Parameter(unescape(name), values)


def tokenize_line(line: str, line_number: int = 0) -> Token:
    """
    Split one logical line into a token.

    Args:
        line: Unfolded content line
        line_number: Position of the line, used in error messages

    Returns:
        Token for the line

    Raises:
        VCardFormatError: If the line has no unescaped colon or no key
    """
    segments = split_escaped(line, ':', maxsplit=1)
    if len(segments) != 2:
        raise VCardFormatError(
            f"Malformed line {line_number}: no key/value separator in {line!r}"
        )

    key_and_params, raw_value = segments
    key, *raw_params = split_escaped(key_and_params, ';')
    key = unescape(key).strip()

    if not key:
        raise VCardFormatError(f"Malformed line {line_number}: empty property key")

    properties = [_parse_parameter(raw) for raw in raw_params if raw]

    if raw_value:
        values = [unescape(value) for value in split_escaped(raw_value, ';')]
    else:
        values = []

    return Token(key, properties, values)


def merge_groups(tokens: List[Token]) -> List[Token]:
    """
    Merge grouped lines into the first token of their group.

    The first pass assigns each group label to the index of the first token
    carrying it and strips the label from that token's key. The second pass
    appends every later token of the group to its canonical token as a
    parameter named after the later token's bare key (``X-ABLabel`` becomes
    ``LABEL``) and drops it from the sequence.

    Args:
        tokens: Tokens in line order

    Returns:
        Tokens in line order with folded-in tokens removed
    """
    canonical: Dict[str, int] = {}
    for index, token in enumerate(tokens):
        label = token.group
        if label is not None and label not in canonical:
            canonical[label] = index

    merged = []
    for index, token in enumerate(tokens):
        label = token.group
        if label is None:
            merged.append(token)
            continue

        target = tokens[canonical[label]]
        if canonical[label] == index:
            token.key = token.name
            merged.append(token)
            continue

        name = GROUP_LABEL_ALIASES.get(token.name.upper(), token.name)
        target.properties.append(Parameter(name, token.values))
        logger.debug(f"Merged grouped property {token.key} into {target.key}")

    return merged


def tokenize(text: str) -> List[Token]:
    """
    Tokenize a full vCard document.

    Args:
        text: Raw document text

    Returns:
        Tokens in original line order, grouped lines merged

    Raises:
        VCardFormatError: If any line lacks a key/value structure
    """
    tokens = []
    for line_number, line in enumerate(unfold(text).split('\n'), 1):
        if not line.strip():
            continue
        tokens.append(tokenize_line(line, line_number))

    logger.debug(f"Tokenized {len(tokens)} content lines")
    return merge_groups(tokens)
