"""
Recognized vCard properties and their per-version behavior.

The strategy table below has one row per property and one column per
supported version. Both the field mapper (decode) and the renderer (encode)
read it, which keeps the two directions symmetric.
"""

from enum import Enum
from typing import Dict, Optional

DEFAULT_VERSION = 4
SUPPORTED_VERSIONS = (3, 4)


class PropertyKind(str, Enum):
    """Property names the codec understands."""

    VERSION = "VERSION"
    KIND = "KIND"
    FN = "FN"
    N = "N"
    NICKNAME = "NICKNAME"
    PHOTO = "PHOTO"
    BDAY = "BDAY"
    ANNIVERSARY = "ANNIVERSARY"
    GENDER = "GENDER"
    ADR = "ADR"
    TEL = "TEL"
    EMAIL = "EMAIL"
    IMPP = "IMPP"
    TITLE = "TITLE"
    ROLE = "ROLE"
    LOGO = "LOGO"
    ORG = "ORG"
    NOTE = "NOTE"
    URL = "URL"

    @classmethod
    def from_key(cls, key: str) -> Optional["PropertyKind"]:
        """Look up a property key case-insensitively; None when unknown."""
        try:
            return cls(key.strip().upper())
        except ValueError:
            return None


class Style(str, Enum):
    """How a property is laid out on the wire for a given version."""

    TEXT = "text"
    OMITTED = "omitted"
    # PHOTO / LOGO
    DATA_URI = "data_uri"
    BASE64_BLOCK = "base64_block"
    # TEL / EMAIL / IMPP preference
    PREF_PARAMETER = "pref_parameter"
    PREF_IN_TYPE = "pref_in_type"
    # ADR label
    LABEL_PARAMETER = "label_parameter"
    GROUPED_LABEL = "grouped_label"
    # BDAY / ANNIVERSARY
    BASIC_TIMESTAMP = "basic_timestamp"
    EXTENDED_TIMESTAMP = "extended_timestamp"


class PropertyRule:
    """Behavior of one property under version 3 and version 4."""

    def __init__(self, v3: Style, v4: Style) -> None:
        self.v3 = v3
        self.v4 = v4

    def style(self, version: int) -> Style:
        return self.v3 if version == 3 else self.v4


PROPERTY_RULES: Dict[PropertyKind, PropertyRule] = {
    PropertyKind.KIND: PropertyRule(Style.OMITTED, Style.TEXT),
    PropertyKind.FN: PropertyRule(Style.TEXT, Style.TEXT),
    PropertyKind.N: PropertyRule(Style.TEXT, Style.TEXT),
    PropertyKind.NICKNAME: PropertyRule(Style.TEXT, Style.TEXT),
    PropertyKind.PHOTO: PropertyRule(Style.BASE64_BLOCK, Style.DATA_URI),
    PropertyKind.BDAY: PropertyRule(Style.EXTENDED_TIMESTAMP, Style.BASIC_TIMESTAMP),
    PropertyKind.ANNIVERSARY: PropertyRule(Style.OMITTED, Style.BASIC_TIMESTAMP),
    PropertyKind.GENDER: PropertyRule(Style.OMITTED, Style.TEXT),
    PropertyKind.ADR: PropertyRule(Style.GROUPED_LABEL, Style.LABEL_PARAMETER),
    PropertyKind.TEL: PropertyRule(Style.PREF_IN_TYPE, Style.PREF_PARAMETER),
    PropertyKind.EMAIL: PropertyRule(Style.PREF_IN_TYPE, Style.PREF_PARAMETER),
    PropertyKind.IMPP: PropertyRule(Style.OMITTED, Style.PREF_PARAMETER),
    PropertyKind.TITLE: PropertyRule(Style.TEXT, Style.TEXT),
    PropertyKind.ROLE: PropertyRule(Style.TEXT, Style.TEXT),
    PropertyKind.LOGO: PropertyRule(Style.BASE64_BLOCK, Style.DATA_URI),
    PropertyKind.ORG: PropertyRule(Style.TEXT, Style.TEXT),
    PropertyKind.NOTE: PropertyRule(Style.TEXT, Style.TEXT),
    PropertyKind.URL: PropertyRule(Style.TEXT, Style.TEXT),
}


def style_for(kind: PropertyKind, version: int) -> Style:
    """
    Return the wire layout of a property under a version.

    :param kind: Property kind
    :param version: 3 or 4
    :return: Style from the strategy table
    """
    return PROPERTY_RULES[kind].style(version)


def is_emitted(kind: PropertyKind, version: int) -> bool:
    return style_for(kind, version) is not Style.OMITTED
