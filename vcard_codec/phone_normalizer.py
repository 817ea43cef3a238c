"""
Phone number normalization for North-American numbers.

Numbers are stored as ten bare digits and written as ``+1-NNN-NNN-NNNN``.
No dialing-plan validation is attempted beyond that fixed shape.

Dependencies:
    - phonenumbers: Third-party library, used for digit extraction
      (including non-ASCII digits)
    - re: Standard library for the 3-3-4 grouping
"""
# pylint: disable=logging-fstring-interpolation

import logging
import re
from typing import Iterable, List

import phonenumbers

logger = logging.getLogger("vcard_codec")

NATIONAL_NUMBER_LENGTH = 10
TRUNK_PREFIX = "1"
COUNTRY_CALLING_CODE = "+1"

_GROUPING = re.compile(r'^(\d{0,3})(\d{0,3})(\d{0,4})')

# Version 3 has no "text" or "textphone" phone types.
V3_PHONE_TYPE_MAP = {
    'text': 'cell',
    'voice': 'voice',
    'fax': 'fax',
    'cell': 'cell',
    'video': 'video',
    'pager': 'pager',
    'textphone': '',
}


def extract_digits(value: str) -> str:
    """
    Strip every non-digit character.

    :param value: Any phone-like string
    :return: ASCII digits only
    """
    return phonenumbers.normalize_digits_only(value or '')


def normalize_phone_number(value: str) -> str:
    """
    Reduce a phone number to its national digits.

    An eleven digit number starting with the US trunk prefix ``1`` loses that
    leading digit, so ``+1 (813) 616-0999`` becomes ``8136160999``.

    :param value: Phone number in any punctuation
    :return: Digits with the trunk prefix removed
    """
    digits = extract_digits(value)
    if len(digits) == NATIONAL_NUMBER_LENGTH + 1 and digits.startswith(TRUNK_PREFIX):
        digits = digits[1:]
    return digits


def is_valid_phone_number(digits: str) -> bool:
    """Check the fixed ten digit national shape."""
    return len(digits) == NATIONAL_NUMBER_LENGTH and digits.isdigit()


def format_phone_number(digits: str) -> str:
    """
    Format national digits as ``+1-NNN-NNN-NNNN``.

    Only the first ten digits are used.

    :param digits: National digits
    :return: Formatted number with country calling code
    """
    digits = extract_digits(digits)[:NATIONAL_NUMBER_LENGTH]
    area, exchange, line = _GROUPING.match(digits).groups()
    return f"{COUNTRY_CALLING_CODE}-{area}-{exchange}-{line}"


def map_phone_types_v3(types: Iterable[str]) -> List[str]:
    """
    Translate phone types to their version 3 names.

    Types without a version 3 counterpart are dropped, as are duplicates
    produced by the translation (order is preserved).

    :param types: Version 4 phone types
    :return: Version 3 phone types
    """
    mapped = []
    for phone_type in types:
        v3_type = V3_PHONE_TYPE_MAP.get(phone_type, '')
        if not v3_type:
            logger.debug(f"Phone type '{phone_type}' has no version 3 equivalent, omitting")
            continue
        if v3_type not in mapped:
            mapped.append(v3_type)
    return mapped
