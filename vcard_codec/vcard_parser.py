"""
vCard decoding: from text to :class:`~vcard_codec.contact.Contact`.

The tokenizer produces one token per logical line; this module checks the
BEGIN / VERSION / END framing and hands every remaining token to the handler
registered for its :class:`~vcard_codec.properties.PropertyKind`. Unknown
properties are skipped so that extensions do not break decoding.

Decoding is all or nothing: any structural or validation error propagates
and no contact is returned.
"""
# pylint: disable=logging-fstring-interpolation

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List

from vcard_codec.contact import Contact
from vcard_codec.errors import VCardFormatError
from vcard_codec.phone_normalizer import extract_digits
from vcard_codec.properties import SUPPORTED_VERSIONS, PropertyKind, Style, style_for
from vcard_codec.tokenizer import Token, tokenize

logger = logging.getLogger("vcard_codec")

VERSION_VALUES = {f"{version}.0": version for version in SUPPORTED_VERSIONS}

_TIMESTAMP = re.compile(r'(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})')
_NON_DIGITS = re.compile(r'[^0-9]')

# Positions 0 and 1 of ADR are the post-office box and extended address.
_ADDRESS_OFFSET = 2
_ADDRESS_COMPONENTS = 5


def _is_marker(token: Token, key: str) -> bool:
    return (
        token.key.upper() == key
        and bool(token.values)
        and token.values[0].strip().upper() == 'VCARD'
    )


def _parse_version(token: Token) -> int:
    """
    Read the version number of a VERSION token.

    Args:
        token: VERSION token

    Returns:
        3 or 4

    Raises:
        VCardFormatError: For any value other than 3.0 or 4.0
    """
    value = token.values[0] if token.values else None
    if value not in VERSION_VALUES:
        raise VCardFormatError(f"Invalid or incompatible version: {value!r}")
    return VERSION_VALUES[value]


def _parse_timestamp(value: str, field_name: str) -> datetime:
    """
    Parse a ``YYYYMMDDHHMMSS`` timestamp, ignoring any punctuation.

    Args:
        value: Raw property value (``19890117T050000Z`` or ``1989-01-17T05:00:00Z``)
        field_name: Property name for error messages

    Returns:
        Timezone-aware UTC datetime
    """
    digits = _NON_DIGITS.sub('', value)
    match = _TIMESTAMP.fullmatch(digits)
    if not match:
        raise VCardFormatError(f"Invalid {field_name} value: {value!r}")

    try:
        return datetime(*(int(part) for part in match.groups()), tzinfo=timezone.utc)
    except ValueError as e:
        raise VCardFormatError(f"Invalid {field_name} value: {value!r} ({e})") from e


def _type_values(token: Token) -> List[str]:
    """Lowercased values of every TYPE parameter (``TYPE=cell;TYPE=pref`` included)."""
    return [
        value.strip().lower()
        for parameter in token.get_parameters('TYPE')
        for value in parameter.values
        if value.strip()
    ]


def _media_uri(contact: Contact, token: Token, kind: PropertyKind) -> str:
    """
    Rebuild the data URI of a PHOTO or LOGO token.

    Version 3 carries the image subtype in the TYPE parameter and the bare
    base64 payload as value; version 4 carries the data URI itself.
    """
    if style_for(kind, contact.version) is Style.BASE64_BLOCK:
        parameter = token.get_parameter('TYPE')
        if parameter is None or not parameter.values or not parameter.values[0]:
            raise VCardFormatError(f"Invalid vCard: {kind.value} is missing encoding")
        subtype = parameter.values[0].lower()
        return f"data:image/{subtype};base64,{';'.join(token.values)}"
    return ';'.join(token.values)


def _decode_version(contact: Contact, token: Token) -> None:
    if _parse_version(token) != contact.version:
        raise VCardFormatError("Conflicting VERSION properties")


def _decode_kind(contact: Contact, token: Token) -> None:
    contact.set_kind(token.values[0])


def _decode_fn(contact: Contact, token: Token) -> None:
    contact.set_name(token.values[0])


def _decode_n(contact: Contact, token: Token) -> None:
    # Derived from FN when rendering.
    pass


def _decode_nickname(contact: Contact, token: Token) -> None:
    for nickname in token.values:
        contact.set_nickname(nickname)


def _decode_photo(contact: Contact, token: Token) -> None:
    contact.set_photo(_media_uri(contact, token, PropertyKind.PHOTO))


def _decode_logo(contact: Contact, token: Token) -> None:
    contact.set_logo(_media_uri(contact, token, PropertyKind.LOGO))


def _decode_bday(contact: Contact, token: Token) -> None:
    contact.set_birthday(_parse_timestamp(token.values[0], 'BDAY'))


def _decode_anniversary(contact: Contact, token: Token) -> None:
    contact.set_anniversary(_parse_timestamp(token.values[0], 'ANNIVERSARY'))


def _decode_gender(contact: Contact, token: Token) -> None:
    contact.set_gender(*token.values[:2])


def _decode_adr(contact: Contact, token: Token) -> None:
    components = token.values[_ADDRESS_OFFSET:_ADDRESS_OFFSET + _ADDRESS_COMPONENTS]
    components = components + [''] * (_ADDRESS_COMPONENTS - len(components))

    label = ''
    parameter = token.get_parameter('LABEL')
    if parameter is not None and parameter.values:
        label = parameter.values[0]

    contact.set_address(*components, label=label)


def _decode_tel(contact: Contact, token: Token) -> None:
    type_values = _type_values(token)
    extension = ''

    if style_for(PropertyKind.TEL, contact.version) is Style.PREF_IN_TYPE:
        pref = 'pref' in type_values
        types = [value for value in type_values if value != 'pref']
    else:
        pref = token.has_parameter('PREF')
        types = type_values
        if len(token.values) > 1:
            extension = extract_digits(token.values[1])

    contact.set_phone(token.values[0], extension, types, pref)


def _decode_email(contact: Contact, token: Token) -> None:
    if style_for(PropertyKind.EMAIL, contact.version) is Style.PREF_IN_TYPE:
        pref = 'pref' in _type_values(token)
    else:
        pref = token.has_parameter('PREF')
    contact.set_email(token.values[0], pref)


def _decode_impp(contact: Contact, token: Token) -> None:
    protocol, _, address = token.values[0].partition(':')
    contact.set_im(address, protocol.strip().lower(), token.has_parameter('PREF'))


def _decode_title(contact: Contact, token: Token) -> None:
    contact.set_title(token.values[0])


def _decode_role(contact: Contact, token: Token) -> None:
    contact.set_role(token.values[0])


def _decode_org(contact: Contact, token: Token) -> None:
    contact.set_org(*token.values[:3])


def _decode_note(contact: Contact, token: Token) -> None:
    for note in token.values:
        contact.set_note(note)


def _decode_url(contact: Contact, token: Token) -> None:
    for url in token.values:
        contact.set_url(url)


_HANDLERS: Dict[PropertyKind, Callable[[Contact, Token], None]] = {
    PropertyKind.VERSION: _decode_version,
    PropertyKind.KIND: _decode_kind,
    PropertyKind.FN: _decode_fn,
    PropertyKind.N: _decode_n,
    PropertyKind.NICKNAME: _decode_nickname,
    PropertyKind.PHOTO: _decode_photo,
    PropertyKind.BDAY: _decode_bday,
    PropertyKind.ANNIVERSARY: _decode_anniversary,
    PropertyKind.GENDER: _decode_gender,
    PropertyKind.ADR: _decode_adr,
    PropertyKind.TEL: _decode_tel,
    PropertyKind.EMAIL: _decode_email,
    PropertyKind.IMPP: _decode_impp,
    PropertyKind.TITLE: _decode_title,
    PropertyKind.ROLE: _decode_role,
    PropertyKind.LOGO: _decode_logo,
    PropertyKind.ORG: _decode_org,
    PropertyKind.NOTE: _decode_note,
    PropertyKind.URL: _decode_url,
}


def decode_token(contact: Contact, token: Token) -> None:
    """
    Apply one token to a contact.

    Args:
        contact: Contact being populated; its version selects the rules
        token: Token to interpret

    Raises:
        VCardFormatError: If the token has no key or no value
        VCardValidationError: If the contact rejects the value
    """
    if not token.key or not token.values:
        raise VCardFormatError(f"Invalid vCard: invalid token {token.key!r}")

    key = token.key.upper()
    if key in ('BEGIN', 'END'):
        raise VCardFormatError(f"Invalid vCard: unexpected {key} inside a card")

    kind = PropertyKind.from_key(token.key)
    if kind is None:
        logger.debug(f"Ignoring unrecognized property {token.key}")
        return

    _HANDLERS[kind](contact, token)


def decode(text: str) -> Contact:
    """
    Decode a single vCard document.

    The document must start with ``BEGIN:VCARD``, continue with a VERSION of
    3.0 or 4.0 and end with ``END:VCARD``.

    Args:
        text: Raw vCard text

    Returns:
        Populated contact

    Raises:
        VCardFormatError: For structural problems
        VCardValidationError: For values the contact model rejects
    """
    tokens = tokenize(text)

    if not tokens or not _is_marker(tokens[0], 'BEGIN'):
        raise VCardFormatError("Invalid vCard: missing BEGIN:VCARD")
    if len(tokens) < 2 or not _is_marker(tokens[-1], 'END'):
        raise VCardFormatError("Invalid vCard: missing END:VCARD")

    body = tokens[1:-1]
    if not body or body[0].key.upper() != PropertyKind.VERSION.value:
        raise VCardFormatError("Version missing or out of place")

    contact = Contact()
    contact.set_version(_parse_version(body[0]))

    for token in body[1:]:
        decode_token(contact, token)

    logger.debug(f"Decoded version {contact.version} card with {len(body)} properties")
    return contact


def split_vcard_blocks(content: str) -> List[str]:
    """
    Split a multi-card document into individual vCard blocks.

    Args:
        content: Full document text

    Returns:
        List of block strings, each from BEGIN:VCARD to END:VCARD. An
        unterminated last block is returned as is and fails to decode.

    Raises:
        VCardFormatError: If text appears outside of a block
    """
    blocks = []
    current_block: List[str] = []
    in_block = False

    lines = content.replace('\r\n', '\n').replace('\r', '\n').split('\n')

    for line_number, line in enumerate(lines, 1):
        marker = line.strip().upper()

        if marker == 'BEGIN:VCARD':
            if in_block:
                raise VCardFormatError(
                    f"Line {line_number}: BEGIN:VCARD before END:VCARD"
                )
            current_block = [line]
            in_block = True
        elif in_block:
            current_block.append(line)
            if marker == 'END:VCARD':
                blocks.append('\n'.join(current_block))
                current_block = []
                in_block = False
        elif marker:
            raise VCardFormatError(f"Line {line_number}: content outside of a vCard")

    if in_block and current_block:
        blocks.append('\n'.join(current_block))

    return blocks


def decode_all(content: str) -> List[Contact]:
    """
    Decode every card of a multi-card document.

    Args:
        content: Document text with one or more cards

    Returns:
        Contacts in document order

    Raises:
        VCardFormatError: If there is no card or any card is invalid
    """
    blocks = split_vcard_blocks(content)
    if not blocks:
        raise VCardFormatError("No vCards found")

    contacts = []
    for block_num, block in enumerate(blocks, 1):
        try:
            contacts.append(decode(block))
        except ValueError as e:
            logger.debug(f"Block {block_num} failed to decode: {e}")
            raise

    logger.debug(f"Decoded {len(contacts)} cards")
    return contacts


def parse_vcard_file(file_path: Path) -> List[Contact]:
    """
    Read and decode a .vcf file.

    Args:
        file_path: Path to the UTF-8 encoded file

    Returns:
        Contacts in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        VCardFormatError: If the file is not UTF-8, empty or malformed
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: {file_path}")

    try:
        content = file_path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise VCardFormatError(f"{file_path} is not UTF-8 encoded: {e}") from e

    try:
        contacts = decode_all(content)
    except ValueError as e:
        logger.error(f"Error reading vCard file {file_path}: {e}")
        raise

    logger.info(f"Successfully parsed {len(contacts)} contacts from {file_path}")
    return contacts
