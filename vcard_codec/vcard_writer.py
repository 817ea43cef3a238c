"""
vCard encoding: from :class:`~vcard_codec.contact.Contact` to text.

Every content line is assembled from escaped text and literal delimiters,
then folded so that no physical line exceeds 75 UTF-8 bytes. Which lines are
written, and how, is decided by the version strategy table in
:mod:`vcard_codec.properties`.

Dependencies:
    - vobject: Third-party vCard reader, used to cross-check written files
    - pathlib: Standard library for path handling
"""
# pylint: disable=logging-fstring-interpolation, broad-except

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import vobject

from vcard_codec.contact import Contact, match_data_uri
from vcard_codec.errors import VCardValidationError
from vcard_codec.escaping import escape, escape_units
from vcard_codec.phone_normalizer import format_phone_number, map_phone_types_v3
from vcard_codec.properties import PropertyKind, Style, is_emitted, style_for
from vcard_codec.vcard_parser import parse_vcard_file

logger = logging.getLogger("vcard_codec")

MAX_LINE_BYTES = 75
LINE_SEPARATOR = '\n'
FOLD_PREFIX = ' '
ADDRESS_GROUP_PREFIX = 'item'

Parameters = Sequence[Tuple[str, Sequence[str]]]


def fold(line: str, max_bytes: int = MAX_LINE_BYTES) -> str:
    """
    Fold a logical line into physical lines of at most ``max_bytes`` bytes.

    Bytes are counted in UTF-8, so multi-byte characters are never split.
    An escape pair is kept together. Continuation lines start with a single
    space, which counts towards their length.

    :param line: Escaped logical line
    :param max_bytes: Byte limit per physical line
    :return: Folded text joined with newlines
    """
    physical_lines = []
    current: List[str] = []
    current_bytes = 0

    for unit in escape_units(line):
        unit_bytes = len(unit.encode('utf-8'))

        if current and current_bytes + unit_bytes > max_bytes:
            physical_lines.append(''.join(current))
            current = [FOLD_PREFIX, unit]
            current_bytes = len(FOLD_PREFIX) + unit_bytes
        else:
            current.append(unit)
            current_bytes += unit_bytes

    physical_lines.append(''.join(current))
    return LINE_SEPARATOR.join(physical_lines)


def content_line(
    name: str,
    value: str,
    parameters: Optional[Parameters] = None,
    group: Optional[str] = None
) -> str:
    """
    Assemble one unfolded content line.

    Parameter values are escaped here; ``value`` must already be escaped
    since its delimiters depend on the property.

    Args:
        name: Property name
        value: Escaped value segment
        parameters: (name, values) pairs
        group: Optional group label

    Returns:
        ``[group.]NAME[;PARAM=v1,v2]:value``
    """
    key = f"{group}.{name}" if group else name
    parts = [key]
    for parameter_name, parameter_values in parameters or ():
        joined = ','.join(escape(value) for value in parameter_values)
        parts.append(f"{parameter_name}={joined}")
    return ';'.join(parts) + ':' + value


def format_timestamp(value: datetime, style: Style) -> str:
    """Write a UTC instant as ``YYYYMMDDTHHMMSSZ`` or ``YYYY-MM-DDTHH:MM:SSZ``."""
    if style is Style.EXTENDED_TIMESTAMP:
        return (
            f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
            f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}Z"
        )
    return (
        f"{value.year:04d}{value.month:02d}{value.day:02d}"
        f"T{value.hour:02d}{value.minute:02d}{value.second:02d}Z"
    )


def _render_kind(contact: Contact, style: Style) -> List[str]:
    return [content_line('KIND', escape(contact.kind))]


def _render_names(contact: Contact, style: Style) -> List[str]:
    lines = []
    for index, name in enumerate(contact.names):
        lines.append(content_line('FN', escape(name)))
        if index == 0:
            words = name.split(' ')
            family = words.pop()
            given = ' '.join(words)
            value = escape(family)
            if given:
                value += ';' + escape(given)
            lines.append(content_line('N', value))
    return lines


def _render_texts(name: str, texts: List[str]) -> List[str]:
    return [content_line(name, escape(text)) for text in texts if text.strip()]


def _render_nicknames(contact: Contact, style: Style) -> List[str]:
    return _render_texts('NICKNAME', contact.nicknames)


def _render_media(name: str, uris: List[str], style: Style) -> List[str]:
    """
    Render PHOTO or LOGO lines.

    Version 4 writes the data URI itself, with its delimiters left literal.
    Version 3 moves the image subtype into TYPE and writes the bare payload.
    """
    lines = []
    for uri in uris:
        if style is Style.DATA_URI:
            lines.append(content_line(name, uri))
            continue

        subtype, payload = match_data_uri(uri).groups()
        lines.append(content_line(
            name,
            payload,
            [('ENCODING', ['b']), ('TYPE', [subtype.upper()])],
        ))
    return lines


def _render_photos(contact: Contact, style: Style) -> List[str]:
    return _render_media('PHOTO', contact.photos, style)


def _render_logos(contact: Contact, style: Style) -> List[str]:
    return _render_media('LOGO', contact.logos, style)


def _render_birthday(contact: Contact, style: Style) -> List[str]:
    if contact.birthday is None:
        return []
    return [content_line('BDAY', format_timestamp(contact.birthday, style))]


def _render_anniversary(contact: Contact, style: Style) -> List[str]:
    if contact.anniversary is None:
        return []
    return [content_line('ANNIVERSARY', format_timestamp(contact.anniversary, style))]


def _render_gender(contact: Contact, style: Style) -> List[str]:
    if contact.gender is None:
        return []
    value = escape(contact.gender)
    if contact.gender_identity:
        value += ';' + escape(contact.gender_identity)
    return [content_line('GENDER', value)]


def _render_addresses(contact: Contact, style: Style) -> List[str]:
    """
    Render ADR lines.

    Version 3 puts the label on an ``X-ABLabel`` line sharing a group label
    with the address; version 4 uses a LABEL parameter.
    """
    lines = []
    for index, address in enumerate(contact.addresses, 1):
        value = ';;' + ';'.join(escape(part) for part in address.components())

        if style is Style.GROUPED_LABEL:
            group = f"{ADDRESS_GROUP_PREFIX}{index}"
            lines.append(content_line('ADR', value, group=group))
            lines.append(content_line('X-ABLabel', escape(address.label), group=group))
        else:
            parameters = [('LABEL', [address.label])] if address.label else []
            lines.append(content_line('ADR', value, parameters))
    return lines


def _render_phones(contact: Contact, style: Style) -> List[str]:
    lines = []
    for phone in contact.phones:
        number = format_phone_number(phone.number)

        if style is Style.PREF_PARAMETER:
            parameters = [('VALUE', ['uri'])]
            if phone.pref:
                parameters.append(('PREF', ['1']))
            if phone.types:
                parameters.append(('TYPE', phone.types))
            value = f"tel:{number}"
            if phone.extension:
                value += f";ext={escape(phone.extension)}"
        else:
            types = map_phone_types_v3(phone.types)
            if phone.pref:
                types.append('pref')
            parameters = [('TYPE', types)] if types else []
            value = number

        lines.append(content_line('TEL', value, parameters))
    return lines


def _render_emails(contact: Contact, style: Style) -> List[str]:
    lines = []
    for email in contact.emails:
        if style is Style.PREF_PARAMETER:
            parameters = [('PREF', ['1'])] if email.pref else []
        else:
            types = ['internet', 'pref'] if email.pref else ['internet']
            parameters = [('TYPE', types)]
        lines.append(content_line('EMAIL', escape(email.address), parameters))
    return lines


def _render_instant_messages(contact: Contact, style: Style) -> List[str]:
    lines = []
    for entry in contact.instant_messages:
        parameters = [('PREF', ['1'])] if entry.pref else []
        value = f"{entry.protocol}:{escape(entry.address)}"
        lines.append(content_line('IMPP', value, parameters))
    return lines


def _render_titles(contact: Contact, style: Style) -> List[str]:
    return _render_texts('TITLE', contact.titles)


def _render_roles(contact: Contact, style: Style) -> List[str]:
    return _render_texts('ROLE', contact.roles)


def _render_organizations(contact: Contact, style: Style) -> List[str]:
    return [
        content_line('ORG', ';'.join(escape(part) for part in organization))
        for organization in contact.organizations
    ]


def _render_notes(contact: Contact, style: Style) -> List[str]:
    return _render_texts('NOTE', contact.notes)


def _render_urls(contact: Contact, style: Style) -> List[str]:
    return [content_line('URL', url) for url in contact.urls]


# Rendering order of the card body.
_RENDERERS: List[Tuple[PropertyKind, Callable[[Contact, Style], List[str]]]] = [
    (PropertyKind.KIND, _render_kind),
    (PropertyKind.FN, _render_names),
    (PropertyKind.NICKNAME, _render_nicknames),
    (PropertyKind.PHOTO, _render_photos),
    (PropertyKind.BDAY, _render_birthday),
    (PropertyKind.ANNIVERSARY, _render_anniversary),
    (PropertyKind.GENDER, _render_gender),
    (PropertyKind.ADR, _render_addresses),
    (PropertyKind.TEL, _render_phones),
    (PropertyKind.EMAIL, _render_emails),
    (PropertyKind.IMPP, _render_instant_messages),
    (PropertyKind.TITLE, _render_titles),
    (PropertyKind.ROLE, _render_roles),
    (PropertyKind.LOGO, _render_logos),
    (PropertyKind.ORG, _render_organizations),
    (PropertyKind.NOTE, _render_notes),
    (PropertyKind.URL, _render_urls),
]

# Written verbatim: neither escaped nor folded.
_UNFOLDED = {PropertyKind.URL}


def validate_contact(contact: Contact) -> None:
    """
    Check the fields required before encoding.

    :param contact: Contact to check
    :raises VCardValidationError: If the name, or the kind under version 4,
                                  is missing
    """
    if not contact.names:
        raise VCardValidationError("Missing name property")
    if contact.version == 4 and not contact.kind:
        raise VCardValidationError("Missing KIND property (required in version 4)")


def encode(contact: Contact) -> str:
    """
    Encode a contact as vCard text.

    Args:
        contact: Contact to encode; its version selects the layout

    Returns:
        Folded vCard text, lines separated by ``\\n``, without a trailing
        newline

    Raises:
        VCardValidationError: If a mandatory field is missing
    """
    validate_contact(contact)

    lines = ['BEGIN:VCARD', f"VERSION:{contact.version}.0"]

    for kind, render in _RENDERERS:
        if not is_emitted(kind, contact.version):
            continue
        for line in render(contact, style_for(kind, contact.version)):
            lines.append(line if kind in _UNFOLDED else fold(line))

    lines.append('END:VCARD')
    return LINE_SEPARATOR.join(lines)


def write_vcard_file(contacts: List[Contact], output_path: Path) -> None:
    """
    Encode contacts and write them to a .vcf file.

    Cards are separated by a blank line and the file ends with a newline.
    Nothing is written if any contact fails to encode.

    Args:
        contacts: Contacts to write
        output_path: Path where the vCard file should be written
    """
    vcard_strings = [encode(contact) for contact in contacts]

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        f.write('\n\n'.join(vcard_strings))
        if vcard_strings:
            f.write('\n')

    logger.info(f"Successfully wrote {len(contacts)} contacts to {output_path}")


def _count_vobject_cards(content: str) -> int:
    return sum(
        1 for component in vobject.readComponents(content)
        if component.name.upper() == 'VCARD'
    )


def validate_vcard_file(
    output_path: Path,
    expected_contact_count: int
) -> Tuple[bool, Dict[str, Any]]:
    """
    Re-read a written file to make sure no card was lost.

    The file is decoded with this codec and read a second time with vobject
    as an interoperability check. Codec failures and count mismatches are
    errors; vobject disagreements are warnings.

    Args:
        output_path: Path to the written vCard file
        expected_contact_count: Number of cards that were written

    Returns:
        Tuple of (is_valid, validation_report_dict)
    """
    report: Dict[str, Any] = {
        'valid': False,
        'output_contact_count': 0,
        'expected_contact_count': expected_contact_count,
        'parse_successful': False,
        'interop_contact_count': None,
        'errors': [],
        'warnings': []
    }

    if not output_path.exists():
        report['errors'].append(f"Output file does not exist: {output_path}")
        return False, report

    try:
        output_contacts = parse_vcard_file(output_path)
    except ValueError as e:
        report['errors'].append(f"Failed to parse output file: {e}")
        logger.error(f"Validation error: {e}")
        return False, report

    report['parse_successful'] = True
    report['output_contact_count'] = len(output_contacts)

    if len(output_contacts) != expected_contact_count:
        report['errors'].append(
            f"Contact count mismatch: expected {expected_contact_count}, "
            f"got {len(output_contacts)}"
        )
    else:
        logger.info(f"Validation: Contact count matches expected ({expected_contact_count})")

    content = output_path.read_text(encoding='utf-8')
    try:
        interop_count = _count_vobject_cards(content)
        report['interop_contact_count'] = interop_count
        if interop_count != len(output_contacts):
            report['warnings'].append(
                f"vobject read {interop_count} cards, codec read {len(output_contacts)}"
            )
    except Exception as e:
        report['warnings'].append(f"vobject could not read the output file: {e}")

    report['valid'] = not report['errors']

    if report['valid']:
        logger.info("Validation passed: Output file is valid and all contacts are present")
    else:
        logger.warning(f"Validation failed: {len(report['errors'])} errors found")

    return report['valid'], report
