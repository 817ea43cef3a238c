"""
Typed in-memory representation of a single vCard contact.

Every property has a validated setter. A setter checks its input completely
before touching the contact, so a rejected call never leaves a partial
change behind. Repeatable properties are appended in call order.

Preferred entries
-----------------
Phones, emails and instant-message entries each keep at most one entry with
``pref=True``. Adding a preferred entry clears the flag on every earlier
entry of the same sequence first (last preferred wins). This is a property of
the sequence, maintained by :func:`_append_entry`, not an error condition.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple, Union

from vcard_codec.errors import VCardValidationError
from vcard_codec.phone_normalizer import (
    extract_digits,
    is_valid_phone_number,
    normalize_phone_number,
)
from vcard_codec.properties import DEFAULT_VERSION, SUPPORTED_VERSIONS

KIND_INDIVIDUAL = 'individual'
KIND_GROUP = 'group'
KIND_ORG = 'org'
KIND_LOCATION = 'location'
KINDS = (KIND_INDIVIDUAL, KIND_GROUP, KIND_ORG, KIND_LOCATION)

GENDER_MALE = 'M'
GENDER_FEMALE = 'F'
GENDER_OTHER = 'O'
GENDER_NONE = 'N'
GENDER_UNKNOWN = 'U'
GENDERS = (GENDER_MALE, GENDER_FEMALE, GENDER_OTHER, GENDER_NONE, GENDER_UNKNOWN)

TEL_TYPE_TEXT = 'text'
TEL_TYPE_VOICE = 'voice'
TEL_TYPE_FAX = 'fax'
TEL_TYPE_CELL = 'cell'
TEL_TYPE_VIDEO = 'video'
TEL_TYPE_PAGER = 'pager'
TEL_TYPE_TEXTPHONE = 'textphone'
PHONE_TYPES = (
    TEL_TYPE_TEXT,
    TEL_TYPE_VOICE,
    TEL_TYPE_FAX,
    TEL_TYPE_CELL,
    TEL_TYPE_VIDEO,
    TEL_TYPE_PAGER,
    TEL_TYPE_TEXTPHONE,
)

IM_PROTOCOL_SIP = 'sip'
IM_PROTOCOL_XMPP = 'xmpp'
IM_PROTOCOL_IRC = 'irc'
IM_PROTOCOL_YMSGR = 'ymsgr'
IM_PROTOCOL_MSN = 'msn'
IM_PROTOCOL_AIM = 'aim'
IM_PROTOCOL_IM = 'im'
IM_PROTOCOLS = (
    IM_PROTOCOL_SIP,
    IM_PROTOCOL_XMPP,
    IM_PROTOCOL_IRC,
    IM_PROTOCOL_YMSGR,
    IM_PROTOCOL_MSN,
    IM_PROTOCOL_AIM,
    IM_PROTOCOL_IM,
)

EMAIL_PATTERN = re.compile(
    r'(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|("[^"\r\n]+"))'
    r'@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])'
    r'|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))'
)
# Subtype is a MIME token, payload is standard base64.
DATA_URI_PATTERN = re.compile(r'data:image/([A-Za-z0-9.+-]+);base64,([A-Za-z0-9+/=]+)')


@dataclass
class Address:
    """A postal address. Post-office box and extended address are not kept."""

    street: str = ''
    city: str = ''
    state: str = ''
    zip_code: str = ''
    country: str = ''
    label: str = ''

    def components(self) -> Tuple[str, str, str, str, str]:
        return (self.street, self.city, self.state, self.zip_code, self.country)


@dataclass
class Phone:
    """A phone entry holding ten national digits."""

    number: str
    extension: str = ''
    types: List[str] = field(default_factory=list)
    pref: bool = False


@dataclass
class Email:
    address: str
    pref: bool = False


@dataclass
class InstantMessage:
    address: str
    protocol: str
    pref: bool = False


def _append_entry(entries: list, entry) -> None:
    """Append an entry, clearing earlier preferred flags when it is preferred."""
    if entry.pref:
        for existing in entries:
            existing.pref = False
    entries.append(entry)


def match_data_uri(uri: str) -> Optional[re.Match]:
    """
    Match an image data URI.

    :param uri: Candidate ``data:image/<subtype>;base64,<data>`` string
    :return: Match with the subtype and payload groups, or None
    """
    if not isinstance(uri, str):
        return None
    return DATA_URI_PATTERN.fullmatch(uri)


def _validate_data_uri(uri: str) -> None:
    if match_data_uri(uri) is None:
        raise VCardValidationError(f"Invalid image data URI: {uri!r}")


def _to_utc_instant(value: datetime, field_name: str) -> datetime:
    """
    Normalize a timezone-aware datetime to a UTC instant with whole seconds.

    :param value: Aware datetime
    :param field_name: Name used in the error message
    :return: Datetime in UTC
    :raises VCardValidationError: For non-datetime or naive values
    """
    if not isinstance(value, datetime):
        raise VCardValidationError(f"Invalid {field_name} date: {value!r}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise VCardValidationError(
            f"Invalid {field_name} date: {value!r} has no timezone"
        )
    return value.astimezone(timezone.utc).replace(microsecond=0)


class Contact:
    """
    A single contact card.

    The contact defaults to version 4. Set the version before or consistently
    with the other fields: the version decides how fields are rendered.
    """

    def __init__(self) -> None:
        """Initialize an empty version 4 contact."""
        self.version: int = DEFAULT_VERSION
        self.kind: Optional[str] = None
        self.names: List[str] = []
        self.nicknames: List[str] = []
        self.photos: List[str] = []
        self.birthday: Optional[datetime] = None
        self.anniversary: Optional[datetime] = None
        self.gender: Optional[str] = None
        self.gender_identity: Optional[str] = None
        self.addresses: List[Address] = []
        self.phones: List[Phone] = []
        self.emails: List[Email] = []
        self.instant_messages: List[InstantMessage] = []
        self.titles: List[str] = []
        self.roles: List[str] = []
        self.logos: List[str] = []
        self.organizations: List[Tuple[str, ...]] = []
        self.notes: List[str] = []
        self.urls: List[str] = []

    def __repr__(self) -> str:
        name = self.names[0] if self.names else None
        return f"Contact(version={self.version}, name={name!r})"

    def set_version(self, version: int) -> "Contact":
        """
        Select the vCard version used when rendering.

        :param version: 3 or 4
        :return: This contact
        """
        if isinstance(version, bool) or version not in SUPPORTED_VERSIONS:
            raise VCardValidationError(f"Unsupported version: {version!r}")
        self.version = version
        return self

    def set_kind(self, kind: str) -> "Contact":
        """Set the entity kind. Only written for version 4."""
        normalized = kind.strip().lower() if isinstance(kind, str) else kind
        if normalized not in KINDS:
            raise VCardValidationError(f"Invalid kind value: {kind!r}")
        self.kind = normalized
        return self

    def set_name(self, name: str) -> "Contact":
        """
        Add a formatted name.

        Runs of whitespace are collapsed to one space and the result trimmed.
        """
        if not isinstance(name, str):
            raise VCardValidationError(f"Invalid name value: {name!r}")
        normalized = re.sub(r'\s+', ' ', name).strip()
        if not normalized:
            raise VCardValidationError("Name must not be empty")
        self.names.append(normalized)
        return self

    def set_nickname(self, nickname: str) -> "Contact":
        self.nicknames.append(nickname)
        return self

    def set_photo(self, data_uri: str) -> "Contact":
        """
        Add a photo given as ``data:image/<subtype>;base64,<data>``.

        The URI is converted to the version-specific layout when rendering.
        """
        _validate_data_uri(data_uri)
        self.photos.append(data_uri)
        return self

    def set_birthday(self, birthday: datetime) -> "Contact":
        self.birthday = _to_utc_instant(birthday, 'birthday')
        return self

    def set_anniversary(self, anniversary: datetime) -> "Contact":
        """Set the anniversary. Only written for version 4."""
        self.anniversary = _to_utc_instant(anniversary, 'anniversary')
        return self

    def set_gender(self, gender: str, identity: Optional[str] = None) -> "Contact":
        """
        Set the gender code and an optional free-text gender identity.

        Only written for version 4. The identity is trimmed and lowercased.

        :param gender: One of M, F, O, N, U
        :param identity: Free-text identity
        :return: This contact
        """
        if gender not in GENDERS:
            raise VCardValidationError(f"Invalid gender value: {gender!r}")
        if identity is not None and not isinstance(identity, str):
            raise VCardValidationError(f"Invalid gender identity: {identity!r}")

        identity = identity.strip().lower() if identity else None
        self.gender = gender
        self.gender_identity = identity or None
        return self

    def set_address(
        self,
        street: str = '',
        city: str = '',
        state: str = '',
        zip_code: str = '',
        country: str = '',
        label: str = ''
    ) -> "Contact":
        self.addresses.append(Address(
            street=street or '',
            city=city or '',
            state=state or '',
            zip_code=zip_code or '',
            country=country or '',
            label=label or '',
        ))
        return self

    def set_phone(
        self,
        number: str,
        extension: Optional[str] = '',
        types: Union[str, Iterable[str], None] = (),
        pref: bool = False
    ) -> "Contact":
        """
        Add a phone entry.

        The number is reduced to digits and an eleven digit number with a
        leading ``1`` loses that digit; the result must have ten digits. The
        extension is reduced to digits. Extensions are only written for
        version 4.

        :param number: Phone number in any punctuation
        :param extension: Optional extension
        :param types: A phone type or a list of them
        :param pref: Whether this is the preferred phone
        :return: This contact
        """
        if isinstance(types, str):
            types = [types]
        types = list(types or [])

        for phone_type in types:
            if phone_type not in PHONE_TYPES:
                raise VCardValidationError(f"Invalid phone type value: {phone_type!r}")

        digits = normalize_phone_number(number if isinstance(number, str) else '')
        if not is_valid_phone_number(digits):
            raise VCardValidationError(
                f"Invalid phone number: {number!r} is not a 10 digit number"
            )

        _append_entry(self.phones, Phone(
            number=digits,
            extension=extract_digits(extension or ''),
            types=types,
            pref=bool(pref),
        ))
        return self

    def set_email(self, address: str, pref: bool = False) -> "Contact":
        if not isinstance(address, str) or not EMAIL_PATTERN.fullmatch(address.lower()):
            raise VCardValidationError(f"Invalid email value: {address!r}")
        _append_entry(self.emails, Email(address=address, pref=bool(pref)))
        return self

    def set_im(self, address: str, protocol: str, pref: bool = False) -> "Contact":
        """
        Add an instant-messaging entry. Only written for version 4.

        :param address: Handle on the messaging network
        :param protocol: One of sip, xmpp, irc, ymsgr, msn, aim, im
        :param pref: Whether this is the preferred entry
        :return: This contact
        """
        if protocol not in IM_PROTOCOLS:
            raise VCardValidationError(f"Invalid protocol value: {protocol!r}")
        _append_entry(self.instant_messages, InstantMessage(
            address=address,
            protocol=protocol,
            pref=bool(pref),
        ))
        return self

    def set_title(self, title: str) -> "Contact":
        self.titles.append(title)
        return self

    def set_role(self, role: str) -> "Contact":
        self.roles.append(role)
        return self

    def set_logo(self, data_uri: str) -> "Contact":
        _validate_data_uri(data_uri)
        self.logos.append(data_uri)
        return self

    def set_org(
        self,
        organization: Optional[str] = None,
        unit: Optional[str] = None,
        sub_unit: Optional[str] = None
    ) -> "Contact":
        """
        Add an organization with up to two organizational units.

        Empty components are skipped; at least one must remain.
        """
        components = tuple(part for part in (organization, unit, sub_unit) if part)
        if not components:
            raise VCardValidationError("Organization needs at least one component")
        self.organizations.append(components)
        return self

    def set_note(self, note: str) -> "Contact":
        self.notes.append(note)
        return self

    def set_url(self, url: str) -> "Contact":
        """
        Add a URL.

        URLs are written verbatim, so line breaks, semicolons and backslashes
        are rejected: a decoder would split or unescape them.
        """
        if not isinstance(url, str) or not url.strip() or re.search(r'[\r\n;\\]', url):
            raise VCardValidationError(f"Invalid URL value: {url!r}")
        self.urls.append(url)
        return self
