"""Shared fixtures for vcard_codec tests.

Provides sample image data URIs and fully populated version 3 and version 4
contacts, plus temporary directory and logger isolation helpers.
"""

import base64
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from vcard_codec.contact import Contact, GENDER_MALE, IM_PROTOCOL_SIP, KIND_INDIVIDUAL

# Long enough to be folded over several physical lines.
PHOTO_URI = "data:image/png;base64," + base64.b64encode(bytes(range(256))).decode("ascii")
LOGO_URI = "data:image/jpeg;base64," + base64.b64encode(bytes(range(255, -1, -1))).decode("ascii")


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Temporary directory for files written during a test."""
    return tmp_path


@pytest.fixture
def photo_uri() -> str:
    return PHOTO_URI


@pytest.fixture
def logo_uri() -> str:
    return LOGO_URI


@pytest.fixture
def v3_contact() -> Contact:
    """A version 3 contact using every property that version writes."""
    return (
        Contact()
        .set_version(3)
        .set_name("Pamela Mishaw")
        .set_nickname("Moon")
        .set_photo(PHOTO_URI)
        .set_phone("8136160999", "", ["cell", "video"], True)
        .set_email("apples@gmial.com", True)
        .set_birthday(datetime(1989, 1, 17, tzinfo=timezone.utc))
        .set_address(
            "123 main st", "Clearwater", "FL", "33584", "USA",
            "My House, in the middle of my street",
        )
        .set_title("Super babe")
        .set_role("Corn cleaner")
        .set_logo(LOGO_URI)
        .set_org("Rob co, inc", "Fart division", "Butts department")
        .set_note("Woah, black betty; pambalam..")
        .set_url("http://www.google.com")
    )


@pytest.fixture
def v4_contact() -> Contact:
    """A version 4 contact with reserved characters in most text fields."""
    return (
        Contact()
        .set_version(4)
        .set_kind(KIND_INDIVIDUAL)
        .set_name("Pamela Mish,aw")
        .set_nickname("Mo:on")
        .set_gender(GENDER_MALE, "Funky ;Chicken")
        .set_photo(PHOTO_URI)
        .set_phone("8136160999", "123", ["cell", "video"], True)
        .set_email("apples@gmial.com", True)
        .set_birthday(datetime(1989, 1, 17, 5, 0, 0, tzinfo=timezone.utc))
        .set_anniversary(datetime(1996, 8, 28, tzinfo=timezone.utc))
        .set_address(
            "123 main st", "Clearwater", "FL", "33584", "USA",
            "My House, in t;he middle of my street",
        )
        .set_im("rob@out.com", IM_PROTOCOL_SIP, True)
        .set_title("Super b;abe")
        .set_role("Corn c:leaner")
        .set_logo(LOGO_URI)
        .set_org("Rob co, inc", "Fart di;vision", "Butts depar'tment")
        .set_note("Woah, black betty; pambalam..\nSecond line \\ with backslash")
        .set_url("http://www.google.com")
    )


@pytest.fixture
def isolated_logger():
    """Remove handlers installed on the vcard_codec logger during a test."""
    logger = logging.getLogger("vcard_codec")
    yield logger
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
