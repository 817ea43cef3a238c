"""
vCard 3.0 / 4.0 codec.

    >>> from vcard_codec import Contact, decode, encode
    >>> text = encode(Contact().set_kind('individual').set_name('Pamela Mishaw'))
    >>> decode(text).names
    ['Pamela Mishaw']
"""

from vcard_codec.contact import (
    Address,
    Contact,
    Email,
    InstantMessage,
    Phone,
)
from vcard_codec.errors import VCardError, VCardFormatError, VCardValidationError
from vcard_codec.escaping import escape, unescape
from vcard_codec.tokenizer import Parameter, Token, tokenize
from vcard_codec.vcard_parser import decode, decode_all, parse_vcard_file, split_vcard_blocks
from vcard_codec.vcard_writer import encode, fold, validate_vcard_file, write_vcard_file

__version__ = "1.0.0"

__all__ = [
    "Address",
    "Contact",
    "Email",
    "InstantMessage",
    "Parameter",
    "Phone",
    "Token",
    "VCardError",
    "VCardFormatError",
    "VCardValidationError",
    "decode",
    "decode_all",
    "encode",
    "escape",
    "fold",
    "parse_vcard_file",
    "split_vcard_blocks",
    "tokenize",
    "unescape",
    "validate_vcard_file",
    "write_vcard_file",
]
