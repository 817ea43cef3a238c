"""Tests for vcard_codec.vcard_parser."""

from datetime import datetime, timezone

import pytest

from vcard_codec.errors import VCardFormatError, VCardValidationError
from vcard_codec.vcard_parser import decode, decode_all, parse_vcard_file, split_vcard_blocks


def _card(*lines, version='4.0'):
    return '\n'.join(['BEGIN:VCARD', f'VERSION:{version}', *lines, 'END:VCARD'])


class TestDecodeFraming:
    """Documents that must be rejected as a whole."""

    @pytest.mark.parametrize('text', [
        'VERSION:4.0\nFN:Bob\nEND:VCARD',
        'BEGIN:VCARD\nVERSION:4.0\nFN:Bob',
        'BEGIN:VCARD\nVERSION:2.0\nFN:Bob\nEND:VCARD',
        'BEGIN:VCARD\nVERSION:4\nFN:Bob\nEND:VCARD',
        'BEGIN:VCARD\nFN:Bob\nEND:VCARD',
        'BEGIN:VCARD\nFN:Bob\nVERSION:4.0\nEND:VCARD',
        'BEGIN:VCARD\nEND:VCARD',
        'BEGIN:VCARD\nVERSION:4.0\nFN\nEND:VCARD',
        'BEGIN:VCARD\nVERSION:4.0\nFN:\nEND:VCARD',
        'BEGIN:VCARD\nVERSION:4.0\nBEGIN:VCARD\nEND:VCARD',
        'BEGIN:VCARD\nVERSION:4.0\nVERSION:3.0\nEND:VCARD',
        '',
    ])
    def test_rejected(self, text):
        with pytest.raises(VCardFormatError):
            decode(text)

    @pytest.mark.parametrize('line', [
        'PHOTO;ENCODING=b:AAAA',
        'LOGO;ENCODING=b:AAAA',
    ])
    def test_v3_media_without_type_rejected(self, line):
        with pytest.raises(VCardFormatError, match='missing encoding'):
            decode(_card('FN:Bob', line, version='3.0'))

    def test_invalid_value_rejected(self):
        with pytest.raises(VCardValidationError):
            decode(_card('FN:Bob', 'EMAIL:not-an-email'))

    def test_invalid_timestamp_rejected(self):
        with pytest.raises(VCardFormatError):
            decode(_card('FN:Bob', 'BDAY:1989-01-17'))
        with pytest.raises(VCardFormatError):
            decode(_card('FN:Bob', 'BDAY:19891317T000000Z'))

    def test_crlf_and_case_insensitive_markers(self):
        contact = decode('begin:vcard\r\nVERSION:3.0\r\nFN:Bob\r\nend:vcard\r\n')

        assert contact.version == 3
        assert contact.names == ['Bob']

    def test_unknown_property_ignored(self):
        contact = decode(_card('FN:Bob', 'X-SOCIALPROFILE;TYPE=twitter:@bob', 'PRODID:-//x//y'))

        assert contact.names == ['Bob']

    def test_name_structure_ignored(self):
        contact = decode(_card('FN:Pamela Mishaw', 'N:Something;Else;;;'))

        assert contact.names == ['Pamela Mishaw']


class TestDecodeVersion4:
    """Field mapping of version 4 documents."""

    def test_address_only_card(self):
        contact = decode(
            'BEGIN:VCARD\n'
            'VERSION:4.0\n'
            'FN:Pamela Mishaw\n'
            'N:Mishaw;Pamela\n'
            'ADR:;;123 main st;Clearwater;FL;33584;USA\n'
            'END:VCARD'
        )

        assert contact.version == 4
        assert contact.names == ['Pamela Mishaw']
        assert contact.addresses[0].zip_code == '33584'
        assert contact.kind is None

    def test_phone_with_extension_and_preference(self):
        contact = decode(_card(
            'FN:Bob',
            'TEL;VALUE=uri;PREF=1;TYPE=cell,video:tel:+1-813-616-0999;ext=123',
        ))

        phone = contact.phones[0]
        assert phone.number == '8136160999'
        assert phone.extension == '123'
        assert phone.types == ['cell', 'video']
        assert phone.pref is True

    def test_phone_type_case_folded(self):
        contact = decode(_card('FN:Bob', 'TEL;TYPE=CELL:8136160999'))

        assert contact.phones[0].types == ['cell']
        assert contact.phones[0].pref is False

    def test_address_with_label(self):
        contact = decode(_card(
            'FN:Bob',
            'ADR;LABEL=My House\\, in t\\;he middle:;;123 main st;Clearwater;FL;33584;USA',
        ))

        address = contact.addresses[0]
        assert address.components() == ('123 main st', 'Clearwater', 'FL', '33584', 'USA')
        assert address.label == 'My House, in t;he middle'

    def test_short_address_padded(self):
        contact = decode(_card('FN:Bob', 'ADR:;;123 main st'))

        assert contact.addresses[0].components() == ('123 main st', '', '', '', '')

    def test_dates(self):
        contact = decode(_card(
            'FN:Bob',
            'BDAY:19890117T050000Z',
            'ANNIVERSARY:19960828T000000Z',
        ))

        assert contact.birthday == datetime(1989, 1, 17, 5, tzinfo=timezone.utc)
        assert contact.anniversary == datetime(1996, 8, 28, tzinfo=timezone.utc)

    def test_kind_gender_and_messaging(self):
        contact = decode(_card(
            'KIND:Group',
            'FN:Bob',
            'GENDER:M;Funky \\;Chicken',
            'IMPP;PREF=1:SIP:rob@out.com',
            'EMAIL;PREF=1:apples@gmial.com',
        ))

        assert contact.kind == 'group'
        assert contact.gender == 'M'
        assert contact.gender_identity == 'funky ;chicken'
        assert contact.instant_messages[0].protocol == 'sip'
        assert contact.instant_messages[0].address == 'rob@out.com'
        assert contact.instant_messages[0].pref is True
        assert contact.emails[0].pref is True

    def test_photo_data_uri(self, photo_uri):
        contact = decode(_card('FN:Bob', f'PHOTO:{photo_uri}'))

        assert contact.photos == [photo_uri]

    def test_text_fields(self):
        contact = decode(_card(
            'FN:Bob',
            'NICKNAME:Mo\\:on',
            'TITLE:Super b\\;abe',
            'ROLE:Corn cleaner',
            'ORG:Rob co\\, inc;Fart di\\;vision',
            'NOTE:line one\\nline two',
            'URL:http://www.google.com',
        ))

        assert contact.nicknames == ['Mo:on']
        assert contact.titles == ['Super b;abe']
        assert contact.roles == ['Corn cleaner']
        assert contact.organizations == [('Rob co, inc', 'Fart di;vision')]
        assert contact.notes == ['line one\nline two']
        assert contact.urls == ['http://www.google.com']


class TestDecodeVersion3:
    """Field mapping of version 3 documents."""

    def test_preference_in_type(self):
        contact = decode(_card(
            'FN:Bob',
            'TEL;TYPE=cell,video,pref:+1-813-616-0999',
            'EMAIL;TYPE=internet,pref:apples@gmial.com',
            version='3.0',
        ))

        assert contact.phones[0].types == ['cell', 'video']
        assert contact.phones[0].pref is True
        assert contact.emails[0].pref is True

    def test_preference_in_repeated_type_parameters(self):
        contact = decode(_card(
            'FN:Bob',
            'TEL;TYPE=CELL;TYPE=VOICE;TYPE=PREF:+1-813-616-0999',
            'EMAIL;TYPE=INTERNET;TYPE=pref:apples@gmial.com',
            version='3.0',
        ))

        assert contact.phones[0].types == ['cell', 'voice']
        assert contact.phones[0].pref is True
        assert contact.emails[0].pref is True

    def test_grouped_label(self):
        contact = decode(_card(
            'FN:Bob',
            'item1.ADR:;;123 main st;Clearwater;FL;33584;USA',
            'item1.X-ABLabel:My House\\, in the middle',
            version='3.0',
        ))

        assert contact.addresses[0].label == 'My House, in the middle'
        assert contact.addresses[0].city == 'Clearwater'

    def test_base64_photo(self):
        contact = decode(_card('FN:Bob', 'PHOTO;ENCODING=b;TYPE=PNG:AAAA', version='3.0'))

        assert contact.photos == ['data:image/png;base64,AAAA']

    def test_extended_birthday(self):
        contact = decode(_card('FN:Bob', 'BDAY:1989-01-17T00:00:00Z', version='3.0'))

        assert contact.birthday == datetime(1989, 1, 17, tzinfo=timezone.utc)

    def test_version4_only_fields_still_read(self):
        contact = decode(_card('FN:Bob', 'KIND:org', 'GENDER:F', version='3.0'))

        assert contact.kind == 'org'
        assert contact.gender == 'F'


class TestMultipleCards:
    """Test suite for split_vcard_blocks and decode_all."""

    def test_split_blocks(self):
        content = _card('FN:One') + '\n\n' + _card('FN:Two') + '\n'

        blocks = split_vcard_blocks(content)

        assert len(blocks) == 2
        assert blocks[1].startswith('BEGIN:VCARD')
        assert blocks[1].endswith('END:VCARD')

    def test_content_outside_block_rejected(self):
        with pytest.raises(VCardFormatError):
            split_vcard_blocks('FN:Stray\n' + _card('FN:One'))

    def test_nested_begin_rejected(self):
        with pytest.raises(VCardFormatError):
            split_vcard_blocks('BEGIN:VCARD\nBEGIN:VCARD\nEND:VCARD')

    def test_decode_all(self):
        contacts = decode_all(_card('FN:One') + '\n' + _card('FN:Two', version='3.0'))

        assert [contact.names for contact in contacts] == [['One'], ['Two']]
        assert [contact.version for contact in contacts] == [4, 3]

    def test_decode_all_empty(self):
        with pytest.raises(VCardFormatError):
            decode_all('\n\n')

    def test_decode_all_unterminated(self):
        with pytest.raises(VCardFormatError):
            decode_all(_card('FN:One') + '\nBEGIN:VCARD\nVERSION:4.0\nFN:Two')


class TestParseVcardFile:
    """Test suite for parse_vcard_file."""

    def test_reads_file(self, temp_dir):
        path = temp_dir / 'contacts.vcf'
        path.write_text(_card('FN:Zoë') + '\n', encoding='utf-8')

        contacts = parse_vcard_file(path)

        assert contacts[0].names == ['Zoë']

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            parse_vcard_file(temp_dir / 'missing.vcf')

    def test_not_utf8(self, temp_dir):
        path = temp_dir / 'latin1.vcf'
        path.write_bytes(_card('FN:Zo\xeb').encode('latin-1'))

        with pytest.raises(VCardFormatError):
            parse_vcard_file(path)
