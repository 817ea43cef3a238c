"""Tests for vcard_codec.phone_normalizer."""

import pytest

from vcard_codec.phone_normalizer import (
    extract_digits,
    format_phone_number,
    is_valid_phone_number,
    map_phone_types_v3,
    normalize_phone_number,
)


class TestNormalizePhoneNumber:
    """Test suite for digit extraction and normalization."""

    def test_extract_digits(self):
        assert extract_digits('+1 (813) 616-0999') == '18136160999'
        assert extract_digits('') == ''
        assert extract_digits(None) == ''

    @pytest.mark.parametrize('value', [
        '8136160999',
        '813-616-0999',
        '(813) 616.0999',
        '+1 813 616 0999',
        '18136160999',
        'tel:+1-813-616-0999',
    ])
    def test_normalizes_to_national_digits(self, value):
        assert normalize_phone_number(value) == '8136160999'

    def test_eleven_digits_without_trunk_prefix_kept(self):
        assert normalize_phone_number('28136160999') == '28136160999'

    def test_validity(self):
        assert is_valid_phone_number('8136160999')
        assert not is_valid_phone_number('8675309')
        assert not is_valid_phone_number('28136160999')
        assert not is_valid_phone_number('')


class TestFormatPhoneNumber:
    """Test suite for format_phone_number."""

    def test_format(self):
        assert format_phone_number('8136160999') == '+1-813-616-0999'

    def test_only_first_ten_digits_used(self):
        assert format_phone_number('813616099912') == '+1-813-616-0999'


class TestMapPhoneTypesV3:
    """Test suite for map_phone_types_v3."""

    def test_text_becomes_cell(self):
        assert map_phone_types_v3(['text', 'voice']) == ['cell', 'voice']

    def test_textphone_dropped(self):
        assert map_phone_types_v3(['textphone']) == []

    def test_duplicates_removed(self):
        assert map_phone_types_v3(['cell', 'text', 'video']) == ['cell', 'video']
