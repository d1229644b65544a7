"""
实体标识符测试
"""
import time

import pytest

from hotelops.services.errors import InvalidIdentifierError
from hotelops.services.identifiers import new_identifier, is_valid_identifier, ensure_identifier


class TestIdentifiers:

    def test_format(self):
        value = new_identifier()
        assert len(value) == 24
        assert is_valid_identifier(value)

    def test_timestamp_prefix(self):
        before = int(time.time())
        value = new_identifier()
        assert before <= int(value[:8], 16) <= int(time.time())

    def test_unique(self):
        assert len({new_identifier() for _ in range(1000)}) == 1000

    @pytest.mark.parametrize("value", [
        "", "abc", "zz" * 12, "0" * 23, "0" * 25, None, 12345,
    ])
    def test_invalid(self, value):
        assert not is_valid_identifier(value)
        with pytest.raises(InvalidIdentifierError):
            ensure_identifier(value)

    def test_case_insensitive(self):
        value = new_identifier()
        assert ensure_identifier(value.upper()) == value
