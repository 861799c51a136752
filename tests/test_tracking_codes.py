"""
Tests for tracking code parsing and chunking helpers.
"""

import pytest

from app.application.services.batching import chunk_count, chunked
from app.application.services.tracking_codes import (
    MAX_TRACKING_CODES,
    is_numeric_code,
    parse_tracking_codes,
)


class TestParseTrackingCodes:

    def test_three_codes(self):
        assert parse_tracking_codes("BR123\nBR456\n9999") == ["BR123", "BR456", "9999"]

    def test_trims_and_drops_blank_lines(self):
        assert parse_tracking_codes("  BR1 \r\n\n\t\nBR2\n") == ["BR1", "BR2"]

    def test_empty_input(self):
        assert parse_tracking_codes("") == []
        assert parse_tracking_codes("   \n  ") == []
        assert parse_tracking_codes(None) == []

    def test_caps_at_fifty(self):
        text = "\n".join(f"BR{i}" for i in range(120))
        codes = parse_tracking_codes(text)
        assert len(codes) == MAX_TRACKING_CODES == 50
        assert codes[0] == "BR0"
        assert codes[-1] == "BR49"

    def test_numeric_detection(self):
        assert is_numeric_code("123456")
        assert not is_numeric_code("BR123")
        assert not is_numeric_code("12 34")


class TestChunked:

    def test_preserves_order_and_sizes(self):
        chunks = list(chunked(list(range(450)), 200))
        assert [len(c) for c in chunks] == [200, 200, 50]
        assert chunks[2][0] == 400

    def test_empty(self):
        assert list(chunked([], 10)) == []
        assert chunk_count(0, 10) == 0

    def test_chunk_count(self):
        assert chunk_count(450, 200) == 3
        assert chunk_count(400, 200) == 2

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            list(chunked([1, 2], 0))
