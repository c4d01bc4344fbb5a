"""
Unit tests for noodleseed_mcp.utils.fast_json module
"""

import pytest

from noodleseed_mcp.utils.fast_json import JSONDecodeError, dumps, loads


class TestSerialization:
    """Test JSON serialization used for SSE frames and HTTP bodies"""

    def test_dumps_returns_compact_single_line(self):
        data = {"displayText": "line one\nline two", "structuredPayload": {"total": 2}}

        result = dumps(data)

        assert isinstance(result, str)
        assert "\n" not in result
        assert loads(result) == data

    def test_loads_accepts_bytes_and_str(self):
        assert loads(b'{"toolId": "search"}') == {"toolId": "search"}
        assert loads('[1, 2, 3]') == [1, 2, 3]

    def test_unicode_preserved(self):
        data = {"query": "café ☕"}
        assert loads(dumps(data)) == data


class TestErrorHandling:
    """Test malformed input"""

    @pytest.mark.parametrize("payload", [b"{not json", b"", b"{'single': 'quotes'}"])
    def test_invalid_json_raises(self, payload):
        with pytest.raises(JSONDecodeError):
            loads(payload)

    def test_decode_error_is_value_error(self):
        assert issubclass(JSONDecodeError, ValueError)
