"""Tests for codecs and the predefined codec set."""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from dataknobs_schema import ErrorKind, ValidationError, s


def _cents():
    return s.codec(
        s.string().regex(r"^\d+\.\d\d$"),
        s.integer().nonnegative(),
        decode=lambda text: int(text.replace(".", "")),
        encode=lambda value: f"{value // 100}.{value % 100:02d}",
    )


class TestCodec:
    """Test decode and encode directions."""

    def test_decode(self):
        """Test that parse decodes."""
        assert _cents().parse("12.50") == 1250
        assert _cents().decode("0.05") == 5

    def test_encode(self):
        """Test that encode runs the inverse direction."""
        assert _cents().encode(1250) == "12.50"
        assert _cents().safe_encode(5).data == "0.05"

    def test_input_validation(self):
        """Test that raw input is validated before decoding."""
        issue = _cents().safe_parse("12.5").error.first_issue
        assert issue.kind is ErrorKind.INVALID_FORMAT

    def test_output_validation_on_encode(self):
        """Test that encode validates its input against the output side."""
        issue = _cents().safe_encode(-1).error.first_issue
        assert issue.kind is ErrorKind.TOO_SMALL

    def test_decode_exception(self):
        """Test that decode exceptions become decode_failed issues."""
        codec = s.codec(s.string(), s.number(), decode=float, encode=str)
        issue = codec.safe_parse("abc").error.first_issue
        assert issue.kind is ErrorKind.DECODE_FAILED
        assert "could not convert" in issue.message

    def test_encode_exception(self):
        """Test that encode exceptions become encode_failed issues."""

        def refuse(value):
            raise RuntimeError("cannot encode")

        codec = s.codec(s.string(), s.any(), decode=lambda v: v, encode=refuse)
        issue = codec.safe_encode(1).error.first_issue
        assert issue.kind is ErrorKind.ENCODE_FAILED
        assert issue.message == "Codec encode failed: cannot encode"
        with pytest.raises(ValidationError):
            codec.encode(1)

    def test_decoded_value_validated(self):
        """Test that the decoded value must satisfy the output side."""
        codec = s.codec(s.string(), s.number().positive(), decode=float, encode=str)
        assert codec.safe_parse("-1").error.first_issue.kind is ErrorKind.TOO_SMALL

    def test_round_trip(self):
        """Test that encoding a decoded value validates against the input side."""
        codec = _cents()
        for encoded in ("0.00", "1.99", "120.07"):
            decoded = codec.parse(encoded)
            assert codec.input_schema.is_valid(codec.encode(decoded))

    def test_nested_codec(self):
        """Test a codec used as an object field."""
        schema = s.object({"price": _cents()})
        assert schema.parse({"price": "1.00"}) == {"price": 100}
        assert schema.safe_parse({"price": "x"}).error.first_issue.path == ("price",)

    def test_async_encode_in_sync_entry_point(self):
        """Test that an async encode function is reported, not leaked."""

        async def encode(value):
            return str(value)

        codec = s.codec(s.string(), s.number(), decode=float, encode=encode)
        issue = codec.safe_encode(1).error.first_issue
        assert issue.kind is ErrorKind.ASYNC_NOT_SUPPORTED
        assert issue.context["operation"] == "encode"

    @pytest.mark.asyncio
    async def test_async_decode_and_encode(self):
        """Test async entry points awaiting async codec functions."""

        async def decode(text):
            await asyncio.sleep(0)
            return float(text)

        async def encode(value):
            await asyncio.sleep(0)
            return str(value)

        codec = s.codec(s.string(), s.number(), decode=decode, encode=encode)
        assert await codec.parse_async("2.5") == 2.5
        assert await codec.decode_async("1") == 1.0
        assert await codec.encode_async(2.5) == "2.5"
        result = await codec.safe_encode_async("x")
        assert result.error.first_issue.kind is ErrorKind.INVALID_TYPE

    @pytest.mark.asyncio
    async def test_async_decode_exception(self):
        """Test that an awaited decode exception becomes decode_failed."""

        async def decode(text):
            raise ValueError("bad text")

        codec = s.codec(s.string(), s.number(), decode=decode, encode=str)
        result = await codec.safe_decode_async("x")
        assert result.error.first_issue.kind is ErrorKind.DECODE_FAILED


class TestPredefinedCodecs:
    """Test the ready-made codecs."""

    def test_string_to_number(self):
        """Test numeric text conversion both ways."""
        codec = s.string_to_number()
        assert codec.parse("42") == 42
        assert codec.parse(" 3.5 ") == 3.5
        assert codec.encode(3.5) == "3.5"
        assert codec.safe_parse("nan").error.first_issue.kind is ErrorKind.INVALID_TYPE
        assert codec.safe_parse("four").error.first_issue.kind is ErrorKind.DECODE_FAILED

    def test_string_to_int(self):
        """Test integer text conversion."""
        assert s.string_to_int().parse("7") == 7
        assert not s.string_to_int().is_valid("7.5")

    def test_string_to_boolean(self):
        """Test boolean words."""
        codec = s.string_to_boolean()
        assert codec.parse("Yes") is True
        assert codec.parse("off") is False
        assert codec.encode(True) == "true"
        assert not codec.is_valid("maybe")

    def test_iso_datetime(self):
        """Test ISO 8601 conversion with a Z suffix."""
        codec = s.iso_datetime_to_date()
        value = codec.parse("2024-05-01T12:00:00Z")
        assert value == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
        assert codec.encode(value) == "2024-05-01T12:00:00+00:00"

    def test_epoch_codecs(self):
        """Test epoch seconds and milliseconds conversion."""
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert s.epoch_seconds_to_date().parse(moment.timestamp()) == moment
        assert s.epoch_seconds_to_date().encode(moment) == moment.timestamp()
        assert s.epoch_millis_to_date().parse(1704067200000) == moment
        assert s.epoch_millis_to_date().encode(moment) == 1704067200000

    def test_json_codec(self):
        """Test JSON text conversion, optionally validated."""
        codec = s.json_codec(s.object({"a": s.number()}))
        assert codec.parse('{"a": 1}') == {"a": 1}
        assert json.loads(codec.encode({"a": 2})) == {"a": 2}
        assert codec.safe_parse("{").error.first_issue.kind is ErrorKind.DECODE_FAILED
        assert codec.safe_parse('{"a": "x"}').error.first_issue.path == ("a",)
