"""Tests for asynchronous entry points."""

import asyncio

import pytest

from dataknobs_schema import ErrorKind, ValidationError, s


async def is_available(name):
    await asyncio.sleep(0)
    return name != "taken"


async def shout(value):
    await asyncio.sleep(0)
    return value.upper()


class TestSyncEntryPointsWithAsyncCallbacks:
    """Test that async callbacks are reported in synchronous parsing."""

    def test_async_refine_reported(self):
        """Test that an async predicate yields async_not_supported."""
        result = s.string().refine(is_available).safe_parse("free")
        issue = result.error.first_issue
        assert issue.kind is ErrorKind.ASYNC_NOT_SUPPORTED
        assert issue.context["operation"] == "refinement"

    def test_async_transform_reported(self):
        """Test that an async transform never leaks a coroutine as data."""
        result = s.string().transform(shout).safe_parse("a")
        assert not result.success
        assert result.error.first_issue.kind is ErrorKind.ASYNC_NOT_SUPPORTED

    def test_parse_raises_validation_error(self):
        """Test that parse raises rather than returning a coroutine."""
        with pytest.raises(ValidationError):
            s.string().transform(shout).parse("a")

    def test_default_with_async_schema_constructible(self):
        """Test that defaults on async schemas are accepted at construction."""
        schema = s.string().refine(is_available).default("free")
        assert schema.parse() == "free"


class TestAsyncEntryPoints:
    """Test parse_async and safe_parse_async."""

    @pytest.mark.asyncio
    async def test_sync_schema_async_parse(self):
        """Test that purely synchronous schemas work through the async path."""
        assert await s.string().parse_async("a") == "a"
        result = await s.number().safe_parse_async("a")
        assert result.error.first_issue.kind is ErrorKind.INVALID_TYPE

    @pytest.mark.asyncio
    async def test_async_refine(self):
        """Test that async predicates are awaited."""
        schema = s.string().refine(is_available, "Name is taken")
        assert await schema.parse_async("free") == "free"
        result = await schema.safe_parse_async("taken")
        assert result.error.messages == ["Name is taken"]

    @pytest.mark.asyncio
    async def test_async_transform_in_object(self):
        """Test async callbacks nested inside aggregates."""
        schema = s.object({
            "names": s.string().transform(shout).array(),
            "user": s.string().refine(is_available),
        })
        assert await schema.parse_async({"names": ["a", "b"], "user": "x"}) == {
            "names": ["A", "B"],
            "user": "x",
        }
        result = await schema.safe_parse_async({"names": ["a", 1], "user": "taken"})
        assert [issue.path for issue in result.issues] == [("names", 1), ("user",)]

    @pytest.mark.asyncio
    async def test_async_super_refine(self):
        """Test async super_refine callbacks."""

        async def check(value, ctx):
            await asyncio.sleep(0)
            if value < 0:
                ctx.add_issue("negative")

        schema = s.number().super_refine(check)
        assert await schema.parse_async(1) == 1
        assert (await schema.safe_parse_async(-1)).error.messages == ["negative"]

    @pytest.mark.asyncio
    async def test_async_exceptions_become_issues(self):
        """Test that exceptions from awaited callbacks are converted."""

        async def explode(value):
            raise RuntimeError("boom")

        result = await s.string().transform(explode).safe_parse_async("a")
        assert result.error.first_issue.kind is ErrorKind.TRANSFORM_FAILED
        result = await s.string().refine(explode).safe_parse_async("a")
        assert result.error.first_issue.kind is ErrorKind.CUSTOM

    @pytest.mark.asyncio
    async def test_async_union_and_preprocess(self):
        """Test async callbacks inside unions and preprocessors."""

        async def trim(value):
            return value.strip()

        schema = s.union(s.number(), s.preprocess(trim, s.string().min(1)))
        assert await schema.parse_async("  x ") == "x"
        assert await schema.parse_async(3) == 3

    @pytest.mark.asyncio
    async def test_concurrent_calls(self):
        """Test that one validator serves concurrent async calls."""
        schema = s.string().transform(shout)
        results = await asyncio.gather(*(schema.parse_async(c) for c in "abc"))
        assert results == ["A", "B", "C"]
