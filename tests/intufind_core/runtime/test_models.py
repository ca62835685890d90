"""Unit tests for envelope and chunk models."""

from intufind_core.runtime.models import ApiResponse, StreamChunk, StreamChunkType


class TestApiResponse:
    """Tests for success envelope unwrapping."""

    def test_unwraps_envelope(self):
        body = {"data": {"id": "x"}, "tierLimits": {"chat": {"enabled": True}}}

        result = ApiResponse.from_body(body)

        assert result.data == {"id": "x"}
        assert result.tier_limits == {"chat": {"enabled": True}}
        assert result.usage is None

    def test_ignores_extra_fields(self):
        result = ApiResponse.from_body({"data": 1, "success": True, "usage": {"quota": {}}})

        assert result.data == 1
        assert result.usage == {"quota": {}}

    def test_non_object_body(self):
        assert ApiResponse.from_body([1, 2]).data is None
        assert ApiResponse.from_body({}).data is None

    def test_accepts_wire_alias(self):
        result = ApiResponse.model_validate({"data": "d", "tierLimits": {"a": 1}})
        assert result.tier_limits == {"a": 1}


class TestStreamChunk:
    """Tests for chunk type helpers."""

    def test_type_helpers(self):
        chunk = StreamChunk(type="text_delta", data="hi")

        assert chunk.is_text_delta() is True
        assert chunk.is_complete() is False
        assert chunk.is_type(StreamChunkType.TEXT_DELTA) is True

    def test_complete_with_null_data(self):
        chunk = StreamChunk.model_validate({"type": "complete", "data": None})

        assert chunk.is_complete() is True
        assert chunk.data is None

    def test_unknown_type_is_kept(self):
        """Chunk types unknown to the client should still decode."""
        chunk = StreamChunk.model_validate({"type": "brand_new", "data": {}})

        assert chunk.type == "brand_new"
        assert not any(chunk.is_type(t) for t in StreamChunkType)

    def test_metadata(self):
        chunk = StreamChunk.model_validate(
            {"type": "text_delta", "data": "x", "metadata": {"source": "human", "agentName": "Ana"}}
        )

        assert chunk.metadata == {"source": "human", "agentName": "Ana"}

    def test_error_chunk(self):
        chunk = StreamChunk(type=StreamChunkType.ERROR, data={"error": "boom"})

        assert chunk.is_error() is True
        assert chunk.data["error"] == "boom"
