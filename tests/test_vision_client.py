"""
Tests for the vision label detection client.
"""

import json

import httpx
import pytest

from cropsight.services.vision_client import (
    VisionClient,
    VisionServiceError,
    parse_label_annotations,
)


class TestParseLabelAnnotations:

    def test_parses_and_lowercases(self):
        labels = parse_label_annotations({
            "labelAnnotations": [
                {"description": "Leaf Spot", "score": 0.91},
                {"description": "Plant", "score": 0.8},
            ]
        })

        assert [(l.description, l.score) for l in labels] == [("leaf spot", 0.91), ("plant", 0.8)]

    def test_missing_annotations_is_empty(self):
        assert parse_label_annotations({"textAnnotations": []}) == []

    @pytest.mark.parametrize("payload", [
        None,
        [],
        "labels",
        {"labelAnnotations": "leaf"},
        {"labelAnnotations": [{"description": "leaf"}]},
        {"labelAnnotations": [{"description": 4, "score": 0.5}]},
        {"labelAnnotations": [{"description": "leaf", "score": "high"}]},
        {"labelAnnotations": [{"description": "leaf", "score": 0.5}, "blight"]},
    ])
    def test_structural_deviation_is_empty(self, payload):
        assert parse_label_annotations(payload) == []

    def test_scores_are_clamped(self):
        labels = parse_label_annotations({
            "labelAnnotations": [{"description": "rust", "score": 1.2}]
        })

        assert labels[0].score == 1.0


class TestVisionClient:

    def _client(self, handler, api_key="vision-key"):
        return VisionClient(api_key=api_key, transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_detect_labels(self):
        seen = {}

        def handler(request):
            seen["key"] = request.url.params.get("key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "responses": [{"labelAnnotations": [{"description": "Blight", "score": 0.7}]}]
            })

        labels = await self._client(handler).detect_labels("aGVsbG8=")

        assert [(l.description, l.score) for l in labels] == [("blight", 0.7)]
        assert seen["key"] == "vision-key"
        request = seen["body"]["requests"][0]
        assert request["image"]["content"] == "aGVsbG8="
        assert {"type": "LABEL_DETECTION", "maxResults": 15} in request["features"]

    @pytest.mark.asyncio
    async def test_response_without_labels_is_empty(self):
        client = self._client(lambda r: httpx.Response(200, json={"responses": [{}]}))

        assert await client.detect_labels("aGVsbG8=") == []

    @pytest.mark.asyncio
    async def test_missing_key_raises(self):
        client = VisionClient(api_key=None)

        assert not client.is_configured
        with pytest.raises(VisionServiceError):
            await client.detect_labels("aGVsbG8=")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 403, 429, 500, 503])
    async def test_error_status_raises(self, status):
        client = self._client(lambda r: httpx.Response(status, text="nope"))

        with pytest.raises(VisionServiceError):
            await client.detect_labels("aGVsbG8=")

    @pytest.mark.asyncio
    async def test_error_object_raises(self):
        client = self._client(lambda r: httpx.Response(200, json={
            "responses": [{"error": {"code": 3, "message": "Bad image data."}}]
        }))

        with pytest.raises(VisionServiceError, match="Bad image data"):
            await client.detect_labels("aGVsbG8=")

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        client = self._client(lambda r: httpx.Response(200, text="<html>"))

        with pytest.raises(VisionServiceError):
            await client.detect_labels("aGVsbG8=")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(VisionServiceError):
            await self._client(handler).detect_labels("aGVsbG8=")

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(VisionServiceError, match="timeout"):
            await self._client(handler).detect_labels("aGVsbG8=")
