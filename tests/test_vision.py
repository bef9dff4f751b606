"""
Unit Tests - Vision completion tier (HTTP mocked with respx)
"""

import base64
import json

import httpx
import pytest
import respx

from warranty_invoice.extraction.extraction_result import ExtractionSource
from warranty_invoice.extraction.vision import VisionCompletionClient, VisionStrategy
from warranty_invoice.utils.exceptions import ExtractionFailed

COMPLETIONS_URL = "https://api.test/v1/chat/completions"


def completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


@pytest.fixture
def strategy():
    client = VisionCompletionClient(api_key="sk-test", base_url="https://api.test/v1")
    return VisionStrategy(client=client)


class TestVisionStrategy:
    """Tests for the single-shot vision fallback"""

    @respx.mock
    def test_successful_completion(self, strategy, png_document):
        route = respx.post(COMPLETIONS_URL).mock(return_value=completion(json.dumps({
            "invoiceNumber": "2313044",
            "totals": {"labour": 1950, "travel": 0, "parts": 1125, "grandTotal": 3075},
            "confidence": 80,
        })))

        raw = strategy.attempt(png_document)

        assert raw.source is ExtractionSource.AI_VISION_FALLBACK
        assert raw.payload["confidence"] == 80
        assert route.call_count == 1

    @respx.mock
    def test_request_payload(self, strategy, png_document):
        route = respx.post(COMPLETIONS_URL).mock(
            return_value=completion('{"totals": {"labour": 0}}')
        )

        strategy.attempt(png_document)

        body = json.loads(route.calls.last.request.content)
        image_part = body["messages"][0]["content"][1]
        expected_url = "data:image/png;base64," + base64.b64encode(png_document.data).decode("ascii")
        assert body["model"] == "gpt-4o"
        assert body["response_format"] == {"type": "json_object"}
        assert body["max_tokens"] == 1000
        assert body["temperature"] == 0
        assert image_part["image_url"] == {"url": expected_url, "detail": "high"}

    @respx.mock
    def test_missing_totals(self, strategy, png_document):
        respx.post(COMPLETIONS_URL).mock(return_value=completion('{"workCost": 1950}'))

        with pytest.raises(ExtractionFailed):
            strategy.attempt(png_document)

    @respx.mock
    def test_not_json(self, strategy, png_document):
        respx.post(COMPLETIONS_URL).mock(return_value=completion("I can't help with that."))

        with pytest.raises(ExtractionFailed):
            strategy.attempt(png_document)

    @respx.mock
    def test_http_error(self, strategy, png_document):
        respx.post(COMPLETIONS_URL).mock(return_value=httpx.Response(429))

        with pytest.raises(ExtractionFailed):
            strategy.attempt(png_document)

    @respx.mock
    def test_timeout(self, strategy, png_document):
        respx.post(COMPLETIONS_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(ExtractionFailed):
            strategy.attempt(png_document)

    def test_client_requires_api_key(self):
        with pytest.raises(ValueError):
            VisionCompletionClient()

    def test_client_defaults(self):
        client = VisionCompletionClient(api_key="sk-test")

        assert client.timeout == 20
        assert client.base_url == "https://api.openai.com/v1"
