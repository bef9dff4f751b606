"""
Vision Completion Tier.

Second AI fallback: one chat completion with the invoice image inline
as a base64 data URL and JSON-object response format.

Author: ML Engineering Team
"""

import base64
import json
from typing import Any, Dict, Optional

import httpx

from warranty_invoice.config import get_config
from warranty_invoice.input_handler.handler import RawDocument
from warranty_invoice.input_handler.image_processor import ImageNormalizer
from warranty_invoice.utils.exceptions import ExtractionFailed
from warranty_invoice.utils.logger import get_logger
from .extraction_result import ExtractionSource, RawExtraction
from .json_payload import parse_json_object
from .prompts import VISION_INSTRUCTION
from .strategies import ExtractionStrategy

# Initialize module logger
logger = get_logger(__name__)


class VisionCompletionClient:
    """
    Client for the vision chat-completion endpoint.

    Attributes:
        model: Vision-capable model name
        timeout: Request timeout in seconds
        max_tokens: Completion token cap
        image_detail: Image detail hint ("high", "low", "auto")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        image_detail: Optional[str] = None
    ) -> None:
        self.api_key = api_key or get_config("ai.api_key", "")
        if not self.api_key:
            raise ValueError("Vision tier needs an API key")

        self.base_url = (base_url or get_config("ai.base_url", "https://api.openai.com/v1")).rstrip('/')
        self.model = model or get_config("ai.vision.model", "gpt-4o")
        self.timeout = timeout or get_config("ai.vision.timeout", 20)
        self.max_tokens = max_tokens or get_config("ai.vision.max_tokens", 1000)
        self.image_detail = image_detail or get_config("ai.vision.image_detail", "high")

    def build_payload(self, data: bytes, media_type: str, instruction: str) -> Dict[str, Any]:
        encoded = base64.b64encode(data).decode('ascii')
        return {
            'model': self.model,
            'response_format': {'type': 'json_object'},
            'temperature': 0,
            'max_tokens': self.max_tokens,
            'messages': [{
                'role': 'user',
                'content': [
                    {'type': 'text', 'text': instruction},
                    {
                        'type': 'image_url',
                        'image_url': {
                            'url': f"data:{media_type};base64,{encoded}",
                            'detail': self.image_detail,
                        },
                    },
                ],
            }],
        }

    def complete(self, data: bytes, media_type: str, instruction: str) -> str:
        """
        Send one image and return the message content.

        Raises:
            httpx.HTTPError: On transport errors or a non-2xx status.
        """
        response = httpx.post(
            f"{self.base_url}/chat/completions",
            headers={
                'Authorization': f"Bearer {self.api_key}",
                'Content-Type': 'application/json',
            },
            json=self.build_payload(data, media_type, instruction),
            timeout=self.timeout,
            follow_redirects=True,
        )
        response.raise_for_status()

        choices = response.json().get('choices') or []
        if not choices:
            return ''
        return (choices[0].get('message') or {}).get('content') or ''


class VisionStrategy(ExtractionStrategy):
    """Tier 2 AI fallback. Any failure raises ExtractionFailed."""

    name = "vision"
    source = ExtractionSource.AI_VISION_FALLBACK

    def __init__(
        self,
        client: Optional[VisionCompletionClient] = None,
        normalizer: Optional[ImageNormalizer] = None,
        instruction: str = VISION_INSTRUCTION
    ) -> None:
        self._client = client
        self.normalizer = normalizer or ImageNormalizer()
        self.instruction = instruction

    @property
    def client(self) -> VisionCompletionClient:
        if self._client is None:
            self._client = VisionCompletionClient()
        return self._client

    def attempt(self, document: RawDocument) -> RawExtraction:
        data, media_type = self.normalizer.encode_for_upload(document)

        try:
            content = self.client.complete(data, media_type, self.instruction)
        except (httpx.HTTPError, ValueError) as e:
            raise ExtractionFailed(self.source.value, str(e)) from e

        try:
            payload = json.loads(content)
        except json.JSONDecodeError:
            payload = parse_json_object(content)

        if not isinstance(payload, dict):
            raise ExtractionFailed(self.source.value, "response was not a JSON object")
        if not isinstance(payload.get('totals'), dict):
            raise ExtractionFailed(self.source.value, "response has no totals object")

        logger.info(f"Vision tier extracted {document.display_name}")
        return RawExtraction(source=self.source, payload=payload)
