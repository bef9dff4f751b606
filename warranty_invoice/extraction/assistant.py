"""
Assistant Service Tier.

First AI fallback: the invoice is uploaded to a hosted assistant that
was set up with the extraction instruction, a thread and run are
created, and the run is polled until it reaches a terminal state.

REST endpoints used (header OpenAI-Beta: assistants=v2):
    POST   /files
    POST   /threads/runs
    GET    /threads/{thread_id}/runs/{run_id}
    GET    /threads/{thread_id}/messages
    DELETE /files/{file_id}

Author: ML Engineering Team
"""

import time
from typing import Any, Dict, Optional, Tuple

import httpx

from warranty_invoice.config import get_config
from warranty_invoice.input_handler.handler import RawDocument
from warranty_invoice.input_handler.image_processor import ImageNormalizer
from warranty_invoice.utils.exceptions import ExtractionFailed
from warranty_invoice.utils.logger import get_logger
from .extraction_result import ExtractionSource, RawExtraction
from .json_payload import parse_json_object
from .prompts import ASSISTANT_INSTRUCTION
from .strategies import ExtractionStrategy

# Initialize module logger
logger = get_logger(__name__)


TERMINAL_RUN_STATES = frozenset({
    'completed', 'failed', 'cancelled', 'expired', 'incomplete', 'requires_action',
})


class AssistantServiceClient:
    """
    Thin synchronous client for the assistant REST API.

    Every call that takes a ``deadline`` (a time.monotonic() value) gets
    the time left until it as its request timeout, so the whole
    upload/run/poll/read sequence fits in one wall-clock budget.

    Attributes:
        assistant_id: Pre-configured assistant to run
        timeout: Wall-clock budget for one extraction, in seconds
        poll_interval: Seconds between run status polls
        request_timeout: Upper bound for any single request

    Example:
        >>> with AssistantServiceClient() as client:
        ...     deadline = client.start_deadline()
        ...     file_id = client.upload_file(data, "invoice.jpg", "image/jpeg", deadline)
        ...     thread_id, run_id = client.create_run(file_id, "Extract...", deadline)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        assistant_id: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        request_timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None
    ) -> None:
        api_key = api_key or get_config("ai.api_key", "")
        self.assistant_id = assistant_id or get_config("ai.assistant.assistant_id", "")
        if not api_key or not self.assistant_id:
            raise ValueError("Assistant tier needs both an API key and an assistant id")

        self.timeout = timeout if timeout is not None else get_config("ai.assistant.timeout", 30)
        self.poll_interval = poll_interval if poll_interval is not None else get_config(
            "ai.assistant.poll_interval", 1.0
        )
        self.request_timeout = request_timeout or get_config("ai.assistant.request_timeout", 15)

        self._http = http_client or httpx.Client(
            base_url=(base_url or get_config("ai.base_url", "https://api.openai.com/v1")).rstrip('/'),
            headers={
                'Authorization': f"Bearer {api_key}",
                'OpenAI-Beta': 'assistants=v2',
            },
            timeout=self.request_timeout,
            follow_redirects=True,
        )

    def __enter__(self) -> 'AssistantServiceClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def start_deadline(self) -> float:
        """Return the monotonic time at which the current extraction expires."""
        return time.monotonic() + self.timeout

    def _timeout_for(self, deadline: Optional[float], action: str) -> Any:
        if deadline is None:
            return httpx.USE_CLIENT_DEFAULT

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ExtractionFailed(
                ExtractionSource.AI_ASSISTANT.value,
                f"{self.timeout}s deadline passed before {action}",
            )
        return min(remaining, self.request_timeout)

    def upload_file(
        self,
        data: bytes,
        filename: str,
        media_type: str,
        deadline: Optional[float] = None
    ) -> str:
        """Upload document bytes; returns the file id."""
        response = self._http.post(
            '/files',
            data={'purpose': 'vision'},
            files={'file': (filename, data, media_type)},
            timeout=self._timeout_for(deadline, "upload"),
        )
        response.raise_for_status()
        file_id = response.json()['id']
        logger.debug(f"Uploaded {filename} as {file_id}")
        return file_id

    def create_run(
        self,
        file_id: str,
        instruction: str,
        deadline: Optional[float] = None
    ) -> Tuple[str, str]:
        """
        Create a thread with one user message and start a run on it.

        Returns:
            (thread_id, run_id)
        """
        response = self._http.post('/threads/runs', json={
            'assistant_id': self.assistant_id,
            'thread': {
                'messages': [{
                    'role': 'user',
                    'content': [
                        {'type': 'text', 'text': instruction},
                        {'type': 'image_file', 'image_file': {'file_id': file_id}},
                    ],
                }],
            },
        }, timeout=self._timeout_for(deadline, "creating the run"))
        response.raise_for_status()
        run = response.json()
        return run['thread_id'], run['id']

    def get_run(self, thread_id: str, run_id: str, deadline: Optional[float] = None) -> Dict[str, Any]:
        response = self._http.get(
            f'/threads/{thread_id}/runs/{run_id}',
            timeout=self._timeout_for(deadline, f"polling run {run_id}"),
        )
        response.raise_for_status()
        return response.json()

    def wait_for_run(self, thread_id: str, run_id: str, deadline: Optional[float] = None) -> str:
        """
        Poll a run until it reaches a terminal state.

        Args:
            thread_id: Thread the run belongs to.
            run_id: Run to poll.
            deadline: Monotonic expiry; defaults to now + timeout.

        Returns:
            The terminal status.

        Raises:
            ExtractionFailed: If the deadline passes first.
        """
        if deadline is None:
            deadline = self.start_deadline()

        status = None
        while True:
            if status is not None and time.monotonic() >= deadline:
                raise ExtractionFailed(
                    ExtractionSource.AI_ASSISTANT.value,
                    f"run {run_id} still '{status}' after {self.timeout}s",
                )

            status = self.get_run(thread_id, run_id, deadline).get('status', '')
            if status in TERMINAL_RUN_STATES:
                logger.debug(f"Run {run_id} finished with status {status}")
                return status

            time.sleep(max(0.0, min(self.poll_interval, deadline - time.monotonic())))

    def read_latest_message(self, thread_id: str, deadline: Optional[float] = None) -> str:
        """Return the text of the newest message in a thread."""
        response = self._http.get(
            f'/threads/{thread_id}/messages',
            params={'order': 'desc', 'limit': 1},
            timeout=self._timeout_for(deadline, "reading the reply"),
        )
        response.raise_for_status()

        messages = response.json().get('data') or []
        if not messages:
            return ''

        parts = []
        for content in messages[0].get('content') or []:
            if content.get('type') == 'text':
                parts.append(content.get('text', {}).get('value', ''))
        return '\n'.join(parts)

    def delete_file(self, file_id: str) -> None:
        # Cleanup runs even after the deadline, bounded by request_timeout
        response = self._http.delete(f'/files/{file_id}')
        response.raise_for_status()
        logger.debug(f"Deleted uploaded file {file_id}")


class AssistantStrategy(ExtractionStrategy):
    """
    Tier 1 AI fallback.

    The client's timeout is a wall-clock budget measured from the start
    of attempt(); upload, run creation, polling and the reply read all
    draw on it. The uploaded file is deleted whether the run succeeds or
    not. Every transport, protocol or parsing failure becomes
    ExtractionFailed so the pipeline can move on to the next tier.
    """

    name = "assistant"
    source = ExtractionSource.AI_ASSISTANT

    def __init__(
        self,
        client: Optional[AssistantServiceClient] = None,
        normalizer: Optional[ImageNormalizer] = None,
        instruction: str = ASSISTANT_INSTRUCTION
    ) -> None:
        self._client = client
        self.normalizer = normalizer or ImageNormalizer()
        self.instruction = instruction

    @property
    def client(self) -> AssistantServiceClient:
        if self._client is None:
            self._client = AssistantServiceClient()
        return self._client

    def attempt(self, document: RawDocument) -> RawExtraction:
        deadline = self.client.start_deadline()
        data, media_type = self.normalizer.encode_for_upload(document)
        filename = document.filename or ('invoice.jpg' if media_type == 'image/jpeg' else 'invoice.png')

        try:
            file_id = self.client.upload_file(data, filename, media_type, deadline)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise ExtractionFailed(self.source.value, f"upload failed: {e}") from e

        try:
            text = self._run(file_id, deadline)
        finally:
            self._cleanup(file_id)

        payload = parse_json_object(text)
        if payload is None:
            raise ExtractionFailed(self.source.value, "response contained no JSON object")
        if not isinstance(payload.get('totals'), dict):
            raise ExtractionFailed(self.source.value, "response has no totals object")

        logger.info(f"Assistant tier extracted {document.display_name}")
        return RawExtraction(source=self.source, payload=payload)

    def _run(self, file_id: str, deadline: float) -> str:
        try:
            thread_id, run_id = self.client.create_run(file_id, self.instruction, deadline)
            status = self.client.wait_for_run(thread_id, run_id, deadline)
            if status != 'completed':
                raise ExtractionFailed(self.source.value, f"run ended with status '{status}'")
            return self.client.read_latest_message(thread_id, deadline)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise ExtractionFailed(self.source.value, str(e)) from e

    def _cleanup(self, file_id: str) -> None:
        try:
            self.client.delete_file(file_id)
        except httpx.HTTPError as e:
            logger.warning(f"Could not delete uploaded file {file_id}: {e}")
