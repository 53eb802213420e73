"""Chat completion client for AI-generated craving insights."""

import json
import os

import httpx
from loguru import logger

from cravelog.config import (
    API_KEY_ENV,
    CHAT_COMPLETIONS_URL,
    DEFAULT_MODEL,
    REQUEST_TIMEOUT,
    TEMPERATURE,
    load_env,
)
from cravelog.errors import CravelogError, MissingAPIKeyError


class APIError(CravelogError):
    pass


class InvalidEndpointError(APIError):
    def __init__(self, endpoint: str = ""):
        self.endpoint = endpoint
        super().__init__("Invalid OpenAI endpoint URL.")


class UnexpectedStatusCodeError(APIError):
    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Unexpected HTTP status code: {status_code}")


def get_api_key(env_key: str = API_KEY_ENV) -> str:
    """Get API key from environment (or a .env file), raising clear error if missing."""
    load_env()
    key = os.environ.get(env_key)
    if not key:
        raise MissingAPIKeyError(
            f"API key not found: set {env_key} environment variable "
            f"or add it to a .env file."
        )
    return key


def _validate_endpoint(endpoint: str) -> httpx.URL:
    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as e:
        raise InvalidEndpointError(endpoint) from e
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidEndpointError(endpoint)
    return url


class ChatCompletionClient:
    """Single-shot chat completion requests. No retries, no streaming."""

    def __init__(self, client: httpx.Client | None = None,
                 endpoint: str = CHAT_COMPLETIONS_URL,
                 api_key: str | None = None):
        self.url = _validate_endpoint(endpoint)
        self.client = client or httpx.Client(timeout=REQUEST_TIMEOUT)
        self._api_key = api_key

    def fetch_completion(self, prompt: str, model: str = DEFAULT_MODEL) -> bytes:
        """POST the prompt as a single user message and return the raw response body."""
        api_key = self._api_key or get_api_key()
        body = {
            "model": model,
            "messages": [
                {"role": "user", "content": prompt},
            ],
            "temperature": TEMPERATURE,
        }

        logger.debug(f"Requesting completion: model {model!r}, prompt {prompt[:32]!r}")
        response = self.client.post(
            self.url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json=body,
        )
        if not 200 <= response.status_code < 300:
            raise UnexpectedStatusCodeError(response.status_code)
        return response.content

    def close(self) -> None:
        self.client.close()


def extract_completion_text(raw: bytes) -> str:
    """Pull the first choice's message text out of a raw completion body."""
    try:
        data = json.loads(raw)
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise APIError(f"Malformed completion response: {e}") from e
    if not isinstance(content, str):
        raise APIError(f"Malformed completion response: no message text ({content!r})")
    return content
