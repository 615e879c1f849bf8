# SPDX-License-Identifier: AGPL-3.0-only

"""
LLM client wrapper with retries, timeouts, and provider abstraction.

Both supported providers (Mistral and Groq) expose an OpenAI compatible
``/chat/completions`` endpoint, so one request builder serves them all.
"""
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from .errors import UpstreamFailure

logger = logging.getLogger(__name__)

DEFAULT_BASE_URLS = {
    "mistral": "https://api.mistral.ai/v1",
    "groq": "https://api.groq.com/openai/v1",
}


class LLMClient:
    """Unified client for calling chat-completion providers (Mistral, Groq)."""

    def __init__(
        self,
        provider: str,
        model: str,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        timeout: int = 120,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        session: Optional[requests.Session] = None,
    ):
        self.provider = provider.lower()
        if self.provider not in DEFAULT_BASE_URLS:
            raise ValueError(f"Unknown provider: {provider}")
        self.model = model
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_BASE_URLS[self.provider]).rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.session = session or requests.Session()

    def call(
        self,
        prompt: str,
        system_prompt: str = "",
        max_tokens: int = 4000,
        temperature: float = 0.1,
        images: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Call the chat model with retry logic.

        ``images`` are data URIs sent alongside the prompt to vision models.

        Returns: {"text": str, "tokens": int, "cost": float}
        Raises: UpstreamFailure once every attempt has failed.
        """
        if not self.api_key:
            raise UpstreamFailure(f"{self.provider.upper()}_API_KEY not set")

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._call_chat(prompt, system_prompt, max_tokens, temperature, images)
            except (requests.RequestException, ValueError) as e:
                last_error = e
                logger.warning("%s call attempt %d/%d failed: %s", self.provider, attempt, self.max_attempts, e)
                if attempt < self.max_attempts:
                    time.sleep(self.retry_delay)

        raise UpstreamFailure(
            f"LLM call failed after {self.max_attempts} attempts: {describe_request_error(last_error)}",
            cause=last_error,
            timed_out=isinstance(last_error, requests.Timeout),
        )

    def _call_chat(
        self,
        prompt: str,
        system_prompt: str,
        max_tokens: int,
        temperature: float,
        images: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if images:
            content = [{"type": "text", "text": prompt}]
            content.extend({"type": "image_url", "image_url": {"url": uri}} for uri in images)
            messages.append({"role": "user", "content": content})
        else:
            messages.append({"role": "user", "content": prompt})

        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature
        }

        data = post_json(
            self.session,
            f"{self.base_url}/chat/completions",
            headers=headers,
            payload=payload,
            timeout=self.timeout,
        )

        return {
            "text": _message_content(data),
            "tokens": _total_tokens(data),
            "cost": 0.0,
        }

    def describe(self) -> Dict[str, Any]:
        """Status information safe to expose to clients."""
        return {
            "provider": self.provider,
            "model": self.model,
            "configured": bool(self.api_key),
        }


def describe_request_error(error: Optional[BaseException]) -> str:
    """Prefer the provider's own error message over the HTTP status line."""
    if error is None:
        return "unknown error"
    response = getattr(error, "response", None)
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message")
            nested = body.get("error")
            if not message and isinstance(nested, dict):
                message = nested.get("message")
            if message:
                return str(message)
    return str(error)


def post_json(
    session: requests.Session,
    url: str,
    headers: Dict[str, str],
    payload: Dict[str, Any],
    timeout: float,
    clock: Callable[[], float] = time.monotonic,
) -> Any:
    """
    POST a JSON payload and decode the JSON answer within ``timeout`` seconds.

    ``timeout`` bounds the whole attempt: requests only limits the connect
    time and the gap between bytes, so the body is streamed and the elapsed
    time checked after every chunk.

    Raises:
        requests.Timeout: If the deadline passes while reading the body
        requests.HTTPError: On a non-success status
        ValueError: If the body is not JSON
    """
    deadline = clock() + timeout
    resp = session.post(url, headers=headers, json=payload, timeout=timeout, stream=True)
    try:
        try:
            resp.raise_for_status()
        except requests.HTTPError:
            # load the error body before the connection is released
            _ = resp.content
            raise
        body = bytearray()
        for chunk in resp.iter_content(chunk_size=65536):
            body.extend(chunk)
            if clock() > deadline:
                raise requests.Timeout(f"No complete response from {url} within {timeout}s")
    finally:
        resp.close()
    return json.loads(bytes(body))


def _message_content(data: Any) -> str:
    """First choice's message text; malformed bodies raise ValueError."""
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices:
        raise ValueError("Response has no choices")
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        raise ValueError("Response choice has no message")
    content = message.get("content")
    if content is None:
        return ""
    if not isinstance(content, str):
        raise ValueError("Response message content is not text")
    return content


def _total_tokens(data: Dict[str, Any]) -> int:
    usage = data.get("usage")
    if not isinstance(usage, dict):
        return 0
    tokens = usage.get("total_tokens")
    return tokens if isinstance(tokens, int) else 0
