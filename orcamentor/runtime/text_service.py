"""Writing assistant backed by the Gemini ``generateContent`` REST API.

The assistant is strictly optional: without an API key, or whenever the
service misbehaves, callers get the offline fallback text instead of an
error.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from decimal import Decimal
from typing import Any, Protocol

import httpx

from orcamentor.domain.formatting import format_number
from orcamentor.runtime.logging import get_logger
from orcamentor.runtime.settings import Settings

logger = get_logger(__name__)

DEFAULT_MESSAGE = "Olá, segue o orçamento solicitado."

IMPROVE_PROMPT = (
    "Melhore esta descrição de serviço para um prestador de serviço profissional.\n"
    "Serviço: {name}.\n"
    "Descrição Atual: {current}.\n"
    "Retorne apenas a nova descrição sugerida, de forma persuasiva e profissional."
)

MESSAGE_PROMPT = (
    "Escreva uma mensagem curta e profissional de WhatsApp/Email para enviar um orçamento.\n"
    "Cliente: {client_name}.\n"
    "Valor Total: R$ {total}.\n"
    "Serviços inclusos: {items}.\n"
    "A mensagem deve ser cordial e convidar para o fechamento."
)


class TextServiceError(RuntimeError):
    """The text service returned no usable text."""


class TextAssistant(Protocol):
    def improve_text(self, name: str, current: str) -> str: ...

    def compose_message(self, client_name: str, total: Decimal, items: Sequence[str]) -> str: ...


class PassthroughTextAssistant:
    """Offline assistant: keeps the current text and sends a stock greeting."""

    def improve_text(self, name: str, current: str) -> str:
        return current

    def compose_message(self, client_name: str, total: Decimal, items: Sequence[str]) -> str:
        return DEFAULT_MESSAGE


def extract_text(payload: Any) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        raise TextServiceError(f"Unexpected response shape: {e}") from e
    if not isinstance(parts, list):
        raise TextServiceError(f"Unexpected parts type: {type(parts).__name__}")
    text = "".join(
        part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
    ).strip()
    if not text:
        raise TextServiceError("Empty response text")
    return text


class GeminiTextAssistant:
    """
    Text assistant calling Gemini over HTTPS.

    Args:
        api_key: Gemini API key
        model: Model name, e.g. ``gemini-3-flash-preview``
        base_url: API root up to the version segment
        client: Optional preconfigured httpx client (tests pass a MockTransport)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-3-flash-preview",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        """Send one prompt and return the response text, raising on any failure."""
        url = f"{self.base_url}/models/{self.model}:generateContent"
        start_time = time.time()
        try:
            response = self.client.post(
                url,
                params={"key": self.api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise TextServiceError(f"Failed to reach text service: {e}") from e
        logger.debug("Text service returned %s in %.2f seconds", response.status_code, time.time() - start_time)

        if response.status_code != 200:
            raise TextServiceError(f"Text service error: {response.status_code}")
        try:
            payload = response.json()
        except ValueError as e:
            raise TextServiceError(f"Malformed response body: {e}") from e
        return extract_text(payload)

    def improve_text(self, name: str, current: str) -> str:
        try:
            return self.generate(IMPROVE_PROMPT.format(name=name, current=current))
        except TextServiceError as e:
            logger.warning("Description suggestion unavailable: %s", e)
            return current

    def compose_message(self, client_name: str, total: Decimal, items: Sequence[str]) -> str:
        prompt = MESSAGE_PROMPT.format(client_name=client_name, total=format_number(total), items=", ".join(items))
        try:
            return self.generate(prompt)
        except TextServiceError as e:
            logger.warning("Quote message unavailable: %s", e)
            return DEFAULT_MESSAGE


def create_text_assistant(settings: Settings, client: httpx.Client | None = None) -> TextAssistant:
    """Gemini when an API key is configured, offline passthrough otherwise."""
    if not settings.assistant_api_key:
        logger.debug("No assistant API key configured; using offline text")
        return PassthroughTextAssistant()
    return GeminiTextAssistant(
        api_key=settings.assistant_api_key,
        model=settings.assistant_model,
        base_url=settings.assistant_base_url,
        client=client,
        timeout=settings.assistant_timeout,
    )
