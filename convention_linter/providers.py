"""Review providers: interchangeable chat-completion endpoints."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

import httpx
import structlog

from convention_linter.errors import MalformedResponseError, RemoteServiceError

REVIEW_TEMPERATURE = 0.1
REVIEW_MAX_OUTPUT_TOKENS = 4000

logger = structlog.get_logger(__name__)


class ProviderKey(StrEnum):
    """Supported AI providers, selected by AI_PROVIDER."""

    GITHUB = "github"
    GEMINI = "gemini"
    OPENAI = "openai"


@dataclass(frozen=True, slots=True)
class ProviderSpec:
    """Fixed endpoint details for one provider.

    ``supports_system_prompt`` is False for chat endpoints that accept only
    user messages. The shipped providers all take a system role, so the flag
    is for adding such an endpoint without a new provider variant.
    """

    key: ProviderKey
    display_name: str
    endpoint: str
    model: str
    credential_env_var: str
    supports_system_prompt: bool = True


GITHUB_MODELS_SPEC = ProviderSpec(
    key=ProviderKey.GITHUB,
    display_name="GitHub Models",
    endpoint="https://models.github.ai/inference/chat/completions",
    model="openai/gpt-4o",
    credential_env_var="GITHUB_TOKEN",
)
GEMINI_SPEC = ProviderSpec(
    key=ProviderKey.GEMINI,
    display_name="Google Gemini (Thinking)",
    endpoint=(
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-2.0-flash-thinking-exp:generateContent"
    ),
    model="gemini-2.0-flash-thinking-exp",
    credential_env_var="GEMINI_API_KEY",
)
OPENAI_SPEC = ProviderSpec(
    key=ProviderKey.OPENAI,
    display_name="OpenAI ChatGPT",
    endpoint="https://api.openai.com/v1/chat/completions",
    model="gpt-4",
    credential_env_var="OPENAI_API_KEY",
)


class ReviewProvider(Protocol):
    """Capability shared by every provider variant."""

    spec: ProviderSpec

    def send(
        self,
        client: httpx.Client,
        system_prompt: str,
        user_prompt: str,
        credential: str,
    ) -> str:
        """Send both prompts and return the reviewer's reply text."""


def _post_json(
    client: httpx.Client,
    spec: ProviderSpec,
    *,
    payload: dict[str, Any],
    headers: dict[str, str],
) -> dict[str, Any]:
    """POST a JSON payload once and return the decoded JSON object."""
    try:
        response = client.post(spec.endpoint, json=payload, headers=headers)
    except httpx.HTTPError as error:
        raise RemoteServiceError(
            f"{spec.display_name} API request failed: {error}",
            status_code=None,
            endpoint=spec.endpoint,
        ) from error

    if not response.is_success:
        raise RemoteServiceError(
            f"{spec.display_name} API call failed with status {response.status_code}: "
            f"{response.text}",
            status_code=response.status_code,
            endpoint=spec.endpoint,
            body=response.text,
        )

    try:
        data = response.json()
    except ValueError as error:
        raise MalformedResponseError(
            f"{spec.display_name} API returned a non-JSON body.",
            endpoint=spec.endpoint,
        ) from error
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Expected JSON object from {spec.display_name} API.",
            endpoint=spec.endpoint,
        )
    return data


def _first_item(value: object) -> dict[str, Any] | None:
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return None


class ChatCompletionsProvider:
    """OpenAI-compatible chat-completion endpoint with bearer-token auth."""

    def __init__(self, spec: ProviderSpec) -> None:
        self.spec = spec

    def build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        """Build role-tagged messages, folding the system prompt in when unsupported."""
        if self.spec.supports_system_prompt:
            messages = [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ]
        else:
            combined = f"{system_prompt}\n\n{user_prompt}" if system_prompt else user_prompt
            messages = [{"role": "user", "content": combined}]
        return {
            "model": self.spec.model,
            "messages": messages,
            "temperature": REVIEW_TEMPERATURE,
            "max_tokens": REVIEW_MAX_OUTPUT_TOKENS,
        }

    def send(
        self,
        client: httpx.Client,
        system_prompt: str,
        user_prompt: str,
        credential: str,
    ) -> str:
        data = _post_json(
            client,
            self.spec,
            payload=self.build_payload(system_prompt, user_prompt),
            headers={"Authorization": f"Bearer {credential}"},
        )
        choice = _first_item(data.get("choices"))
        message = choice.get("message") if choice else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            logger.debug("malformed_response", provider=self.spec.key, response=json.dumps(data))
            raise MalformedResponseError(
                f"Invalid response from {self.spec.display_name} API: "
                "missing choices[0].message.content.",
                endpoint=self.spec.endpoint,
            )
        return content.strip()


class GeminiProvider:
    """Gemini generateContent endpoint with system instructions."""

    def __init__(self, spec: ProviderSpec = GEMINI_SPEC, *, debug_thinking: bool = False) -> None:
        self.spec = spec
        self.debug_thinking = debug_thinking

    def build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": REVIEW_TEMPERATURE,
                "maxOutputTokens": REVIEW_MAX_OUTPUT_TOKENS,
            },
        }

    def send(
        self,
        client: httpx.Client,
        system_prompt: str,
        user_prompt: str,
        credential: str,
    ) -> str:
        data = _post_json(
            client,
            self.spec,
            payload=self.build_payload(system_prompt, user_prompt),
            headers={"x-goog-api-key": credential},
        )
        candidate = _first_item(data.get("candidates"))
        if candidate is None:
            raise MalformedResponseError(
                "No candidates in Gemini response.",
                endpoint=self.spec.endpoint,
            )
        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            parts = []

        answer_parts: list[str] = []
        for part in parts:
            if not isinstance(part, dict):
                continue
            text = part.get("text")
            thought = part.get("thought")
            # Thinking models mark reasoning parts with thought=true.
            if thought is True:
                self._log_thinking(text)
                continue
            if isinstance(thought, str):
                self._log_thinking(thought)
            if isinstance(text, str):
                answer_parts.append(text)

        answer = "".join(answer_parts).strip()
        if not answer:
            logger.debug("malformed_response", provider=self.spec.key, response=json.dumps(data))
            raise MalformedResponseError(
                f"Invalid response from {self.spec.display_name} API: no answer text.",
                endpoint=self.spec.endpoint,
            )
        return answer

    def _log_thinking(self, text: object) -> None:
        if self.debug_thinking and isinstance(text, str) and text:
            logger.debug("gemini_thinking", thought=text)


def get_provider(key: ProviderKey, *, debug_thinking: bool = False) -> ReviewProvider:
    """Return the provider variant for a key."""
    match key:
        case ProviderKey.GITHUB:
            return ChatCompletionsProvider(GITHUB_MODELS_SPEC)
        case ProviderKey.OPENAI:
            return ChatCompletionsProvider(OPENAI_SPEC)
        case ProviderKey.GEMINI:
            return GeminiProvider(GEMINI_SPEC, debug_thinking=debug_thinking)
    raise ValueError(f"Unsupported AI provider: {key}")


def build_review_client(
    timeout_seconds: float = 120,
    *,
    trust_env: bool = True,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Build the HTTP client used for review calls."""
    return httpx.Client(
        headers={"Content-Type": "application/json"},
        timeout=timeout_seconds,
        trust_env=trust_env,
        transport=transport,
    )
