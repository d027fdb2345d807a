"""
OpenAI chat-completions adapter.

Works against api.openai.com and any server exposing the same
/v1/chat/completions contract. Supports:
- Text and image messages (images as image_url content parts)
- Sampling and reasoning options (temperature, reasoning_effort, verbosity, ...)
- JSON Schema constrained output (response_format)
- Server-sent-event streaming with begin/text callbacks
"""

import json
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
import structlog

from llm_pipeline.llm.exceptions import (
    ModelAPIError,
    ModelConnectionError,
    ModelError,
    ModelNotAvailableError,
    ModelTimeoutError,
    UnsupportedMessageError,
)
from llm_pipeline.llm.http_model import HTTPModel
from llm_pipeline.models.enums import ReasoningEffort, Role, Verbosity
from llm_pipeline.models.llm_models import ModelResponse, Usage
from llm_pipeline.models.messages import Message


logger = structlog.get_logger(__name__)

DEFAULT_OPENAI_URL = "https://api.openai.com/v1/chat/completions"

_ROLE_NAMES = {
    Role.SYSTEM: "system",
    Role.USER: "user",
    Role.ASSISTANT: "assistant",
    Role.DEVELOPER: "developer",
}


@dataclass(frozen=True)
class StreamCallbacks:
    """Callbacks invoked while a streamed reply arrives."""

    on_begin: Optional[Callable[[], None]] = None
    on_text: Optional[Callable[[str], None]] = None


@dataclass(frozen=True)
class OpenAIConfig:
    """Request options for OpenAIModel. None means "let the server decide"."""

    url: str = DEFAULT_OPENAI_URL
    temperature: Optional[float] = None
    reasoning_effort: Optional[ReasoningEffort] = None
    verbosity: Optional[Verbosity] = None
    top_p: Optional[float] = None
    presence_penalty: Optional[float] = None
    prediction: Optional[str] = None
    max_output_tokens: Optional[int] = None
    json_schema: Optional[dict[str, Any]] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    stream: Optional[StreamCallbacks] = None
    timeout: float = 120.0
    transport: Optional[httpx.AsyncBaseTransport] = None


def _failed(usage: Usage = Usage()) -> Usage:
    return usage + Usage(failed_calls=1)


def _usage_from(raw: Any) -> Usage:
    # Servers may send null counts or omit the usage object
    if not isinstance(raw, dict):
        return Usage()
    return Usage(
        input_tokens=raw.get("prompt_tokens") or 0,
        output_tokens=raw.get("completion_tokens") or 0,
    )


class OpenAIModel(HTTPModel):
    """
    Model backed by an OpenAI-compatible chat-completions endpoint.

    Reasoning messages have no OpenAI equivalent and raise
    UnsupportedMessageError; wrap this model in a RoleRemapper when the
    conversation may contain them.
    """

    def __init__(self, name: str, api_key: str, config: Optional[OpenAIConfig] = None):
        config = config or OpenAIConfig()
        super().__init__(name, timeout=config.timeout, transport=config.transport)
        self.api_key = api_key
        self.config = config

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        body = self._build_body(messages)

        logger.debug(
            "Sending chat completion request",
            model=self.name,
            num_messages=len(messages),
            stream=self.config.stream is not None,
        )

        start_time = time.perf_counter()
        try:
            if self.config.stream is not None:
                content, usage = await self._respond_streaming(body)
            else:
                content, usage = await self._respond_static(body)
        except ModelError as e:
            self._record_call(e.usage, time.perf_counter() - start_time, success=False)
            logger.warning("Chat completion failed", model=self.name, error=str(e))
            raise
        except httpx.TimeoutException as e:
            self._record_call(Usage(), time.perf_counter() - start_time, success=False)
            raise ModelTimeoutError(
                f"request to {self.name} timed out after {self.timeout}s",
                details={"model": self.name},
                usage=_failed(),
            ) from e
        except httpx.HTTPError as e:
            self._record_call(Usage(), time.perf_counter() - start_time, success=False)
            raise ModelConnectionError(
                "could not execute request",
                details={"model": self.name, "error_type": type(e).__name__},
                usage=_failed(),
            ) from e

        usage = usage + Usage(successful_calls=1)
        self._record_call(usage, time.perf_counter() - start_time, success=True)
        return ModelResponse(
            primary_message=Message(role=Role.ASSISTANT, content=content),
            usage=usage,
        )

    def _build_body(self, messages: Sequence[Message]) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.name,
            "messages": [self._api_message(m) for m in messages],
        }
        cfg = self.config
        if cfg.temperature is not None:
            body["temperature"] = cfg.temperature
        if cfg.reasoning_effort is not None:
            body["reasoning_effort"] = cfg.reasoning_effort.value
        if cfg.verbosity is not None:
            body["verbosity"] = cfg.verbosity.value
        if cfg.top_p is not None:
            body["top_p"] = cfg.top_p
        if cfg.presence_penalty is not None:
            body["presence_penalty"] = cfg.presence_penalty
        if cfg.prediction is not None:
            body["prediction"] = {"type": "content", "content": cfg.prediction}
        if cfg.max_output_tokens is not None:
            body["max_completion_tokens"] = cfg.max_output_tokens
        if cfg.json_schema is not None:
            body["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": "custom_schema",
                    "schema": cfg.json_schema,
                    "strict": True,
                },
            }
        if cfg.stream is not None:
            body["stream"] = True
            body["stream_options"] = {"include_usage": True}
        return body

    def _api_message(self, message: Message) -> dict[str, Any]:
        role = _ROLE_NAMES.get(message.role)
        if role is None:
            raise UnsupportedMessageError(
                f"unsupported role for {self.name}: {message.role.value}",
                details={"model": self.name, "role": message.role.value},
                usage=_failed(),
            )
        if not message.images:
            return {"role": role, "content": message.content}
        parts: list[dict[str, Any]] = [{"type": "text", "text": message.content}]
        for image in message.images:
            parts.append(
                {"type": "image_url", "image_url": {"url": image.to_base64_encoded()}}
            )
        return {"role": role, "content": parts}

    def _headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        headers.update(self.config.headers)
        return headers

    async def _respond_static(self, body: dict[str, Any]) -> tuple[str, Usage]:
        client = await self._get_client()
        response = await client.post(self.config.url, json=body, headers=self._headers())
        if not response.is_success:
            raise self._api_error(response.status_code, response.text)

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ModelAPIError(
                f"could not decode response body: {response.text}",
                status_code=response.status_code,
                usage=_failed(),
            ) from e
        if not isinstance(data, dict):
            raise ModelAPIError(
                f"unexpected response body: {response.text}",
                status_code=response.status_code,
                usage=_failed(),
            )

        usage = _usage_from(data.get("usage"))
        error = data.get("error")
        if isinstance(error, dict) and error.get("code"):
            raise self._error_from_payload(error, response.status_code, usage)
        choices = data.get("choices") or []
        if not choices:
            raise ModelAPIError(
                f"response had no choices: {response.text}",
                status_code=response.status_code,
                usage=_failed(usage),
            )
        return (choices[0].get("message") or {}).get("content") or "", usage

    async def _respond_streaming(self, body: dict[str, Any]) -> tuple[str, Usage]:
        callbacks = self.config.stream
        client = await self._get_client()
        async with client.stream(
            "POST", self.config.url, json=body, headers=self._headers()
        ) as response:
            if not response.is_success:
                await response.aread()
                raise self._api_error(response.status_code, response.text)

            if callbacks.on_begin is not None:
                callbacks.on_begin()

            parts: list[str] = []
            input_tokens = 0
            output_tokens = 0
            async for line in response.aiter_lines():
                if not line.startswith("data: "):
                    continue
                data = line[len("data: "):]
                if data == "[DONE]":
                    break
                try:
                    chunk = json.loads(data)
                except json.JSONDecodeError as e:
                    raise ModelAPIError(
                        "failed to decode stream chunk",
                        status_code=response.status_code,
                        usage=_failed(Usage(input_tokens=input_tokens, output_tokens=output_tokens)),
                    ) from e
                if not isinstance(chunk, dict):
                    raise ModelAPIError(
                        f"unexpected stream chunk: {data}",
                        status_code=response.status_code,
                        usage=_failed(Usage(input_tokens=input_tokens, output_tokens=output_tokens)),
                    )

                error = chunk.get("error")
                if isinstance(error, dict) and error.get("code"):
                    raise self._error_from_payload(
                        error,
                        response.status_code,
                        Usage(input_tokens=input_tokens, output_tokens=output_tokens),
                    )
                choices = chunk.get("choices") or []
                if choices:
                    text = (choices[0].get("delta") or {}).get("content") or ""
                    parts.append(text)
                    if callbacks.on_text is not None:
                        callbacks.on_text(text)
                chunk_usage = chunk.get("usage") or {}
                if chunk_usage.get("prompt_tokens"):
                    input_tokens = chunk_usage["prompt_tokens"]
                if chunk_usage.get("completion_tokens"):
                    output_tokens = chunk_usage["completion_tokens"]

        return "".join(parts), Usage(input_tokens=input_tokens, output_tokens=output_tokens)

    def _api_error(self, status_code: int, text: str) -> ModelAPIError:
        try:
            error = json.loads(text).get("error") or {}
        except (json.JSONDecodeError, AttributeError):
            error = {}
        if not error:
            return ModelAPIError(
                f"request failed with http status {status_code}: {text}",
                status_code=status_code,
                usage=_failed(),
            )
        return self._error_from_payload(error, status_code, Usage())

    def _error_from_payload(
        self, error: dict[str, Any], status_code: int, usage: Usage
    ) -> ModelAPIError:
        error_type = error.get("type") or ""
        code = str(error.get("code") or "")
        message = (
            f"openai api returned an error: {error_type}.{code} - {error.get('message', '')}"
        )
        error_class = ModelNotAvailableError if code == "model_not_found" else ModelAPIError
        return error_class(
            message,
            status_code=status_code,
            error_type=error_type or None,
            code=code or None,
            usage=_failed(usage),
        )
