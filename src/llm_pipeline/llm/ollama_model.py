"""
Ollama adapter.

Communicates with the Ollama chat API using httpx AsyncClient. Supports:
- Multi-turn conversations via POST /api/chat
- Images (raw base64, as Ollama expects)
- Structured output via JSON Schema (format parameter)
- Token accounting from prompt_eval_count / eval_count
"""

import json
import time
from collections.abc import Sequence
from dataclasses import dataclass
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
from llm_pipeline.models.enums import Role
from llm_pipeline.models.llm_models import ModelResponse, Usage
from llm_pipeline.models.messages import Message


logger = structlog.get_logger(__name__)

_ROLE_NAMES = {
    Role.SYSTEM: "system",
    Role.USER: "user",
    Role.ASSISTANT: "assistant",
}


@dataclass(frozen=True)
class OllamaConfig:
    """Request options for OllamaModel."""

    base_url: str = "http://ollama:11434"
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    seed: Optional[int] = None
    max_output_tokens: Optional[int] = None
    json_schema: Optional[dict[str, Any]] = None
    timeout: float = 120.0
    transport: Optional[httpx.AsyncBaseTransport] = None


class OllamaModel(HTTPModel):
    """
    Model backed by a local or remote Ollama server.

    API Endpoints:
    - POST /api/chat: Chat completion with optional format constraint

    Response:
    {
        "model": "qwen2.5:7b",
        "message": {"role": "assistant", "content": "..."},
        "done": true,
        "prompt_eval_count": 50,
        "eval_count": 150
    }
    """

    def __init__(self, name: str, config: Optional[OllamaConfig] = None):
        config = config or OllamaConfig()
        super().__init__(name, timeout=config.timeout, transport=config.transport)
        self.config = config
        self.base_url = config.base_url.rstrip("/")

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        payload = self._build_payload(messages)

        logger.debug(
            "Sending chat request to Ollama",
            model=self.name,
            num_messages=len(messages),
            has_schema=self.config.json_schema is not None,
        )

        start_time = time.perf_counter()
        try:
            content, usage = await self._chat(payload)
        except ModelError as e:
            self._record_call(e.usage, time.perf_counter() - start_time, success=False)
            logger.warning("Ollama chat failed", model=self.name, error=str(e))
            raise
        except httpx.TimeoutException as e:
            self._record_call(Usage(), time.perf_counter() - start_time, success=False)
            raise ModelTimeoutError(
                f"request to {self.name} timed out after {self.timeout}s",
                details={"model": self.name},
                usage=Usage(failed_calls=1),
            ) from e
        except httpx.HTTPError as e:
            self._record_call(Usage(), time.perf_counter() - start_time, success=False)
            raise ModelConnectionError(
                "could not execute request",
                details={"model": self.name, "error_type": type(e).__name__},
                usage=Usage(failed_calls=1),
            ) from e

        usage = usage + Usage(successful_calls=1)
        latency = time.perf_counter() - start_time
        self._record_call(usage, latency, success=True)
        logger.info(
            "Ollama chat successful",
            model=self.name,
            latency_ms=int(latency * 1000),
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        return ModelResponse(
            primary_message=Message(role=Role.ASSISTANT, content=content),
            usage=usage,
        )

    def _build_payload(self, messages: Sequence[Message]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.name,
            "messages": [self._api_message(m) for m in messages],
            "stream": False,
        }
        options: dict[str, Any] = {}
        if self.config.temperature is not None:
            options["temperature"] = self.config.temperature
        if self.config.top_p is not None:
            options["top_p"] = self.config.top_p
        if self.config.seed is not None:
            options["seed"] = self.config.seed
        if self.config.max_output_tokens is not None:
            options["num_predict"] = self.config.max_output_tokens
        if options:
            payload["options"] = options
        if self.config.json_schema is not None:
            # Ollama expects the schema object directly as "format"
            payload["format"] = self.config.json_schema
        return payload

    def _api_message(self, message: Message) -> dict[str, Any]:
        role = _ROLE_NAMES.get(message.role)
        if role is None:
            raise UnsupportedMessageError(
                f"unsupported role for {self.name}: {message.role.value}",
                details={"model": self.name, "role": message.role.value},
                usage=Usage(failed_calls=1),
            )
        api_message: dict[str, Any] = {"role": role, "content": message.content}
        if message.images:
            api_message["images"] = [image.to_raw_base64() for image in message.images]
        return api_message

    async def _chat(self, payload: dict[str, Any]) -> tuple[str, Usage]:
        client = await self._get_client()
        response = await client.post(f"{self.base_url}/api/chat", json=payload)

        if response.status_code == 404:
            raise ModelNotAvailableError(
                f"Model not found: {self.name}",
                status_code=404,
                usage=Usage(failed_calls=1),
            )
        if not response.is_success:
            raise ModelAPIError(
                f"Ollama error {response.status_code}: {response.text}",
                status_code=response.status_code,
                usage=Usage(failed_calls=1),
            )

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ModelAPIError(
                "Invalid JSON response from Ollama",
                status_code=response.status_code,
                usage=Usage(failed_calls=1),
            ) from e
        if not isinstance(data, dict):
            raise ModelAPIError(
                f"unexpected response body from Ollama: {response.text}",
                status_code=response.status_code,
                usage=Usage(failed_calls=1),
            )

        usage = Usage(
            input_tokens=data.get("prompt_eval_count") or 0,
            output_tokens=data.get("eval_count") or 0,
        )
        if data.get("error"):
            raise ModelAPIError(
                f"Ollama error: {data['error']}",
                status_code=response.status_code,
                usage=usage + Usage(failed_calls=1),
            )
        message = data.get("message") or {}
        return message.get("content") or "", usage
