"""
Integration tests: pipelines running on the full decorator stack.

Requests go through every layer (logging, usage counting, caching, retry,
fallback, timeout, concurrency, role remapping) down to the OpenAI adapter,
which talks to an in-process fake chat-completions server.
"""

import io
import json

import httpx
import pytest
from pydantic import BaseModel

from llm_pipeline.caches.sql import SQLCache
from llm_pipeline.decorators.usage_counting import UsageCounter
from llm_pipeline.encoding.template import TemplateEncoder
from llm_pipeline.llm.exceptions import RetryExhaustedError
from llm_pipeline.loggers.json_logger import JsonModelLogger
from llm_pipeline.parsing.feedback import ErrorStringFeedback
from llm_pipeline.parsing.json_parse import JsonParser
from llm_pipeline.parsing.schema import JSONSchemaValidator
from llm_pipeline.pipeline.exceptions import PipelineError
from llm_pipeline.pipeline.feedback import FeedbackPipeline
from llm_pipeline.stack import build_model, feedback_pipeline_config


class Sentiment(BaseModel):
    label: str
    confidence: float


SCHEMA = {
    "type": "object",
    "properties": {
        "label": {"enum": ["positive", "negative", "neutral"]},
        "confidence": {"type": "number", "minimum": 0, "maximum": 1},
    },
    "required": ["label", "confidence"],
}

PROMPT = "Review: {{ input }}"


def sentiment_pipeline(model, settings):
    return FeedbackPipeline(
        TemplateEncoder(
            system_template="Classify the sentiment. Reply with JSON.",
            user_template=PROMPT,
        ),
        JsonParser(Sentiment),
        ErrorStringFeedback(),
        model,
        validator=JSONSchemaValidator(SCHEMA),
        config=feedback_pipeline_config(settings),
    )


@pytest.mark.integration
@pytest.mark.asyncio
async def test_feedback_recovers_through_stack(test_settings, fake_chat_server):
    """Test schema violation -> feedback -> valid reply, with usage and logs."""
    server = fake_chat_server(
        {
            "Review: great product": ['{"label": "amazing", "confidence": 0.9}'],
            "JSON Schema validation failed with 1 error(s): label: 'amazing' is not one of "
            "['positive', 'negative', 'neutral']": ['{"label": "positive", "confidence": 0.9}'],
        }
    )
    counter = UsageCounter()
    log_stream = io.StringIO()
    model = build_model(
        test_settings,
        counter=counter,
        model_logger=JsonModelLogger(log_stream),
        transport=server.transport(),
    )

    async with model:
        output, usage = await sentiment_pipeline(model, test_settings).call("great product")

    assert output == Sentiment(label="positive", confidence=0.9)
    assert usage.successful_calls == 2
    assert usage.input_tokens == 24
    assert counter.get() == usage
    assert len(log_stream.getvalue().splitlines()) == 2
    assert len(server.requests[1]["messages"]) == 4


@pytest.mark.integration
@pytest.mark.asyncio
async def test_retry_recovers_from_server_error(test_settings, fake_chat_server):
    """Test that a transient 503 is retried below the pipeline."""
    server = fake_chat_server(
        {"Review: fine": [503, '{"label": "neutral", "confidence": 0.5}']}
    )
    model = build_model(test_settings, transport=server.transport())

    output, usage = await sentiment_pipeline(model, test_settings).call("fine")
    await model.close()

    assert output.label == "neutral"
    assert usage.failed_calls == 1
    assert usage.successful_calls == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_retry_exhaustion_is_fatal_for_pipeline(test_settings, fake_chat_server):
    """Test that backend failures end the pipeline without feedback rounds."""
    server = fake_chat_server({"Review: down": [500, 500, 500]})
    model = build_model(test_settings, transport=server.transport())

    with pytest.raises(PipelineError) as exc_info:
        await sentiment_pipeline(model, test_settings).call("down")
    await model.close()

    err = exc_info.value
    assert isinstance(err.__cause__, RetryExhaustedError)
    assert err.usage.failed_calls == test_settings.MAX_RETRIES + 1
    assert len(server.requests) == test_settings.MAX_RETRIES + 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_fallback_model_used_when_primary_missing(test_settings, fake_chat_server):
    """Test that an unknown primary model falls back to the next configured one."""
    server = fake_chat_server({"Review: ok": ['{"label": "neutral", "confidence": 0.4}']})

    def routing(request):
        body = json.loads(request.content)
        if body["model"] == "gpt-test":
            server.requests.append(body)
            return httpx.Response(
                404,
                json={"error": {"type": "invalid_request_error", "code": "model_not_found",
                                "message": "unknown model"}},
            )
        return server.handler(request)

    settings = test_settings.model_copy(update={"FALLBACK_MODELS": ["gpt-backup"], "MAX_RETRIES": 0})
    model = build_model(settings, transport=httpx.MockTransport(routing))

    output, usage = await sentiment_pipeline(model, settings).call("ok")
    await model.close()

    assert output.label == "neutral"
    assert [r["model"] for r in server.requests] == ["gpt-test", "gpt-backup"]
    assert usage.failed_calls == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_sql_cache_serves_repeat_calls(test_settings, fake_chat_server, tmp_path):
    """Test that a repeated pipeline call is answered from the SQLite cache for free."""
    server = fake_chat_server({"Review: again": ['{"label": "negative", "confidence": 0.7}']})
    cache = SQLCache(tmp_path / "cache.db")
    model = build_model(test_settings, cache=cache, transport=server.transport())
    pipeline = sentiment_pipeline(model, test_settings)

    first, first_usage = await pipeline.call("again")
    second, second_usage = await pipeline.call("again")
    await model.close()
    cache.close()

    assert first == second
    assert first_usage.successful_calls == 1
    assert second_usage.total_calls == 0
    assert len(server.requests) == 1
