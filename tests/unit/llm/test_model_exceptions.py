"""
Unit tests for the model exception hierarchy.
"""

from llm_pipeline.llm.exceptions import (
    CacheWriteError,
    FallbackExhaustedError,
    ModelAPIError,
    ModelConnectionError,
    ModelError,
    ModelTimeoutError,
    RetryExhaustedError,
    usage_of,
)
from llm_pipeline.models.llm_models import ModelResponse, Usage
from llm_pipeline.models.messages import assistant


def test_timeout_is_a_connection_error():
    """Test hierarchy: timeouts are connection errors are model errors."""
    error = ModelTimeoutError("late")

    assert isinstance(error, ModelConnectionError)
    assert isinstance(error, ModelError)


def test_model_error_str_includes_cause():
    """Test that the cause's text is appended to the message."""
    try:
        try:
            raise ValueError("root problem")
        except ValueError as e:
            raise ModelError("outer step failed") from e
    except ModelError as err:
        assert str(err) == "outer step failed: root problem"


def test_api_error_details():
    """Test that status, type and code land in details."""
    error = ModelAPIError("bad", status_code=400, error_type="invalid_request_error", code="x")

    assert error.details == {"status_code": 400, "error_type": "invalid_request_error", "code": "x"}
    assert error.usage == Usage()


def test_retry_exhausted_message():
    """Test retry exhaustion message and attempts attribute."""
    error = RetryExhaustedError(3, Usage(failed_calls=3))

    assert error.message == "could not get model response after 3 attempts"
    assert error.attempts == 3
    assert error.usage.failed_calls == 3


def test_fallback_exhausted_lists_every_failure():
    """Test that the fallback error names each candidate's failure."""
    error = FallbackExhaustedError([ModelError("first"), ModelError("second")], Usage())

    assert str(error) == (
        "all 2 models in fallback chain failed\n"
        "model 0 failed: first\n"
        "model 1 failed: second"
    )


def test_cache_write_error_carries_response():
    """Test that the successful response is available on the error."""
    response = ModelResponse(primary_message=assistant("ok"), usage=Usage(successful_calls=1))

    error = CacheWriteError("could not write to cache", response)

    assert error.response is response
    assert error.usage == Usage(successful_calls=1)


def test_usage_of_foreign_exception_is_zero():
    """Test that exceptions without usage report Usage()."""
    assert usage_of(RuntimeError("x")) == Usage()
    assert usage_of(ModelError("x", usage=Usage(failed_calls=1))) == Usage(failed_calls=1)


def test_model_error_str_skips_empty_cause():
    """Test that a cause with no text (e.g. a bare TimeoutError) adds no suffix."""
    try:
        try:
            raise TimeoutError()
        except TimeoutError as e:
            raise ModelTimeoutError("model call exceeded 0.01s timeout") from e
    except ModelTimeoutError as err:
        assert str(err) == "model call exceeded 0.01s timeout"
