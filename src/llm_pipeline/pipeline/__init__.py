"""
Typed pipelines: encode an input, call a model, parse the reply.
"""

from llm_pipeline.pipeline.base import (
    Encoder,
    FeedbackGenerator,
    Parser,
    Pipeline,
    Validator,
)
from llm_pipeline.pipeline.exceptions import (
    EncodingError,
    FallbackPipelineExhaustedError,
    FeedbackExhaustedError,
    PipelineError,
)
from llm_pipeline.pipeline.feedback import FeedbackPipeline, FeedbackPipelineConfig
from llm_pipeline.pipeline.model_fallback import ModelFallbackPipeline
from llm_pipeline.pipeline.oneshot import OneShotPipeline

__all__ = [
    "Pipeline",
    "Encoder",
    "Parser",
    "Validator",
    "FeedbackGenerator",
    "OneShotPipeline",
    "FeedbackPipeline",
    "FeedbackPipelineConfig",
    "ModelFallbackPipeline",
    "PipelineError",
    "EncodingError",
    "FeedbackExhaustedError",
    "FallbackPipelineExhaustedError",
]
