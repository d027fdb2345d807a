"""
Model call loggers used by the LoggingModel decorator.
"""

from llm_pipeline.loggers.base import ModelCallRecord, ModelLogger
from llm_pipeline.loggers.json_logger import JsonModelLogger
from llm_pipeline.loggers.structlog_logger import StructlogModelLogger

__all__ = [
    "ModelCallRecord",
    "ModelLogger",
    "JsonModelLogger",
    "StructlogModelLogger",
]
