"""
LLM pipeline: composable resilience decorators for LLM backends and typed
encode / call / parse pipelines with corrective feedback.
"""

from llm_pipeline.llm.base_model import Model
from llm_pipeline.models import Message, ModelResponse, Role, Usage

__version__ = "0.1.0"

__all__ = ["Model", "Message", "ModelResponse", "Role", "Usage", "__version__"]
