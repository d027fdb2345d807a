"""
Encoders: turn a typed input into the opening messages of a conversation.
"""

from llm_pipeline.encoding.fixed import FixedEncoder
from llm_pipeline.encoding.sequential import SequentialEncoder
from llm_pipeline.encoding.template import TemplateEncoder

__all__ = ["FixedEncoder", "TemplateEncoder", "SequentialEncoder"]
