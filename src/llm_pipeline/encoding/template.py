"""
Jinja2 template encoder.

Renders a system and a user message from string templates. The template
context is the input's fields (mapping keys or pydantic model fields) plus
the input itself as "input", so templates can use either {{ name }} or
{{ input.name }}. Undefined variables are errors, not empty strings.
"""

from collections.abc import Mapping
from typing import Any, Optional

import structlog
from jinja2 import Environment, StrictUndefined, Template
from pydantic import BaseModel

from llm_pipeline.models.messages import Message, system, user


logger = structlog.get_logger(__name__)


def _template_context(input: Any) -> dict[str, Any]:
    if isinstance(input, BaseModel):
        context = {name: getattr(input, name) for name in type(input).model_fields}
    elif isinstance(input, Mapping):
        context = {str(key): value for key, value in input.items()}
    else:
        context = {}
    context["input"] = input
    return context


class TemplateEncoder:
    """
    Encoder rendering Jinja2 templates.

    An empty template skips its message, so a user-only or system-only
    encoder is just TemplateEncoder("", "...") or TemplateEncoder("...", "").
    """

    def __init__(self, system_template: str = "", user_template: str = ""):
        self.jinja_env = Environment(
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,  # We're generating prompts, not HTML
        )
        self.system_template: Optional[Template] = (
            self.jinja_env.from_string(system_template) if system_template else None
        )
        self.user_template: Optional[Template] = (
            self.jinja_env.from_string(user_template) if user_template else None
        )

    def encode(self, input: Any) -> list[Message]:
        """
        Render the templates for one input.

        Raises:
            jinja2.TemplateError: Undefined variable or template runtime error
        """
        context = _template_context(input)
        messages = []
        if self.system_template is not None:
            messages.append(system(self.system_template.render(context)))
        if self.user_template is not None:
            messages.append(user(self.user_template.render(context)))
        logger.debug("Rendered prompt templates", num_messages=len(messages))
        return messages
