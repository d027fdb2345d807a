"""Feedback generators: turn a recoverable error into corrective text."""

from jinja2 import Environment, StrictUndefined

from llm_pipeline.models.messages import Message


class ErrorStringFeedback:
    """Feeds the error's own text back to the model."""

    def format_feedback(self, response: Message, error: BaseException) -> str:
        return str(error)


class TemplateFeedback:
    """
    Renders a Jinja2 template with the variables error (text) and response
    (the rejected reply's content).
    """

    def __init__(self, template: str):
        self.jinja_env = Environment(
            undefined=StrictUndefined,
            autoescape=False,  # We're generating prompts, not HTML
        )
        self.template = self.jinja_env.from_string(template)

    def format_feedback(self, response: Message, error: BaseException) -> str:
        return self.template.render(error=str(error), response=response.content)
