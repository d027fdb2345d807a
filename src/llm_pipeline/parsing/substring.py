"""Parsers that only look at part of the reply."""

from collections.abc import Callable
from typing import Generic, TypeVar

from llm_pipeline.parsing.exceptions import InvalidResponseError

T = TypeVar("T")


class SubstringParser(Generic[T]):
    """
    Narrows the reply with a substring function, then delegates to parser.

    A failure of the substring function is always an invalid response.
    """

    def __init__(self, parser, substring: Callable[[str], str]):
        self.parser = parser
        self.substring = substring

    def parse(self, text: str) -> T:
        try:
            part = self.substring(text)
        except InvalidResponseError:
            raise
        except Exception as e:
            raise InvalidResponseError(f"could not extract part of response: {e}") from e
        return self.parser.parse(part)


def substring_after(parser, separator: str) -> SubstringParser:
    """Parse only the text after the last occurrence of separator (all of it if absent)."""
    return SubstringParser(parser, lambda text: text.split(separator)[-1])


def _json_object_span(text: str) -> str:
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last == -1:
        raise InvalidResponseError(
            "response did not contain an opening and closing curly brace"
        )
    return text[first:last + 1]


def substring_json_object(parser) -> SubstringParser:
    """Parse only the text from the first "{" to the last "}", inclusive."""
    return SubstringParser(parser, _json_object_span)
