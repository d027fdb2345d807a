"""Identity parser."""


class RawParser:
    """Returns the reply text unchanged, whitespace included."""

    def parse(self, text: str) -> str:
        return text
