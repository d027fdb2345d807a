"""
Conversation message models.

Messages are immutable values: once placed into a conversation history they are
copied (model_copy) rather than mutated in place.
"""

import base64

from pydantic import BaseModel, ConfigDict, Field

from llm_pipeline.models.enums import Role


class ImageAttachment(BaseModel):
    """Raw image bytes attached to a message."""

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    data: bytes = Field(..., description="Encoded image bytes (PNG, JPEG, ...)")
    media_type: str = Field(default="image/png", description="MIME type of data")

    def to_base64_encoded(self) -> str:
        """
        Render the image as a base64 data URL.

        The bytes are used as-is (no re-compression), so the result is a pure
        function of the attachment and safe to use in cache keys.
        """
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"

    def to_raw_base64(self) -> str:
        """Base64 of the bytes without the data URL prefix."""
        return base64.b64encode(self.data).decode("ascii")


class Message(BaseModel):
    """A text message (with optional images) to or from an LLM."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""
    images: tuple[ImageAttachment, ...] = ()

    def with_role(self, role: Role) -> "Message":
        return self.model_copy(update={"role": role})

    def with_content(self, content: str) -> "Message":
        return self.model_copy(update={"content": content})

    def to_log_dict(self) -> dict:
        """Compact representation used by model loggers."""
        return {
            "role": self.role.value,
            "content": self.content,
            "num_images": len(self.images),
        }


def system(content: str) -> Message:
    return Message(role=Role.SYSTEM, content=content)


def user(content: str, *images: ImageAttachment) -> Message:
    return Message(role=Role.USER, content=content, images=images)


def assistant(content: str) -> Message:
    return Message(role=Role.ASSISTANT, content=content)
