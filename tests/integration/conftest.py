"""Integration test fixtures.

The composed-stack tests run fully in process: provider adapters talk to an
httpx.MockTransport that emulates the chat-completions API, so no external
service is required.
"""

import json

import httpx
import pytest


class FakeChatServer:
    """
    Scripted chat-completions endpoint.

    Replies are keyed on the last message's content; each key holds a queue.
    Entries may be a reply string or an int HTTP status to fail with.
    """

    def __init__(self, replies: dict[str, list]):
        self.replies = {key: list(values) for key, values in replies.items()}
        self.requests: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        last = body["messages"][-1]["content"]
        queue = self.replies.get(last) or []
        if not queue:
            return httpx.Response(
                404,
                json={"error": {"type": "invalid_request_error", "code": "model_not_found",
                                "message": f"no script for {last!r}"}},
            )
        reply = queue.pop(0)
        if isinstance(reply, int):
            return httpx.Response(reply, json={"error": {"type": "server_error",
                                                         "code": "unavailable",
                                                         "message": "try again"}})
        return httpx.Response(
            200,
            json={
                "choices": [{"message": {"role": "assistant", "content": reply}}],
                "usage": {"prompt_tokens": 12, "completion_tokens": 4},
            },
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_chat_server():
    """Factory for FakeChatServer instances."""

    def _create(replies: dict[str, list]) -> FakeChatServer:
        return FakeChatServer(replies)

    return _create
