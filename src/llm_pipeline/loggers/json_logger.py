"""JSON-lines model logger."""

import json
import threading
from typing import TextIO

from llm_pipeline.loggers.base import ModelCallRecord


class JsonModelLogger:
    """
    Writes one JSON object per model call to a text stream.

    Writes from concurrent calls are serialized so lines never interleave.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self._lock = threading.Lock()

    def log_call(self, record: ModelCallRecord) -> None:
        line = json.dumps(record.to_log_dict(), ensure_ascii=False)
        with self._lock:
            self.stream.write(line + "\n")
            self.stream.flush()
