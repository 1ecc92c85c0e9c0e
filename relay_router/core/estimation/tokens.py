"""
Token estimation for threshold routing.

The estimate only has to be good enough to decide whether a request belongs
on the long-context route. Text is counted with the ``cl100k_base`` tiktoken
vocabulary; when that vocabulary cannot be loaded (it is downloaded on first
use) the estimator falls back to one token per four UTF-8 bytes.

Every text part is counted on its own and the counts are summed, so adding
content to a request can never lower its estimate.
"""

import asyncio
import json
import logging
import math
import threading
from typing import Iterable, Iterator, List, Optional, Sequence

import tiktoken

from ...config.constants import (
    FALLBACK_BYTES_PER_TOKEN,
    MESSAGE_TOKEN_OVERHEAD,
    TOKENIZER_ENCODING,
    TOOL_TOKEN_OVERHEAD,
)
from ...models.messages import (
    InputTextBlock,
    Message,
    OutputTextBlock,
    TextBlock,
    ToolDefinition,
    ToolResultBlock,
    ToolUseBlock,
)

logger = logging.getLogger(__name__)


class TokenEstimator:
    """Counts subword tokens with tiktoken, or estimates them from byte length."""

    def __init__(self, encoding_name: str = TOKENIZER_ENCODING):
        self.encoding_name = encoding_name
        self._encoding = None
        self._encoding_failed = False
        self._lock = threading.Lock()

    @property
    def uses_fallback(self) -> bool:
        """True once the tokenizer vocabulary failed to load."""
        return self._get_encoding() is None

    def _get_encoding(self):
        if self._encoding is not None or self._encoding_failed:
            return self._encoding
        with self._lock:
            if self._encoding is None and not self._encoding_failed:
                try:
                    self._encoding = tiktoken.get_encoding(self.encoding_name)
                except Exception as e:
                    self._encoding_failed = True
                    logger.warning(
                        f"Tokenizer '{self.encoding_name}' unavailable, "
                        f"using byte-length estimation: {e}"
                    )
        return self._encoding

    async def load_encoding(self) -> None:
        """Load the vocabulary in a worker thread if it is not loaded yet.

        The first load may download the vocabulary, so code running on an
        event loop awaits this before counting.
        """
        if self._encoding is not None or self._encoding_failed:
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._get_encoding)

    def count_tokens(self, text: Optional[str]) -> int:
        """Count tokens in a single text part."""
        if not text:
            return 0
        encoding = self._get_encoding()
        if encoding is not None:
            try:
                return len(encoding.encode(text, disallowed_special=()))
            except Exception as e:
                logger.debug(f"Tokenizer failed on text part, estimating from length: {e}")
        return self.estimate_from_length(text)

    @staticmethod
    def estimate_from_length(text: str) -> int:
        # Round up so that any non-empty text counts
        return math.ceil(len(text.encode("utf-8", errors="replace")) / FALLBACK_BYTES_PER_TOKEN)

    def estimate(
        self,
        messages: Sequence[Message],
        tools: Optional[Iterable[ToolDefinition]] = None,
    ) -> int:
        """
        Estimate the token size of a request.

        Args:
            messages: Conversation messages
            tools: Tool definitions sent with the request

        Returns:
            Approximate token count including per-message and per-tool overhead
        """
        total = 0
        for message in messages or []:
            total += MESSAGE_TOKEN_OVERHEAD
            for part in _message_text_parts(message):
                total += self.count_tokens(part)
        for tool in tools or []:
            total += TOOL_TOKEN_OVERHEAD
            for part in _tool_text_parts(tool):
                total += self.count_tokens(part)
        return total


def _to_json(value) -> str:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return str(value)


def _message_text_parts(message: Message) -> Iterator[str]:
    content = message.content
    if isinstance(content, str):
        yield content
    elif isinstance(content, list):
        for block in content:
            if isinstance(block, (TextBlock, InputTextBlock, OutputTextBlock)):
                if block.text:
                    yield block.text
            elif isinstance(block, ToolResultBlock):
                if block.content:
                    yield block.content
            elif isinstance(block, ToolUseBlock):
                if block.input:
                    yield _to_json(block.input)
    for call in message.tool_calls or []:
        yield call.name
        yield call.arguments


def _tool_text_parts(tool: ToolDefinition) -> List[str]:
    parts = [tool.name]
    if tool.description:
        parts.append(tool.description)
    if tool.parameters:
        parts.append(_to_json(tool.parameters))
    return parts


_default_estimator = TokenEstimator()


def estimate_tokens(
    messages: Sequence[Message],
    tools: Optional[Iterable[ToolDefinition]] = None,
) -> int:
    """Estimate tokens with the shared ``cl100k_base`` estimator."""
    return _default_estimator.estimate(messages, tools)
