"""
Loose-shape content normalization (pass A).

Guarantees that no message leaves with absent content and that no block
inside a block list carries a null text field. Absent content is replaced by
a value that keeps the message's meaning:

- an assistant turn that only calls tools says which tools it is executing
- a silent user/system turn becomes an empty string
- an assistant turn with nothing to say gets a continuation marker
- a tool that produced nothing becomes an empty string

Within block lists absent entries are dropped; null fields of present blocks
are coerced in place so block order and tool ids are preserved. Blocks of
other types (images, documents, thinking) pass through untouched.
"""

import logging
from typing import List, Optional, Sequence

from ...config.constants import (
    CONTINUATION_MARKER,
    EXECUTING_TOOLS_PREFIX,
    UNKNOWN_TOOL_ID,
    UNKNOWN_TOOL_NAME,
)
from ...models.messages import (
    InputTextBlock,
    Message,
    OpaqueBlock,
    OutputTextBlock,
    Role,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)

logger = logging.getLogger(__name__)


class FixReport:
    """Collects the anomalies healed during one normalization pass."""

    def __init__(self, pass_name: str):
        self.pass_name = pass_name
        self.count = 0

    def record(self, path: str, detail: str) -> None:
        self.count += 1
        logger.debug(f"[{self.pass_name}] Fixed {detail} at {path}")

    def log_summary(self) -> None:
        if self.count:
            logger.info(f"[{self.pass_name}] Applied {self.count} content fixes")


def absent_content_replacement(message: Message) -> str:
    """The text that stands in for a message's absent content."""
    if message.tool_calls:
        return EXECUTING_TOOLS_PREFIX + ", ".join(message.tool_names)
    if message.role == Role.ASSISTANT:
        return CONTINUATION_MARKER
    # user, system and tool turns may legitimately be empty
    return ""


def _loose_block(block, path: str, msg_index: int, block_index: int, report: FixReport):
    if isinstance(block, (TextBlock, InputTextBlock, OutputTextBlock)):
        if block.text is None:
            report.record(path, "null text")
            return block.model_copy(update={"text": ""})
        return block

    if isinstance(block, ToolResultBlock):
        updates = {}
        if block.content is None:
            report.record(path, "null tool_result content")
            updates["content"] = ""
        if not block.tool_use_id:
            report.record(path, "missing tool_use_id")
            updates["tool_use_id"] = UNKNOWN_TOOL_ID
        return block.model_copy(update=updates) if updates else block

    if isinstance(block, ToolUseBlock):
        updates = {}
        if not block.name:
            report.record(path, "missing tool_use name")
            updates["name"] = UNKNOWN_TOOL_NAME
        if not block.id:
            report.record(path, "missing tool_use id")
            updates["id"] = f"toolu_{msg_index}_{block_index}"
        if block.input is None:
            updates["input"] = {}
        return block.model_copy(update=updates) if updates else block

    if isinstance(block, OpaqueBlock):
        return block

    report.record(path, f"unrecognized block {type(block).__name__}")
    return None


def normalize_blocks(
    blocks: Sequence,
    msg_index: int = 0,
    report: Optional[FixReport] = None,
) -> List:
    """Drop absent entries and coerce null fields of a block list.

    Never returns an empty list.
    """
    report = report or FixReport("loose")
    cleaned = []
    for block_index, block in enumerate(blocks):
        path = f"messages[{msg_index}].content[{block_index}]"
        if block is None:
            report.record(path, "absent block")
            continue
        fixed = _loose_block(block, path, msg_index, block_index, report)
        if fixed is not None:
            cleaned.append(fixed)
    if not cleaned:
        report.record(f"messages[{msg_index}].content", "empty block list")
        cleaned.append(TextBlock(text=""))
    return cleaned


def normalize_message_loose(
    message: Message,
    msg_index: int = 0,
    report: Optional[FixReport] = None,
) -> Message:
    report = report or FixReport("loose")
    content = message.content

    if content is None:
        report.record(f"messages[{msg_index}].content", f"absent {message.role.value} content")
        return message.model_copy(update={"content": absent_content_replacement(message)})

    if isinstance(content, str):
        return message

    return message.model_copy(update={"content": normalize_blocks(content, msg_index, report)})


def normalize_loose(messages: Sequence[Message]) -> List[Message]:
    """
    Pass A: guarantee the loose wire shape for every message.

    Pure, total and idempotent. The input messages are not modified.

    Args:
        messages: Conversation messages in order

    Returns:
        New list of messages whose content is a string or a non-empty list
        of blocks with defined text fields
    """
    report = FixReport("loose")
    normalized = [
        normalize_message_loose(message, idx, report)
        for idx, message in enumerate(messages or [])
    ]
    report.log_summary()
    return normalized
