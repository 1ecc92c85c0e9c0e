"""
Strict-shape content projection (pass B).

Some upstreams (the Responses API family) only accept content as a
non-empty array of typed text blocks. This pass projects every message into
that shape: assistant text becomes ``output_text``, everything else
``input_text``, and tool traffic is rendered as text markers the model can
still follow. Blocks the strict upstream cannot carry (images, documents)
are replaced by a placeholder naming their type.
"""

import logging
from typing import List, Optional, Sequence, Type, Union

from ...config.constants import (
    NO_OUTPUT_MARKER,
    UNKNOWN_TOOL_ID,
    UNKNOWN_TOOL_NAME,
    UNSUPPORTED_CONTENT_MARKER,
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
from .content import FixReport, normalize_message_loose

logger = logging.getLogger(__name__)

StrictBlock = Union[InputTextBlock, OutputTextBlock]


def block_kind_for(role: Role) -> Type[StrictBlock]:
    return OutputTextBlock if role == Role.ASSISTANT else InputTextBlock


def render_tool_use(name: Optional[str], tool_id: Optional[str]) -> str:
    return f"[Tool: {name or UNKNOWN_TOOL_NAME} ({tool_id or UNKNOWN_TOOL_ID})]"


def render_tool_result(tool_id: Optional[str], output: Optional[str]) -> str:
    return f"[Tool Result {tool_id or UNKNOWN_TOOL_ID}]\n{output or NO_OUTPUT_MARKER}"


def render_unsupported(block_type: Optional[str]) -> str:
    return UNSUPPORTED_CONTENT_MARKER.format(type=block_type or "unknown")


def _project_block(block, message: Message, kind: Type[StrictBlock]) -> StrictBlock:
    if isinstance(block, (InputTextBlock, OutputTextBlock)):
        # Already projected; only the role decides the kind
        return kind(text=block.text or "")
    if isinstance(block, TextBlock):
        if message.role == Role.TOOL:
            return kind(text=render_tool_result(message.tool_call_id, block.text))
        return kind(text=block.text or "")
    if isinstance(block, ToolUseBlock):
        return kind(text=render_tool_use(block.name, block.id))
    if isinstance(block, ToolResultBlock):
        return kind(text=render_tool_result(block.tool_use_id, block.content))
    if isinstance(block, OpaqueBlock):
        return kind(text=render_unsupported(block.type))
    return kind(text="")


def project_message(
    message: Message,
    msg_index: int = 0,
    report: Optional[FixReport] = None,
) -> Message:
    """Project one message into the strict shape."""
    report = report or FixReport("strict")
    message = normalize_message_loose(message, msg_index, report)
    kind = block_kind_for(message.role)
    content = message.content
    updates = {}

    if isinstance(content, str):
        if message.role == Role.TOOL:
            blocks = [kind(text=render_tool_result(message.tool_call_id, content))]
        else:
            blocks = [kind(text=content)]
    else:
        blocks = [_project_block(block, message, kind) for block in content]

    if message.role == Role.ASSISTANT and message.tool_calls:
        # Tool calls are carried as text from here on
        blocks.extend(kind(text=render_tool_use(call.name, call.id)) for call in message.tool_calls)
        updates["tool_calls"] = None

    if not blocks:
        blocks = [kind(text="")]

    updates["content"] = blocks
    return message.model_copy(update=updates)


def _revalidate(messages: List[Message], report: FixReport) -> None:
    """Final scan: no null text and no empty block list may survive."""
    for idx, message in enumerate(messages):
        kind = block_kind_for(message.role)
        content = message.content
        if not isinstance(content, list) or not content:
            report.record(f"messages[{idx}].content", "non-list content after projection")
            message.content = [kind(text=content if isinstance(content, str) else "")]
            continue
        for block_index, block in enumerate(content):
            if not isinstance(block, (InputTextBlock, OutputTextBlock)):
                report.record(f"messages[{idx}].content[{block_index}]", "unprojected block")
                content[block_index] = kind(text=getattr(block, "text", None) or "")
            elif block.text is None:
                report.record(f"messages[{idx}].content[{block_index}]", "null text after projection")
                block.text = ""


def normalize_strict(messages: Sequence[Message]) -> List[Message]:
    """
    Pass B: project every message into the strict wire shape.

    Pure, total and idempotent. Absent content is first normalized as in
    pass A, so the pass is safe on raw input too.

    Args:
        messages: Conversation messages in order

    Returns:
        New list of messages whose content is a non-empty list of
        ``input_text`` / ``output_text`` blocks with defined text
    """
    report = FixReport("strict")
    projected = [
        project_message(message, idx, report)
        for idx, message in enumerate(messages or [])
    ]
    _revalidate(projected, report)
    report.log_summary()
    return projected
