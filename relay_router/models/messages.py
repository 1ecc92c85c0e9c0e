"""Request and message models.

Content follows the loose wire shape: ``None`` (absent), a plain string, or
a list of typed blocks in which individual entries may themselves be absent.
Text fields inside blocks are nullable so that malformed client payloads can
be represented faithfully and healed by the normalizer rather than rejected.
"""

import json
import logging
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator, model_validator

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Message author roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class TextBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["text"] = "text"
    text: Optional[str] = None


class ToolUseBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["tool_use"] = "tool_use"
    id: Optional[str] = None
    name: Optional[str] = None
    input: Optional[Dict[str, Any]] = None


class ToolResultBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: Optional[str] = None
    content: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def _flatten_content(cls, v):
        # Anthropic allows a nested list of text blocks as the result
        if isinstance(v, list):
            parts = []
            for item in v:
                if isinstance(item, str):
                    parts.append(item)
                elif isinstance(item, dict) and isinstance(item.get("text"), str):
                    parts.append(item["text"])
            return "\n".join(parts)
        return v


class InputTextBlock(BaseModel):
    """Strict-shape text block for content the model reads."""
    type: Literal["input_text"] = "input_text"
    text: Optional[str] = None


class OutputTextBlock(BaseModel):
    """Strict-shape text block for content the model produced."""
    type: Literal["output_text"] = "output_text"
    text: Optional[str] = None


class OpaqueBlock(BaseModel):
    """A block the router does not interpret (image, document, thinking, ...).

    Carried upstream unchanged with all of its fields.
    """
    model_config = ConfigDict(extra="allow")

    type: str


_KNOWN_BLOCK_TYPES = {"text", "tool_use", "tool_result", "input_text", "output_text"}
_OPAQUE_TAG = "opaque"


def _block_tag(value) -> str:
    block_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return block_type if block_type in _KNOWN_BLOCK_TYPES else _OPAQUE_TAG


ContentBlock = Annotated[
    Union[
        Annotated[TextBlock, Tag("text")],
        Annotated[ToolUseBlock, Tag("tool_use")],
        Annotated[ToolResultBlock, Tag("tool_result")],
        Annotated[InputTextBlock, Tag("input_text")],
        Annotated[OutputTextBlock, Tag("output_text")],
        Annotated[OpaqueBlock, Tag(_OPAQUE_TAG)],
    ],
    Discriminator(_block_tag),
]

# None | str | list of (block or None)
ContentValue = Optional[Union[str, List[Optional[ContentBlock]]]]


class ToolCall(BaseModel):
    """A tool invocation requested by the assistant."""
    id: str = ""
    name: str = "unknown"
    arguments: str = "{}"

    @model_validator(mode="before")
    @classmethod
    def _unwrap_function(cls, data):
        # OpenAI wire form: {"id", "type": "function", "function": {"name", "arguments"}}
        if isinstance(data, dict) and isinstance(data.get("function"), dict):
            function = data["function"]
            data = {
                "id": data.get("id"),
                "name": function.get("name"),
                "arguments": function.get("arguments"),
            }
        if isinstance(data, dict):
            data = {k: v for k, v in data.items() if v is not None}
            if isinstance(data.get("arguments"), dict):
                data["arguments"] = json.dumps(data["arguments"])
        return data


class ToolDefinition(BaseModel):
    """A tool the client makes available to the model."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""
    description: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict, alias="input_schema")
    type: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _unwrap_function(cls, data):
        if isinstance(data, dict) and isinstance(data.get("function"), dict):
            function = data["function"]
            data = {
                "name": function.get("name", ""),
                "description": function.get("description"),
                "input_schema": function.get("parameters") or {},
                "type": data.get("type"),
            }
        elif isinstance(data, dict) and "parameters" in data and "input_schema" not in data:
            data = dict(data)
            data["input_schema"] = data.pop("parameters") or {}
        return data


class Message(BaseModel):
    """A single conversation message."""
    model_config = ConfigDict(extra="allow")

    role: Role
    content: ContentValue = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def _screen_blocks(cls, v):
        """Turn malformed block entries into absent entries.

        Bare strings become text blocks and untyped objects with ``text``
        become text blocks. Objects with any other string ``type`` are kept
        as opaque blocks; everything else is replaced with ``None`` so the
        normalizer drops it.
        """
        if isinstance(v, dict):
            v = [v]
        if not isinstance(v, list):
            return v
        screened = []
        for idx, item in enumerate(v):
            if isinstance(item, str):
                screened.append({"type": "text", "text": item})
            elif isinstance(item, BaseModel):
                screened.append(item)
            elif isinstance(item, dict) and isinstance(item.get("type"), str) and item["type"]:
                screened.append(item)
            elif isinstance(item, dict) and "type" not in item and "text" in item:
                screened.append({**item, "type": "text"})
            else:
                if item is not None:
                    logger.debug(f"Discarding malformed content block at index {idx}: {type(item).__name__}")
                screened.append(None)
        return screened

    @property
    def tool_names(self) -> List[str]:
        return [call.name or "unknown" for call in self.tool_calls or []]


class Request(BaseModel):
    """Inbound chat request as seen by the router."""
    model_config = ConfigDict(extra="allow")

    messages: List[Message] = Field(default_factory=list)
    tools: Optional[List[ToolDefinition]] = None
    model: Optional[str] = None
    response_format: Optional[Dict[str, Any]] = None
    stream: Optional[bool] = None
    max_tokens: Optional[int] = None

    # Reasoning indicators
    thinking: Optional[Union[bool, Dict[str, Any]]] = None
    reasoning: Optional[Dict[str, Any]] = None
    reasoning_effort: Optional[str] = None

    def wants_reasoning(self) -> bool:
        """Whether the client explicitly asked for extended reasoning."""
        if isinstance(self.thinking, dict):
            if self.thinking.get("type", "enabled") != "disabled":
                return True
        elif self.thinking:
            return True
        return bool(self.reasoning) or bool(self.reasoning_effort)

    def last_user_message(self) -> Optional[Message]:
        for message in reversed(self.messages):
            if message.role == Role.USER:
                return message
        return None
