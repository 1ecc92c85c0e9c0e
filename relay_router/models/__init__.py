from .messages import (
    ContentBlock,
    ContentValue,
    InputTextBlock,
    Message,
    OpaqueBlock,
    OutputTextBlock,
    Request,
    Role,
    TextBlock,
    ToolCall,
    ToolDefinition,
    ToolResultBlock,
    ToolUseBlock,
)
from .routing import DecisionSource, RoutingDecision, parse_route

__all__ = [
    "ContentBlock",
    "ContentValue",
    "InputTextBlock",
    "Message",
    "OpaqueBlock",
    "OutputTextBlock",
    "Request",
    "Role",
    "TextBlock",
    "ToolCall",
    "ToolDefinition",
    "ToolResultBlock",
    "ToolUseBlock",
    "DecisionSource",
    "RoutingDecision",
    "parse_route",
]
