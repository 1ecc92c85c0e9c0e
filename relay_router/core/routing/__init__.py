"""Routing layer for provider and model selection.

This layer handles:
- The ordered routing rule chain
- Inline subagent tag overrides
- User-supplied custom router functions
"""

from .custom import CustomRouterInvoker, load_router_function
from .engine import RoutingEngine, has_web_search_tool
from .subagent import TagMatch, extract_from_content, extract_subagent_tag

__all__ = [
    "CustomRouterInvoker",
    "RoutingEngine",
    "TagMatch",
    "extract_from_content",
    "extract_subagent_tag",
    "has_web_search_tool",
    "load_router_function",
]
