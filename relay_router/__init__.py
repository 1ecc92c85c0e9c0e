"""
Relay Router - request routing and content normalization for LLM proxies.

This package decides, for every inbound chat request, which upstream
provider and model should serve it, and rewrites the message history so that
no content field is ever null on the way upstream.

Features:
- Ordered routing rules: explicit model, custom router, subagent tag,
  long-context threshold, model heuristics, default route
- Two-pass content normalization (loose and strict wire shapes)
- tiktoken-based token estimation with a length fallback
"""

__version__ = "0.1.0"

from .config import ProviderConfig, RouterConfig, load_router_config
from .core.estimation import TokenEstimator, estimate_tokens
from .core.normalization import normalize_loose, normalize_request, normalize_strict
from .core.routing import RoutingEngine, extract_subagent_tag
from .errors import ConfigError, CustomRouterError, MissingRouteError, RelayRouterError
from .models import (
    DecisionSource,
    Message,
    Request,
    Role,
    RoutingDecision,
    ToolCall,
    ToolDefinition,
)
from .pipeline import RequestPipeline, RoutedRequest

__all__ = [
    # Pipeline
    "RequestPipeline",
    "RoutedRequest",

    # Routing
    "RoutingEngine",
    "extract_subagent_tag",
    "TokenEstimator",
    "estimate_tokens",

    # Normalization
    "normalize_loose",
    "normalize_strict",
    "normalize_request",

    # Config
    "RouterConfig",
    "ProviderConfig",
    "load_router_config",

    # Models
    "DecisionSource",
    "Message",
    "Request",
    "Role",
    "RoutingDecision",
    "ToolCall",
    "ToolDefinition",

    # Errors
    "RelayRouterError",
    "ConfigError",
    "CustomRouterError",
    "MissingRouteError",
]
