"""
Router constants.

Route names, wire markers and environment variable names shared by the
routing engine, the normalizer and the config loader.
"""

# Route names looked up in RouterConfig.routes
ROUTE_DEFAULT = "default"
ROUTE_BACKGROUND = "background"
ROUTE_THINK = "think"
ROUTE_LONG_CONTEXT = "longContext"
ROUTE_WEB_SEARCH = "webSearch"

DEFAULT_LONG_CONTEXT_THRESHOLD = 60000
DEFAULT_CUSTOM_ROUTER_TIMEOUT = 10.0
DEFAULT_CUSTOM_ROUTER_FUNCTION = "router"

# Inline per-turn override: <ROUTE>provider,model</ROUTE>
DEFAULT_SUBAGENT_TAG = "ROUTE"

# Case-insensitive model name fragments routed to the background route
DEFAULT_LIGHTWEIGHT_MARKERS = ("haiku",)

# Tool type prefixes / names treated as web search capable
WEB_SEARCH_TOOL_TYPE_PREFIX = "web_search"
WEB_SEARCH_TOOL_NAMES = ("web_search", "websearch")

# Providers using these transformers need block-typed content
STRICT_CONTENT_TRANSFORMERS = ("responses-api",)
STRICT_CONTENT_URL_SUFFIX = "/responses"

# Token estimation
TOKENIZER_ENCODING = "cl100k_base"
MESSAGE_TOKEN_OVERHEAD = 4
TOOL_TOKEN_OVERHEAD = 8
FALLBACK_BYTES_PER_TOKEN = 4

# Normalizer markers
EXECUTING_TOOLS_PREFIX = "Executing tools: "
CONTINUATION_MARKER = "[continuing]"
NO_OUTPUT_MARKER = "[No output]"
UNSUPPORTED_CONTENT_MARKER = "[Unsupported content: {type}]"
UNKNOWN_TOOL_NAME = "unknown_tool"
UNKNOWN_TOOL_ID = "unknown"

# Config file and environment overrides
DEFAULT_CONFIG_DIR = "~/.relay-router"
DEFAULT_CONFIG_FILE = "config.json"
ENV_CONFIG_PATH = "RELAY_ROUTER_CONFIG"
ENV_LONG_CONTEXT_THRESHOLD = "RELAY_ROUTER_LONG_CONTEXT_THRESHOLD"
ENV_CUSTOM_ROUTER_PATH = "RELAY_ROUTER_CUSTOM_ROUTER_PATH"
ENV_CUSTOM_ROUTER_TIMEOUT = "RELAY_ROUTER_CUSTOM_ROUTER_TIMEOUT"
