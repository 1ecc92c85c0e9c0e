"""
Router configuration models.

A RouterConfig is an immutable snapshot: the surrounding service builds a
new one when its config file changes and passes it to every decision.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.routing import parse_route
from .constants import (
    DEFAULT_CUSTOM_ROUTER_TIMEOUT,
    DEFAULT_LIGHTWEIGHT_MARKERS,
    DEFAULT_LONG_CONTEXT_THRESHOLD,
    DEFAULT_SUBAGENT_TAG,
    STRICT_CONTENT_TRANSFORMERS,
    STRICT_CONTENT_URL_SUFFIX,
)


class ProviderConfig(BaseModel):
    """An upstream provider known to the proxy."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    api_base_url: Optional[str] = None
    models: Tuple[str, ...] = ()
    transformer: Tuple[str, ...] = Field(
        default=(),
        description="Names of the transformers applied to requests for this provider"
    )

    @field_validator("transformer", mode="before")
    @classmethod
    def _flatten_transformer(cls, v):
        # Accept {"use": ["responses-api", ["maxtoken", {...}]]} as well as a plain list
        if v is None:
            return ()
        if isinstance(v, dict):
            v = v.get("use", [])
        if isinstance(v, str):
            return (v,)
        names = []
        for item in v:
            if isinstance(item, str):
                names.append(item)
            elif isinstance(item, (list, tuple)) and item and isinstance(item[0], str):
                names.append(item[0])
        return tuple(names)

    @property
    def requires_strict_content(self) -> bool:
        if any(name in STRICT_CONTENT_TRANSFORMERS for name in self.transformer):
            return True
        if self.api_base_url:
            return self.api_base_url.rstrip("/").endswith(STRICT_CONTENT_URL_SUFFIX)
        return False


class RouterConfig(BaseModel):
    """Routing configuration consumed by the routing engine."""
    model_config = ConfigDict(frozen=True)

    routes: Dict[str, str] = Field(
        default_factory=dict,
        description="Route name to 'provider,model' mapping"
    )
    long_context_threshold: int = Field(
        default=DEFAULT_LONG_CONTEXT_THRESHOLD,
        ge=0,
        description="Token estimate above which the longContext route is used"
    )
    custom_router_path: Optional[str] = Field(
        default=None,
        description="Path or module reference of a user-supplied router function"
    )
    custom_router_timeout: float = Field(
        default=DEFAULT_CUSTOM_ROUTER_TIMEOUT,
        gt=0,
        description="Seconds to wait for the custom router"
    )
    subagent_tag: str = Field(default=DEFAULT_SUBAGENT_TAG, min_length=1)
    lightweight_markers: Tuple[str, ...] = DEFAULT_LIGHTWEIGHT_MARKERS
    providers: Tuple[ProviderConfig, ...] = ()

    @field_validator("routes", mode="before")
    @classmethod
    def _drop_non_string_routes(cls, v):
        if isinstance(v, dict):
            return {k: val for k, val in v.items() if isinstance(val, str)}
        return v

    def route(self, name: str) -> Optional[Tuple[str, str]]:
        """Resolve a route name to ``(provider, model)``, or None if unusable."""
        return parse_route(self.routes.get(name))

    def get_provider(self, name: str) -> Optional[ProviderConfig]:
        for provider in self.providers:
            if provider.name == name:
                return provider
        return None

    def requires_strict_content(self, provider: str) -> bool:
        """Whether requests for ``provider`` need block-typed content."""
        provider_config = self.get_provider(provider)
        return provider_config is not None and provider_config.requires_strict_content
