from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class DecisionSource(str, Enum):
    """Which rule of the routing chain committed a decision."""
    EXPLICIT = "explicit"
    CUSTOM_SCRIPT = "custom_script"
    SUBAGENT_TAG = "subagent_tag"
    TOKEN_THRESHOLD = "token_threshold"
    MODEL_HEURISTIC = "model_heuristic"
    DEFAULT = "default"


class RoutingDecision(BaseModel):
    """The provider and model selected to serve a request."""
    model_config = ConfigDict(frozen=True)

    provider: str = Field(..., min_length=1, description="Upstream provider name")
    model: str = Field(..., min_length=1, description="Model identifier at the provider")
    source: DecisionSource
    route: Optional[str] = Field(None, description="Route name that produced the decision")
    token_count: Optional[int] = Field(None, description="Token estimate computed while deciding")

    @property
    def target(self) -> str:
        """The decision in ``provider,model`` form."""
        return f"{self.provider},{self.model}"


def parse_route(value) -> Optional[Tuple[str, str]]:
    """Split a ``provider,model`` string on its first comma.

    Returns None unless both parts are non-empty after trimming.
    """
    if not isinstance(value, str) or "," not in value:
        return None
    provider, model = value.split(",", 1)
    provider, model = provider.strip(), model.strip()
    if not provider or not model:
        return None
    return provider, model
