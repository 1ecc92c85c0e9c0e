"""FastAPI endpoints for previewing routing decisions.

Mount ``router`` in a FastAPI app to see, for a given request payload, which
provider/model it would be sent to and how its messages are normalized.
The config snapshot is supplied with ``configure``.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException

from ..config.models import RouterConfig
from ..core.estimation import estimate_tokens
from ..errors import MissingRouteError
from ..models.messages import Request
from ..pipeline import RequestPipeline

router = APIRouter()

_state: Dict[str, Any] = {"config": None, "pipeline": RequestPipeline()}


def configure(config: RouterConfig, pipeline: Optional[RequestPipeline] = None) -> None:
    """Install the config snapshot (and optionally a pipeline) used by the endpoints."""
    _state["config"] = config
    if pipeline is not None:
        _state["pipeline"] = pipeline


def _current_config() -> RouterConfig:
    config = _state["config"]
    if config is None:
        raise HTTPException(status_code=503, detail="Router is not configured")
    return config


@router.post("/route")
async def route_request(request: Request):
    """Return the routing decision and the normalized request."""
    config = _current_config()
    try:
        routed = await _state["pipeline"].prepare(request, config)
    except MissingRouteError as e:
        raise HTTPException(status_code=e.status_code, detail=e.reason)
    return {
        "decision": routed.decision.model_dump(mode="json"),
        "strict_content": routed.strict_content,
        "request": routed.request.model_dump(mode="json", exclude_none=True),
    }


@router.post("/estimate")
def estimate_request(request: Request):
    """Return the token estimate used for threshold routing."""
    # Must stay sync: the first call may load the tokenizer vocabulary
    return {"token_count": estimate_tokens(request.messages, request.tools)}
