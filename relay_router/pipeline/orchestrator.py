"""
Request pipeline.

Runs one inbound request through loose normalization, the routing engine
and, when the chosen provider needs it, strict projection, then hands the
result to the provider transformer supplied by the host service.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from pydantic import BaseModel

from ..config.models import RouterConfig
from ..core.normalization import normalize_request
from ..core.routing.engine import RoutingEngine
from ..models.messages import Request
from ..models.routing import RoutingDecision

logger = logging.getLogger(__name__)


class RoutedRequest(BaseModel):
    """A request ready for the provider transformer."""
    decision: RoutingDecision
    request: Request
    strict_content: bool = False


Handoff = Callable[[RoutedRequest], Awaitable[Any]]


class RequestPipeline:
    """Normalizes and routes requests.

    Holds no per-request state, so one pipeline can serve any number of
    concurrent requests.
    """

    def __init__(self, engine: Optional[RoutingEngine] = None):
        self.engine = engine or RoutingEngine()

    async def prepare(
        self,
        request: Union[Request, Dict[str, Any]],
        config: RouterConfig,
        request_id: Optional[str] = None,
    ) -> RoutedRequest:
        """
        Normalize and route a request.

        Args:
            request: Request model or raw request payload
            config: Router configuration snapshot
            request_id: Optional correlation ID for logs

        Returns:
            RoutedRequest whose ``request.model`` is set to the decision

        Raises:
            MissingRouteError: If no route could be resolved
        """
        if isinstance(request, Request):
            # The engine rewrites the latest user message in place
            request = request.model_copy(deep=True)
        else:
            request = Request.model_validate(request)

        request = normalize_request(request)
        decision = await self.engine.decide(request, config, request_id=request_id)

        strict = config.requires_strict_content(decision.provider)
        if strict:
            request = normalize_request(request, strict=True)

        request = request.model_copy(update={"model": decision.target})
        logger.debug(
            f"Prepared request for {decision.target} "
            f"(source={decision.source.value}, strict_content={strict})"
        )
        return RoutedRequest(decision=decision, request=request, strict_content=strict)

    async def dispatch(
        self,
        request: Union[Request, Dict[str, Any]],
        config: RouterConfig,
        handoff: Handoff,
        request_id: Optional[str] = None,
    ) -> Any:
        """Prepare a request and pass it to ``handoff``.

        If the calling task is cancelled while the routing decision is
        pending, the cancellation propagates and ``handoff`` is never called.
        """
        routed = await self.prepare(request, config, request_id=request_id)
        return await handoff(routed)
