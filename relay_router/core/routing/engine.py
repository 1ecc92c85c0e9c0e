"""
Routing decision engine.

Evaluates an ordered chain of rules against a request and commits the first
usable provider/model:

1. explicit ``provider,model`` in ``request.model``
2. custom router function
3. subagent tag in the latest user message
4. token estimate above the long-context threshold
5. model heuristics (lightweight family, reasoning, web search tool)
6. default route

A rule whose route name does not resolve falls through to the next rule.
Only an exhausted chain is fatal.
"""

from typing import Awaitable, Callable, Dict, Iterable, Optional, Tuple

from ...config.constants import (
    ROUTE_BACKGROUND,
    ROUTE_DEFAULT,
    ROUTE_LONG_CONTEXT,
    ROUTE_THINK,
    ROUTE_WEB_SEARCH,
    WEB_SEARCH_TOOL_NAMES,
    WEB_SEARCH_TOOL_TYPE_PREFIX,
)
from ...config.models import RouterConfig
from ...errors import CustomRouterError, MissingRouteError
from ...models.messages import Request, ToolDefinition
from ...models.routing import DecisionSource, RoutingDecision, parse_route
from ...observability.logging import RoutingLogger
from ..estimation.tokens import TokenEstimator
from .custom import CustomRouterInvoker
from .subagent import extract_from_content


def has_web_search_tool(tools: Optional[Iterable[ToolDefinition]]) -> bool:
    for tool in tools or []:
        if tool.type and tool.type.startswith(WEB_SEARCH_TOOL_TYPE_PREFIX):
            return True
        if tool.name and tool.name.lower() in WEB_SEARCH_TOOL_NAMES:
            return True
    return False


class RoutingEngine:
    """Chooses the upstream provider and model for each request.

    The engine keeps no per-request state. It caches loaded custom router
    functions by path so a router module is imported once, not per request.
    """

    def __init__(self, estimator: Optional[TokenEstimator] = None):
        self.estimator = estimator or TokenEstimator()
        self.log = RoutingLogger("engine")
        self._invokers: Dict[Tuple[str, float], CustomRouterInvoker] = {}

    def _get_invoker(self, config: RouterConfig) -> CustomRouterInvoker:
        key = (config.custom_router_path, config.custom_router_timeout)
        invoker = self._invokers.get(key)
        if invoker is None:
            invoker = CustomRouterInvoker(config.custom_router_path, timeout=config.custom_router_timeout)
            self._invokers[key] = invoker
        return invoker

    async def decide(
        self,
        request: Request,
        config: RouterConfig,
        request_id: Optional[str] = None,
    ) -> RoutingDecision:
        """
        Decide which provider and model serve ``request``.

        May rewrite the latest user message to remove a subagent tag.

        Args:
            request: The inbound request (after loose normalization)
            config: Immutable router configuration snapshot
            request_id: Optional ID used to correlate log lines

        Returns:
            RoutingDecision

        Raises:
            MissingRouteError: If no rule yields a usable provider/model
        """
        with self.log.track_decision(request_id) as metadata:
            decision = await self._run_rules(request, config, metadata['request_id'])
            metadata.update(
                provider=decision.provider,
                model=decision.model,
                source=decision.source.value
            )
            return decision

    async def _run_rules(
        self,
        request: Request,
        config: RouterConfig,
        request_id: str,
    ) -> RoutingDecision:
        token_cache: Dict[str, int] = {}

        async def tokens() -> int:
            if "count" not in token_cache:
                await self.estimator.load_encoding()
                token_cache["count"] = self.estimator.estimate(request.messages, request.tools)
            return token_cache["count"]

        def commit(target: Tuple[str, str], source: DecisionSource,
                   route: Optional[str] = None) -> RoutingDecision:
            provider, model = target
            return RoutingDecision(
                provider=provider,
                model=model,
                source=source,
                route=route,
                token_count=token_cache.get("count")
            )

        # 1. Explicit provider,model
        explicit = parse_route(request.model)
        if explicit:
            self._strip_subagent_tag(request, config, request_id)
            return commit(explicit, DecisionSource.EXPLICIT)

        # 2. Custom router
        if config.custom_router_path:
            target = await self._run_custom_router(request, config, tokens, request_id)
            if target:
                self._strip_subagent_tag(request, config, request_id)
                return commit(target, DecisionSource.CUSTOM_SCRIPT)

        # 3. Subagent tag
        tagged = self._strip_subagent_tag(request, config, request_id)
        if tagged:
            return commit(tagged, DecisionSource.SUBAGENT_TAG)

        # 4. Long context
        if await tokens() > config.long_context_threshold:
            target = config.route(ROUTE_LONG_CONTEXT)
            if target:
                return commit(target, DecisionSource.TOKEN_THRESHOLD, ROUTE_LONG_CONTEXT)
            self.log.debug(
                "Token threshold exceeded but longContext route is not configured",
                request_id=request_id,
                tokens=token_cache["count"],
                threshold=config.long_context_threshold
            )

        # 5. Model heuristics, in fixed order
        for route_name, matched in self._heuristics(request, config):
            if not matched():
                continue
            target = config.route(route_name)
            if target:
                return commit(target, DecisionSource.MODEL_HEURISTIC, route_name)
            self.log.debug(
                f"Heuristic matched but route '{route_name}' is not configured",
                request_id=request_id
            )

        # 6. Default
        target = config.route(ROUTE_DEFAULT)
        if target:
            return commit(target, DecisionSource.DEFAULT, ROUTE_DEFAULT)

        raise MissingRouteError(
            reason="no rule matched and the default route is missing or malformed",
            request_id=request_id
        )

    def _heuristics(self, request: Request, config: RouterConfig):
        model_name = (request.model or "").lower()
        return (
            (ROUTE_BACKGROUND,
             lambda: any(marker.lower() in model_name for marker in config.lightweight_markers if marker)),
            (ROUTE_THINK, request.wants_reasoning),
            (ROUTE_WEB_SEARCH, lambda: has_web_search_tool(request.tools)),
        )

    async def _run_custom_router(
        self,
        request: Request,
        config: RouterConfig,
        tokens: Callable[[], Awaitable[int]],
        request_id: str,
    ) -> Optional[Tuple[str, str]]:
        payload = request.model_dump(mode="json", exclude_none=True)
        payload["token_count"] = await tokens()
        invoker = self._get_invoker(config)
        try:
            target = await invoker.call(payload, config)
        except CustomRouterError as e:
            self.log.warning(
                "Custom router failed, falling through",
                request_id=request_id,
                rule="custom_script",
                error=e
            )
            return None
        if target is None:
            self.log.warning(
                "Custom router made no decision, falling through",
                request_id=request_id,
                rule="custom_script"
            )
        return target

    def _strip_subagent_tag(
        self,
        request: Request,
        config: RouterConfig,
        request_id: str,
    ) -> Optional[Tuple[str, str]]:
        """Remove a subagent tag from the latest user message.

        Returns the tagged ``(provider, model)`` if a tag was found.
        """
        message = request.last_user_message()
        if message is None:
            return None
        match, content = extract_from_content(message.content, config.subagent_tag)
        if not match.found:
            return None
        message.content = content
        self.log.debug(
            "Stripped subagent tag",
            request_id=request_id,
            provider=match.provider,
            model=match.model
        )
        return match.provider, match.model
