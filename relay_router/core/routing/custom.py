"""
User-supplied router functions.

A custom router is a Python callable, sync or async::

    def router(request: dict, config: RouterConfig) -> Optional[str]:
        if request["token_count"] > 20000:
            return "openai,gpt-4o"
        return None

``custom_router_path`` points at it either as a file (``router.py``, which
must define ``router``, or ``router.py:my_function``) or as an importable
reference (``package.module:function``).
"""

import asyncio
import concurrent.futures
import functools
import importlib
import importlib.util
import inspect
import logging
import os
from typing import Any, Callable, Dict, Optional, Tuple

from ...config.constants import DEFAULT_CUSTOM_ROUTER_FUNCTION, DEFAULT_CUSTOM_ROUTER_TIMEOUT
from ...config.models import RouterConfig
from ...errors import CustomRouterError
from ...models.routing import parse_route

logger = logging.getLogger(__name__)

# Router modules are imported off the event loop
_LOAD_EXECUTOR = concurrent.futures.ThreadPoolExecutor(max_workers=2, thread_name_prefix="relay-router-load")


def _split_reference(path: str) -> Tuple[str, str]:
    # "file.py:func" / "pkg.mod:func"; a Windows drive letter is not a separator
    head, sep, tail = path.rpartition(":")
    if sep and tail and os.sep not in tail and "/" not in tail and len(head) > 1:
        return head, tail
    return path, DEFAULT_CUSTOM_ROUTER_FUNCTION


def load_router_function(path: str) -> Callable:
    """
    Resolve ``path`` to a callable.

    Raises:
        CustomRouterError: If the module cannot be loaded or has no such callable
    """
    location, function_name = _split_reference(path)
    expanded = os.path.expanduser(location)

    try:
        if expanded.endswith(".py") or os.path.isfile(expanded):
            module_name = f"relay_router_custom_{abs(hash(os.path.abspath(expanded)))}"
            spec = importlib.util.spec_from_file_location(module_name, expanded)
            if spec is None or spec.loader is None:
                raise CustomRouterError(path, "not a loadable Python file")
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
        else:
            module = importlib.import_module(location)
    except CustomRouterError:
        raise
    except Exception as e:
        raise CustomRouterError(path, f"could not load module: {e}", original_error=e)

    function = getattr(module, function_name, None)
    if not callable(function):
        raise CustomRouterError(path, f"module has no callable '{function_name}'")
    logger.debug(f"Loaded custom router '{function_name}' from {location}")
    return function


class CustomRouterInvoker:
    """Calls one custom router with a timeout and contains its failures.

    Load errors, exceptions, timeouts and malformed return values surface as
    CustomRouterError for the caller to treat as "no decision". Cancellation
    of the calling task is not a router failure and propagates unchanged.
    """

    def __init__(
        self,
        path: str,
        timeout: float = DEFAULT_CUSTOM_ROUTER_TIMEOUT,
        function: Optional[Callable] = None,
    ):
        self.path = path
        self.timeout = timeout
        self._function = function
        self._load: Optional[concurrent.futures.Future] = None

    async def _resolve(self) -> Callable:
        """Load the router in a worker thread.

        The import is started once per invoker. A slow import keeps running
        after a timeout and later calls wait on the same load; a failed
        import is not retried.
        """
        if self._function is None:
            if self._load is None:
                self._load = _LOAD_EXECUTOR.submit(load_router_function, self.path)
            self._function = await asyncio.shield(asyncio.wrap_future(self._load))
        return self._function

    async def _call(self, payload: Dict[str, Any], config: RouterConfig) -> Any:
        function = await self._resolve()
        if inspect.iscoroutinefunction(function):
            result = await function(payload, config)
        else:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, functools.partial(function, payload, config))
        if inspect.isawaitable(result):
            result = await result
        return result

    async def call(self, payload: Dict[str, Any], config: RouterConfig) -> Optional[Tuple[str, str]]:
        """
        Run the router and parse its answer.

        Returns:
            ``(provider, model)``, or None when the router made no decision

        Raises:
            CustomRouterError: On load failure, exception, timeout or a
                malformed return value
        """
        try:
            # One deadline covers loading and running the router
            result = await asyncio.wait_for(self._call(payload, config), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise CustomRouterError(self.path, f"timed out after {self.timeout}s", original_error=e)
        except CustomRouterError:
            raise
        except Exception as e:
            raise CustomRouterError(self.path, f"raised {type(e).__name__}: {e}", original_error=e)

        if result is None:
            return None
        parsed = parse_route(result)
        if parsed is None:
            raise CustomRouterError(self.path, f"returned malformed decision {result!r}")
        return parsed

