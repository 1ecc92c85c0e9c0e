"""Error definitions for the relay router."""

from typing import Optional


class RelayRouterError(Exception):
    """Base exception for relay router errors."""
    pass


class ConfigError(RelayRouterError):
    """Raised when a router configuration cannot be loaded or validated."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{message} (config: {path})"
        super().__init__(message)


class MissingRouteError(RelayRouterError):
    """Raised when no routing rule produced a usable provider/model.

    This is the only terminal outcome of a routing decision. The transport
    boundary translates it into a failure response using ``status_code``.
    """

    def __init__(
        self,
        reason: str = "no route resolved to a provider and model",
        status_code: int = 500,
        request_id: Optional[str] = None,
    ):
        self.reason = reason
        self.status_code = status_code
        self.request_id = request_id
        super().__init__(f"Missing route: {reason}")


class CustomRouterError(RelayRouterError):
    """Failure inside a user-supplied router function.

    Raised by the invoker and always caught by the routing engine, which
    treats it as "no decision".
    """

    def __init__(
        self,
        path: str,
        message: str,
        original_error: Optional[BaseException] = None,
    ):
        self.path = path
        self.original_error = original_error
        super().__init__(f"Custom router '{path}' failed: {message}")
