"""
Structured logging utility for routing decisions.

Every log line carries the same ``[key=value ...]`` prefix so that a single
request can be followed through the rule chain by its request_id.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Optional


class RoutingLogger:
    """Structured logger for the routing engine."""

    def __init__(self, component: str = "engine"):
        self.component = component
        self.logger = logging.getLogger(f"relay_router.routing.{component}")

    def _format_message(self, message: str, **kwargs) -> str:
        fields = [f"component={self.component}"]
        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")
        return f"[{' '.join(fields)}] {message}"

    def debug(self, message: str, request_id: Optional[str] = None, **kwargs):
        self.logger.debug(self._format_message(message, request_id=request_id, **kwargs))

    def info(self, message: str, request_id: Optional[str] = None, **kwargs):
        self.logger.info(self._format_message(message, request_id=request_id, **kwargs))

    def warning(self, message: str, request_id: Optional[str] = None,
                error: Optional[BaseException] = None, **kwargs):
        """Log a recoverable rule failure."""
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_msg'] = str(error)
        self.logger.warning(self._format_message(message, request_id=request_id, **kwargs))

    def error(self, message: str, request_id: Optional[str] = None,
              error: Optional[BaseException] = None, **kwargs):
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_msg'] = str(error)
        self.logger.error(self._format_message(message, request_id=request_id, **kwargs))

    @contextmanager
    def track_decision(self, request_id: Optional[str] = None):
        """
        Context manager timing one routing decision.

        Args:
            request_id: Optional request ID (generated if not provided)

        Yields:
            Dict with request metadata; callers add ``provider``, ``model``
            and ``source`` once a rule commits.
        """
        if request_id is None:
            request_id = str(uuid.uuid4())[:8]

        start_time = time.time()
        self.debug("Starting routing decision", request_id=request_id)

        metadata = {'request_id': request_id, 'start_time': start_time}

        try:
            yield metadata

            duration = time.time() - start_time
            self.info(
                "Routing decision committed",
                request_id=request_id,
                source=metadata.get('source'),
                provider=metadata.get('provider'),
                model=metadata.get('model'),
                duration_ms=int(duration * 1000)
            )
        except Exception as e:
            duration = time.time() - start_time
            self.error(
                "Routing decision failed",
                request_id=request_id,
                duration_ms=int(duration * 1000),
                error=e
            )
            raise
