"""Content normalization.

Two passes over a request's messages:
- pass A (``normalize_loose``): content is never absent and block lists
  never carry null text
- pass B (``normalize_strict``): every content is a non-empty list of typed
  text blocks, for upstreams that accept nothing else
"""

from ...models.messages import Request
from .content import normalize_blocks, normalize_loose, normalize_message_loose
from .projection import normalize_strict, project_message


def normalize_request(request: Request, strict: bool = False) -> Request:
    """Return a copy of ``request`` with normalized messages."""
    messages = normalize_strict(request.messages) if strict else normalize_loose(request.messages)
    return request.model_copy(update={"messages": messages})


__all__ = [
    "normalize_blocks",
    "normalize_loose",
    "normalize_message_loose",
    "normalize_request",
    "normalize_strict",
    "project_message",
]
