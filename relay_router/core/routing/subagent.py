"""
Inline per-turn routing overrides.

Clients can pin a single turn to a provider/model by embedding
``<ROUTE>provider,model</ROUTE>`` in the message text. The tag is a
directive to the proxy, so it is stripped before the message goes upstream.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from ...config.constants import DEFAULT_SUBAGENT_TAG
from ...models.messages import ContentValue, InputTextBlock, OutputTextBlock, TextBlock
from ...models.routing import parse_route


@dataclass(frozen=True)
class TagMatch:
    """Result of scanning one text for a subagent tag."""
    found: bool
    remaining_text: str
    provider: Optional[str] = None
    model: Optional[str] = None


@lru_cache(maxsize=16)
def _tag_pattern(tag: str) -> "re.Pattern":
    name = re.escape(tag)
    return re.compile(rf"\s*<{name}>([^<]*)</{name}>\s*")


def extract_subagent_tag(text: Optional[str], tag: str = DEFAULT_SUBAGENT_TAG) -> TagMatch:
    """
    Detect and strip a ``<TAG>provider,model</TAG>`` directive.

    The first complete tag that parses decides. Every parsing tag is removed
    together with its surrounding whitespace; malformed tags (a literal
    mention in prose, say) stay in place. Without a parsing tag the text is
    untouched and ``found=False``.
    """
    if not isinstance(text, str) or not text:
        return TagMatch(found=False, remaining_text=text or "")

    pattern = _tag_pattern(tag)
    parsed = next(
        (route for route in (parse_route(m.group(1)) for m in pattern.finditer(text)) if route),
        None
    )
    if parsed is None:
        return TagMatch(found=False, remaining_text=text)

    def _join(m):
        if parse_route(m.group(1)) is None:
            return m.group(0)
        # Keep the pieces on either side apart, preferring a line break if one was removed
        if m.start() == 0 or m.end() == len(text):
            return ""
        return "\n" if "\n" in m.group(0) else " "

    remaining = pattern.sub(_join, text)
    provider, model = parsed
    return TagMatch(found=True, remaining_text=remaining, provider=provider, model=model)


def extract_from_content(
    content: ContentValue,
    tag: str = DEFAULT_SUBAGENT_TAG,
) -> Tuple[TagMatch, ContentValue]:
    """
    Apply the extractor to message content.

    Plain text is scanned directly. For block content each text block is
    scanned in order; the first block with a match wins and is the only
    block rewritten.

    Returns:
        The match and the (possibly rewritten) content
    """
    if isinstance(content, str):
        result = extract_subagent_tag(content, tag)
        return result, (result.remaining_text if result.found else content)

    if isinstance(content, list):
        for idx, block in enumerate(content):
            if not isinstance(block, (TextBlock, InputTextBlock, OutputTextBlock)):
                continue
            result = extract_subagent_tag(block.text, tag)
            if result.found:
                rewritten = list(content)
                rewritten[idx] = block.model_copy(update={"text": result.remaining_text})
                return result, rewritten

    return TagMatch(found=False, remaining_text=""), content
