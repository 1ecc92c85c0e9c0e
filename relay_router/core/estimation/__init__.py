"""Token estimation for threshold routing."""

from .tokens import TokenEstimator, estimate_tokens

__all__ = ["TokenEstimator", "estimate_tokens"]
