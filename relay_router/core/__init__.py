"""Core logic layers for the relay router.

This package contains the provider-agnostic core organized into layers:
- estimation: Token estimates for threshold routing
- normalization: Loose and strict content normalization
- routing: The routing rule chain and its collaborators
"""
