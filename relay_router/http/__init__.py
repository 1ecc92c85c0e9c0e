"""HTTP preview layer for the relay router.

Provides a FastAPI router for inspecting routing decisions. It is not the
proxy transport; the host service owns that.
"""
