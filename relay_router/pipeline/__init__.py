from .orchestrator import Handoff, RequestPipeline, RoutedRequest

__all__ = ["Handoff", "RequestPipeline", "RoutedRequest"]
