from .logging import RoutingLogger

__all__ = ["RoutingLogger"]
