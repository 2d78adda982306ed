"""Ready-made pipeline listeners."""

from .logging import LoggingListener

__all__ = ["LoggingListener"]
