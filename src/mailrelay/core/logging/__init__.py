from .setup import configure_logging, format_peer, get_logger, new_correlation_id

__all__ = ["configure_logging", "format_peer", "get_logger", "new_correlation_id"]
