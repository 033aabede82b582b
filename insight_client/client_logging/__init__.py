"""
Structured logging for the Insight client.

JSON logs with timestamp, event_type and bound client context.
Components receive a bound logger from the client that owns them; get_logger()
is the fallback for code that runs outside a client (CLI, tests).
"""

from insight_client.client_logging.logger import bind_client, configure_structlog, get_logger

__all__ = ["bind_client", "configure_structlog", "get_logger"]
