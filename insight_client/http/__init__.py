# HTTP side of the client: request building, single-retry policy, status checks.

from insight_client.http.executor import RequestExecutor

__all__ = ["RequestExecutor"]
