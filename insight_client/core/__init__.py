"""
Core utilities: the error taxonomy shared by the HTTP and push layers.
"""

from insight_client.core import exceptions

__all__ = ["exceptions"]
