"""AWS integration for regression job submission."""

from .batch_client import BatchClient

__all__ = ["BatchClient"]
