"""Clients for services the app talks to over the network."""
from .backend import BackendClient, BackendClientError

__all__ = ["BackendClient", "BackendClientError"]
