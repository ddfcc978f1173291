"""
procedure-client: call queries, mutations and subscriptions on a remote
procedure router over HTTP.
"""

from .client import FetchOptions, ProcedureClient, create_client
from .runtime import CancellableRequest, ClientError, ProcedureType

__all__ = [
    "CancellableRequest",
    "ClientError",
    "FetchOptions",
    "ProcedureClient",
    "ProcedureType",
    "create_client",
]
