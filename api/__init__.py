"""API layer: tenant/SCIM client (requests), pagination, identity lookup."""

from .client import ApiClient, AuthenticationError, SyncError, authenticate
from .identity import IdentityResolver
from .pagination import paginate

__all__ = [
    "ApiClient",
    "AuthenticationError",
    "SyncError",
    "authenticate",
    "IdentityResolver",
    "paginate",
]
