"""
Identity and persistence gateways.
"""

from .base import IdentityGateway, PersistenceGateway, SessionListener, Unsubscribe
from .duckdb_store import DuckDBPersistenceGateway
from .local_identity import LocalIdentityGateway

__all__ = [
    "IdentityGateway",
    "PersistenceGateway",
    "SessionListener",
    "Unsubscribe",
    "DuckDBPersistenceGateway",
    "LocalIdentityGateway",
]
