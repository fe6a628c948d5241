"""REST endpoint routers exposed by the API."""
from . import auth, factures, stats

__all__ = [
    "auth",
    "factures",
    "stats",
]
