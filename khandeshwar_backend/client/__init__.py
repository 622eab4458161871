from .api import ApiClient, ApiRequestError, BackendOfflineError
from .session import SessionStore
from .store import DataStore, PermissionDeniedError, ReceiptConflictError

__all__ = [
    "ApiClient",
    "ApiRequestError",
    "BackendOfflineError",
    "DataStore",
    "PermissionDeniedError",
    "ReceiptConflictError",
    "SessionStore",
]
