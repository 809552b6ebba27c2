# Core modules

from .config import settings, Settings
from .errors import OperationResult, QueryResult
from .events import IdentityChannel
from .session import Browser, Credential, CredentialKind, SessionContext
from .storage import DurableStore, EphemeralStore

__all__ = [
    "settings",
    "Settings",
    "OperationResult",
    "QueryResult",
    "IdentityChannel",
    "Browser",
    "Credential",
    "CredentialKind",
    "SessionContext",
    "DurableStore",
    "EphemeralStore",
]
