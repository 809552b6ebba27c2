"""Session identity for one browsing context (tab)"""

import json
import logging
import uuid
from datetime import datetime
from typing import Optional
from dataclasses import dataclass, field
from enum import Enum

from pydantic import ValidationError

from .config import Settings, settings as default_settings
from .storage import DurableStore, EphemeralStore
from ..models.auth import UserProfile

logger = logging.getLogger(__name__)

GUEST_HEADER = "x-guest-id"


class CredentialKind(str, Enum):
    """Which identity a request is made under"""
    BEARER = "bearer"
    GUEST = "guest"


@dataclass(frozen=True)
class Credential:
    """The one credential attached to an outbound request"""
    kind: CredentialKind
    value: str

    @property
    def is_guest(self) -> bool:
        return self.kind == CredentialKind.GUEST

    def to_headers(self) -> dict[str, str]:
        """Convert to HTTP headers"""
        if self.kind == CredentialKind.BEARER:
            return {"Authorization": f"Bearer {self.value}"}
        return {GUEST_HEADER: self.value}


@dataclass
class SessionContext:
    """
    Identity state of a single tab.

    Passed explicitly to everything that talks to the API. The bearer token
    and profile live in the shared durable store, the guest id in this tab's
    ephemeral store.
    """
    durable: DurableStore
    ephemeral: EphemeralStore = field(default_factory=EphemeralStore)
    config: Settings = field(default_factory=lambda: default_settings)
    tab_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    location: str = "/"
    created_at: datetime = field(default_factory=datetime.utcnow)

    # ==================== Credential ====================

    def get_token(self) -> Optional[str]:
        return self.durable.get(self.config.token_key)

    def get_user(self) -> Optional[UserProfile]:
        """Cached profile of the signed-in user, if any"""
        raw = self.durable.get(self.config.user_key)
        if not raw:
            return None
        try:
            return UserProfile.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            logger.warning("Discarding unreadable cached user profile")
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.get_token() is not None

    def get_guest_id(self) -> str:
        """Tab-scoped guest id, created on first use"""
        guest_id = self.ephemeral.get(self.config.guest_id_key)
        if not guest_id:
            guest_id = str(uuid.uuid4())
            self.ephemeral.set(self.config.guest_id_key, guest_id)
            logger.debug(f"Created guest id for tab {self.tab_id}")
        return guest_id

    def regenerate_guest_id(self) -> str:
        """Replace the guest id with a fresh one; the old id is never reused"""
        previous = self.ephemeral.get(self.config.guest_id_key)
        guest_id = str(uuid.uuid4())
        while guest_id == previous:
            guest_id = str(uuid.uuid4())
        self.ephemeral.set(self.config.guest_id_key, guest_id)
        return guest_id

    def resolve_credential(self) -> Credential:
        """Bearer token if signed in, otherwise the guest id"""
        token = self.get_token()
        if token:
            return Credential(CredentialKind.BEARER, token)
        return Credential(CredentialKind.GUEST, self.get_guest_id())

    def save_auth(self, token: str, user: UserProfile) -> None:
        self.durable.set(self.config.user_key, user.model_dump_json(), origin=self.tab_id)
        self.durable.set(self.config.token_key, token, origin=self.tab_id)
        logger.info(f"Stored credential for user {user.id}")

    def clear_auth(self) -> None:
        self.durable.remove(self.config.token_key, origin=self.tab_id)
        self.durable.remove(self.config.user_key, origin=self.tab_id)
        logger.info("Cleared stored credential")

    # ==================== Navigation ====================

    def navigate(self, path: str) -> None:
        self.location = path

    def redirect_to_login(self) -> None:
        """Send the tab to the login entry point unless it is already on one"""
        path = self.location.split("?", 1)[0]
        if path not in self.config.auth_entry_points:
            self.location = self.config.login_path


class Browser:
    """Tabs sharing one durable store"""

    def __init__(self, durable: Optional[DurableStore] = None, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.durable = durable or DurableStore(self.config.storage_path)
        self.tabs: dict[str, SessionContext] = {}

    def open_tab(self, location: str = "/") -> SessionContext:
        """Open a tab with its own ephemeral store"""
        tab = SessionContext(durable=self.durable, config=self.config, location=location)
        self.tabs[tab.tab_id] = tab
        return tab

    def get_tab(self, tab_id: str) -> Optional[SessionContext]:
        return self.tabs.get(tab_id)

    def close_tab(self, tab_id: str) -> bool:
        """Close a tab; its guest id goes with it"""
        tab = self.tabs.pop(tab_id, None)
        if tab is None:
            return False
        tab.ephemeral.clear()
        return True
