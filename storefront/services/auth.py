"""
Identity resolver

Signs the tab in and out. Login and registration store the bearer token and
profile, then announce the transition so cart and wishlist refetch (the API
merges the guest's collections into the account). Logout drops the token,
starts a fresh guest identity and resets every attached container.
"""

import logging
from typing import Optional, Union

from pydantic import ValidationError

from ..core.errors import OperationResult, QueryResult, StorefrontError, error_message
from ..core.events import IdentityChannel
from ..models.auth import AuthResponse, EmailCheck, RegistrationForm, UserProfile
from ..utils.validation import is_password_valid
from .api_client import StorefrontAPIClient
from .base import StateContainer

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Login, registration and logout for one tab"""

    def __init__(
        self,
        api: StorefrontAPIClient,
        channel: IdentityChannel,
        containers: Optional[list[StateContainer]] = None,
    ):
        self.api = api
        self.session = api.session
        self.channel = channel
        self._containers: list[StateContainer] = list(containers or [])

    def attach(self, container: StateContainer) -> None:
        """Register a container to be reset on logout"""
        if container not in self._containers:
            self._containers.append(container)

    @property
    def user(self) -> Optional[UserProfile]:
        """Signed-in user, or None for a guest"""
        if not self.session.is_authenticated:
            return None
        return self.session.get_user()

    @property
    def is_authenticated(self) -> bool:
        # the token is what goes out on requests
        return self.session.is_authenticated

    def restore(self) -> Optional[UserProfile]:
        """
        Pick up a session left by an earlier visit.

        A token without a readable profile is dropped, so the tab continues
        as a guest instead of sending a bearer token it cannot account for.
        """
        if not self.session.is_authenticated:
            return None
        user = self.session.get_user()
        if user is None:
            logger.warning("Stored token has no readable profile; discarding it")
            self.session.clear_auth()
            return None
        logger.info(f"Restored session for user {user.id}")
        return user

    async def _authenticate(self, call, fallback_error: str) -> OperationResult:
        try:
            data = await call()
            auth = AuthResponse.model_validate(data)
        except StorefrontError as e:
            logger.warning(f"{fallback_error}: {e}")
            return OperationResult.fail(error_message(e, fallback_error))
        except ValidationError:
            logger.exception("Malformed authentication response")
            return OperationResult.fail(fallback_error)

        self.session.save_auth(auth.token, auth.user)
        await self.channel.publish()
        return OperationResult.ok()

    async def login(self, email: str, password: str) -> OperationResult:
        """Sign in with email and password"""
        if not email or not password:
            return OperationResult.fail("All fields are required")

        return await self._authenticate(
            lambda: self.api.login(email.strip(), password),
            "Login failed",
        )

    async def register(self, form: Union[RegistrationForm, dict]) -> OperationResult:
        """
        Create an account and sign in.

        The form is checked locally first (required fields, password policy,
        matching confirmation); a form that fails is never sent.
        """
        if isinstance(form, dict):
            form = RegistrationForm.model_validate(form)

        if not (form.full_name and form.email and form.password and form.confirm_password):
            return OperationResult.fail("All fields are required")
        if not is_password_valid(form.password):
            return OperationResult.fail("Password does not meet requirements")
        if form.password != form.confirm_password:
            return OperationResult.fail("Passwords do not match")

        return await self._authenticate(
            lambda: self.api.register(form.to_payload()),
            "Registration failed",
        )

    async def check_email(self, email: str) -> QueryResult:
        """Look up whether an email is already registered; data is a bool"""
        if not email:
            return QueryResult.fail("Email is required")
        try:
            data = await self.api.check_email(email.strip())
            check = EmailCheck.model_validate(data)
        except StorefrontError as e:
            return QueryResult.fail(error_message(e, "Could not check email"))
        except ValidationError:
            logger.exception("Malformed email check response")
            return QueryResult.fail("Could not check email")
        return QueryResult(success=True, data=check.exists)

    def logout(self) -> None:
        """
        Sign out and start over as a new guest.

        The new guest id is never a previous one, so the next person at this
        machine does not see the old cart or wishlist.
        """
        self.session.clear_auth()
        self.session.regenerate_guest_id()
        for container in self._containers:
            container.reset()
        self.session.navigate(self.session.config.home_path)
        logger.info("Signed out; started new guest session")
