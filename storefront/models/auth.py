"""Authentication models"""

from pydantic import AliasChoices, Field
from typing import Optional

from .base import APIModel


class UserProfile(APIModel):
    """Cached profile of the signed-in user"""
    id: str
    email: str
    full_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("full_name", "fullName", "name"),
    )

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class AuthResponse(APIModel):
    """Login / register API response"""
    token: str
    user: UserProfile


class EmailCheck(APIModel):
    """POST /auth/check-email response"""
    exists: bool = False


class RegistrationForm(APIModel):
    """Fields submitted from the registration form"""
    full_name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""

    def to_payload(self) -> dict:
        # the API accepts either spelling of the name field
        return {
            "name": self.full_name,
            "fullName": self.full_name,
            "email": self.email,
            "password": self.password,
        }
