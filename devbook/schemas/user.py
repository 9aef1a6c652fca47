"""
Devbook API — User Entity & Payloads
=====================================

What:  The `User` entity with its two-phase validate/format contract, the
       public `UserResponse`, and the login / password-change payloads.

Prepare contract:
    prepare(mode) = validate(mode) then format(mode)
    - validate() raises ValidationError at the first failing check and
      leaves the entity untouched.
    - format() strips whitespace and, in register mode only, replaces the
      plaintext password with its hash.
"""

from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field

from devbook.exceptions import ValidationError
from devbook.security import MAX_PASSWORD_BYTES, password_too_long

PasswordHasher = Callable[[str], str]


class UserMode(str, Enum):
    """Which flow a user payload is being prepared for."""

    REGISTER = "register"
    UPDATE = "update"


class User(BaseModel):
    """
    A user as carried through a single request.

    `password` holds plaintext on the way in and a bcrypt hash after
    `format(UserMode.REGISTER, ...)`. It is never part of a response;
    controllers convert to `UserResponse` before returning.
    """

    id: Optional[int] = Field(default=None, ge=0)
    name: str = ""
    nick: str = ""
    email: str = ""
    password: str = ""
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    def prepare(self, mode: UserMode, hasher: PasswordHasher) -> None:
        self.validate_fields(mode)
        self.format(mode, hasher)

    def validate_fields(self, mode: UserMode) -> None:
        """
        Check required fields and the email grammar.

        Password is only required at registration; updates never touch it
        (see the update-password route).
        """
        if not self.name.strip():
            raise ValidationError("name is required and cannot be blank")
        if not self.nick.strip():
            raise ValidationError("nick is required and cannot be blank")
        if not self.email.strip():
            raise ValidationError("email is required and cannot be blank")
        try:
            validate_email(self.email.strip(), check_deliverability=False)
        except EmailNotValidError:
            raise ValidationError("the email provided is invalid")
        if mode == UserMode.REGISTER and not self.password:
            raise ValidationError("password is required and cannot be blank")
        if mode == UserMode.REGISTER and password_too_long(self.password):
            raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")

    def format(self, mode: UserMode, hasher: PasswordHasher) -> None:
        self.name = self.name.strip()
        self.nick = self.nick.strip()
        self.email = self.email.strip()
        if mode == UserMode.REGISTER:
            self.password = hasher(self.password)


class UserPayload(BaseModel):
    """
    Body of POST /users and PUT /users/{userID}.

    Only the fields a client may write. Anything else in the body (`id`,
    `created_at`) is ignored rather than validated.
    """
    name: str = ""
    nick: str = ""
    email: str = ""
    password: str = ""

    def to_user(self) -> User:
        return User(name=self.name, nick=self.nick, email=self.email, password=self.password)


class UserResponse(BaseModel):
    """Public representation of a user. Has no password field."""

    id: int
    name: str
    nick: str
    email: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class Credentials(BaseModel):
    """Login payload."""

    email: str = ""
    password: str = ""


class PasswordChange(BaseModel):
    """Payload of POST /users/{userID}/update-password."""

    current: str = ""
    new: str = ""

    def validate_fields(self) -> None:
        if not self.current:
            raise ValidationError("current password is required")
        if not self.new:
            raise ValidationError("new password is required")
        if password_too_long(self.new):
            raise ValidationError(f"new password must be at most {MAX_PASSWORD_BYTES} bytes")
