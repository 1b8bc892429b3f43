"""
Account domain service - registration, login and profile completion.

Profile completion lifecycle
============================

Every account starts with profile_setup_complete = False. The only
transition is False -> True, made by the first successful profile save.
Tokens snapshot the flag at login time and are never refreshed, so a
token issued before the save keeps reporting False until it expires;
logging in again yields a token carrying True.

Login failures are indistinguishable: unknown email and wrong password
raise the same UnauthorizedError after the same amount of bcrypt work.
"""

import logging
from dataclasses import dataclass
from typing import Any

from .exceptions import ConflictError, ProfileNotFound, UnauthorizedError, ValidationError
from .passwords import PasswordHasher
from .ports import Account, AccountRepository, Identity, Role
from .tokens import TokenCodec

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"

# bcrypt only consumes the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72

PROFILE_FIELDS = frozenset(
    {
        "firstName",
        "lastName",
        "profilePictureUrl",
        "location",
        "headline",
        "bio",
        "skills",
        "portfolioLinks",
        "hourlyRate",
        "availability",
        "companyName",
        "companyWebsite",
        "socialLinks",
        "projects",
        "experienceLevel",
    }
)


@dataclass
class AccountService:
    """
    Domain service for the credential core.

    Orchestrates registration (normalize, hash, insert), login (lookup,
    verify, issue token) and profile saves that flip the completion flag.
    """

    repository: AccountRepository
    hasher: PasswordHasher
    token_codec: TokenCodec
    min_password_length: int = 6

    def register(self, username: str, email: str, password: str, role: Role | str) -> Account:
        """
        Create a new account. No token is issued.

        Args:
            username: Desired username (will be trimmed)
            email: Email address (will be normalized)
            password: Plaintext password (will be hashed)
            role: "freelancer" or "client"

        Returns:
            Public projection of the created account

        Raises:
            ValidationError: Missing field, short password or unknown role
            ConflictError: Username or email already registered
        """
        username = (username or "").strip()
        normalized_email = self._normalize_email(email or "")
        if not username or not normalized_email or not password or not role:
            raise ValidationError("Username, email, password and role are required")
        self._validate_password(password)
        try:
            account_role = Role(role)
        except ValueError:
            raise ValidationError("Role must be 'freelancer' or 'client'") from None

        password_hash = self.hasher.hash(password)
        account = self.repository.create_account(username, normalized_email, password_hash, account_role)
        if account is None:
            logger.info("Registration conflict for username=%s", username)
            raise ConflictError("User with this email or username already exists")

        logger.info("Registered account id=%s username=%s role=%s", account.id, account.username, account.role.value)
        return account

    def login(self, email: str, password: str) -> str:
        """
        Verify a credential and issue a signed token.

        Args:
            email: Email address (will be normalized)
            password: Plaintext password

        Returns:
            Signed token carrying the account's identity claims

        Raises:
            UnauthorizedError: Unknown email or wrong password (same message)
        """
        normalized_email = self._normalize_email(email or "")
        password = password or ""
        record = self.repository.get_by_email(normalized_email) if normalized_email else None

        if record is None:
            self.hasher.burn(password)
            logger.warning("Failed login for email=%s", normalized_email)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not self.hasher.verify(password, record.password_hash):
            logger.warning("Failed login for email=%s", normalized_email)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        account = record.account
        identity = Identity(
            id=account.id,
            username=account.username,
            role=account.role,
            profile_setup_complete=account.profile_setup_complete,
        )
        return self.token_codec.issue(identity)

    def get_profile(self, identity: Identity) -> Account:
        """
        Load the account behind a verified identity.

        Raises:
            ProfileNotFound: If the account no longer exists
        """
        account = self.repository.get_by_id(identity.id)
        if account is None:
            raise ProfileNotFound(identity.id)
        return account

    def save_profile(self, identity: Identity, fields: dict[str, Any]) -> Account:
        """
        Save profile fields and mark the profile complete.

        This is the only path that sets profile_setup_complete.

        Raises:
            ValidationError: If fields contains keys outside PROFILE_FIELDS
            ProfileNotFound: If the account no longer exists
        """
        unknown = set(fields) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

        account = self.repository.save_profile(identity.id, fields)
        if account is None:
            raise ProfileNotFound(identity.id)
        logger.info("Profile saved for account id=%s", account.id)
        return account

    def _validate_password(self, password: str) -> None:
        if len(password) < self.min_password_length:
            raise ValidationError(f"Password must be at least {self.min_password_length} characters long")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()
