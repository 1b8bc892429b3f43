"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON bodies use camelCase keys; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.domain.ports import Account, Role
from src.domain.tokens import TokenClaims


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    username: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72, description="User password (min 6 characters)")
    role: Role


class LoginRequest(BaseModel):
    """
    Request model for login.

    Email is deliberately a plain string: a malformed address is just an
    unknown one and must fail the same way as a wrong password.
    """

    email: str
    password: str


class TokenResponse(BaseModel):
    """Response model for successful login."""

    token: str


class AccountResponse(BaseModel):
    """Public account projection. Never carries the password hash."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    email: str
    role: Role
    profile_setup_complete: bool = Field(alias="profileSetupComplete")
    profile: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            role=account.role,
            profile_setup_complete=account.profile_setup_complete,
            profile=account.profile,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class SocialLinks(BaseModel):
    linkedin: str | None = None
    github: str | None = None
    website: str | None = None


class Project(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    technologies: list[str] = Field(default_factory=list)
    project_url: str | None = Field(default=None, alias="projectUrl")
    repository_url: str | None = Field(default=None, alias="repositoryUrl")


class ProfileUpdateRequest(BaseModel):
    """
    Profile save request. Every field is optional; only the fields sent
    are merged into the stored profile.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    profile_picture_url: str | None = Field(default=None, alias="profilePictureUrl")
    location: str | None = None
    headline: str | None = None
    bio: str | None = None
    skills: list[str] | None = None
    portfolio_links: list[str] | None = Field(default=None, alias="portfolioLinks")
    hourly_rate: float | None = Field(default=None, gt=0, alias="hourlyRate")
    availability: str | None = None
    company_name: str | None = Field(default=None, alias="companyName")
    company_website: str | None = Field(default=None, alias="companyWebsite")
    social_links: SocialLinks | None = Field(default=None, alias="socialLinks")
    projects: list[Project] | None = Field(default=None, max_length=3)
    experience_level: str | None = Field(default=None, alias="experienceLevel")

    def to_fields(self) -> dict[str, Any]:
        """Fields that were actually sent, keyed by their JSON names."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class ClaimsResponse(BaseModel):
    """Verified claims of the current request's token."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    role: Role
    profile_setup_complete: bool = Field(alias="profileSetupComplete")
    issued_at: int = Field(alias="issuedAt")
    expiry: int

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "ClaimsResponse":
        return cls.model_validate(claims.to_dict())


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
