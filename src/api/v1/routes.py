"""
API v1 routes.

Defines REST endpoints for the credential core and the profile
collaborator that consumes its verified identity.
"""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_account_service, get_verified_identity
from src.api.models import (
    AccountResponse,
    ClaimsResponse,
    ErrorResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
)
from src.domain.accounts import AccountService
from src.domain.tokens import TokenClaims

router = APIRouter(tags=["v1"])

_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Invalid or missing token"}}


@router.post(
    "/register",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing field, short password or unknown role"},
        409: {"model": ErrorResponse, "description": "Username or email already registered"},
    },
    summary="Register a new account",
    description="Create a freelancer or client account. No token is issued; log in afterwards.",
)
async def register(
    request_data: RegisterRequest,
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    """
    Register a new account.

    - **username**: Unique username
    - **email**: Unique email address (case-insensitive)
    - **password**: Password (minimum 6 characters)
    - **role**: freelancer or client
    """
    account = service.register(
        request_data.username,
        request_data.email,
        request_data.password,
        request_data.role,
    )
    return AccountResponse.from_account(account)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Log in and receive a bearer token",
)
async def login(
    request_data: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> TokenResponse:
    """
    Exchange email and password for a signed token.

    Unknown email and wrong password return the identical 401 response.
    """
    return TokenResponse(token=service.login(request_data.email, request_data.password))


@router.get(
    "/session",
    response_model=ClaimsResponse,
    responses=_UNAUTHORIZED,
    summary="Claims of the presented token",
)
async def session(identity: TokenClaims = Depends(get_verified_identity)) -> ClaimsResponse:
    return ClaimsResponse.from_claims(identity)


@router.get(
    "/profile/me",
    response_model=AccountResponse,
    responses={**_UNAUTHORIZED, 404: {"model": ErrorResponse, "description": "Profile not found"}},
    summary="Get the caller's profile",
)
async def get_my_profile(
    identity: TokenClaims = Depends(get_verified_identity),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    return AccountResponse.from_account(service.get_profile(identity.identity))


@router.put(
    "/profile",
    response_model=AccountResponse,
    responses={**_UNAUTHORIZED, 404: {"model": ErrorResponse, "description": "Profile not found"}},
    summary="Save the caller's profile",
    description="Merge profile fields and mark profile setup complete. "
    "Tokens issued earlier keep their old profileSetupComplete claim until they expire.",
)
@router.put("/profile/me", response_model=AccountResponse, include_in_schema=False)
async def save_my_profile(
    request_data: ProfileUpdateRequest,
    identity: TokenClaims = Depends(get_verified_identity),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = service.save_profile(identity.identity, request_data.to_fields())
    return AccountResponse.from_account(account)
