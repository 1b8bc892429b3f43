"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting domain services
and infrastructure adapters into routes, plus the bearer-token gate that
protects every authenticated route.
"""

from fastapi import Depends, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresAccountRepository
from src.config.settings import get_settings
from src.domain.accounts import AccountService
from src.domain.exceptions import UnauthorizedError
from src.domain.passwords import PasswordHasher
from src.domain.ports import AccountRepository
from src.domain.tokens import INVALID_TOKEN, TokenClaims, TokenCodec


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> AccountRepository:
    """Repository from app state, or a PostgreSQL repository over the pool."""
    repository = getattr(request.app.state, "repository", None)
    if repository is not None:
        return repository
    return PostgresAccountRepository(get_pool(request))


def get_token_codec(request: Request) -> TokenCodec:
    """
    Token codec built at startup, or built from settings on demand.

    Raises ConfigurationError (500) if no signing secret is configured.
    """
    codec = getattr(request.app.state, "token_codec", None)
    if codec is not None:
        return codec
    settings = get_settings()
    return TokenCodec(
        secret=settings.jwt_secret,
        expires_in_seconds=settings.jwt_expires_in_seconds,
        algorithm=settings.jwt_algorithm,
    )


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_cost)


def get_account_service(
    repository: AccountRepository = Depends(get_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    codec: TokenCodec = Depends(get_token_codec),
) -> AccountService:
    """
    Create account service with injected dependencies.

    Wires together the repository, hasher and token codec for the domain service.
    """
    return AccountService(
        repository=repository,
        hasher=hasher,
        token_codec=codec,
        min_password_length=get_settings().min_password_length,
    )


def get_bearer_token(request: Request) -> str:
    """
    Extract the token from an `Authorization: Bearer <token>` header.

    Anything else (absent header, other scheme, missing or extra segments)
    is rejected here, before the token codec is resolved or called.
    """
    header = request.headers.get("Authorization")
    if not header:
        raise UnauthorizedError(INVALID_TOKEN)

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise UnauthorizedError(INVALID_TOKEN)
    return parts[1]


def get_verified_identity(
    request: Request,
    token: str = Depends(get_bearer_token),
    codec: TokenCodec = Depends(get_token_codec),
) -> TokenClaims:
    """
    Verify the bearer token and attach its claims to the request.

    The claims live on request.state.identity for this request only.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(identity: TokenClaims = Depends(get_verified_identity)): ...
    """
    claims = codec.parse(token)
    request.state.identity = claims
    return claims
