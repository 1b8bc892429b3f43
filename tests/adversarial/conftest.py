"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition, tampering and
enumeration tests.
"""

import pytest

from src.domain.ports import Identity, Role
from src.domain.tokens import TokenCodec


@pytest.fixture
def alice_token(codec: TokenCodec) -> str:
    return codec.issue(Identity(id="acc-1", username="alice", role=Role.FREELANCER, profile_setup_complete=False))
