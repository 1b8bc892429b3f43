"""
Unit tests for AccountService domain logic.

Tests domain logic with mocked ports and the in-memory store to verify:
- Input normalization and validation
- Password hashing before persistence
- Conflict signalling on duplicate identity
- Indistinguishable login failures
- Profile save as the only writer of the completion flag
"""

import logging
from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import InMemoryAccountRepository
from src.domain.accounts import INVALID_CREDENTIALS, AccountService
from src.domain.exceptions import ConflictError, ProfileNotFound, UnauthorizedError, ValidationError
from src.domain.passwords import PasswordHasher
from src.domain.ports import Account, AccountRecord, Identity, Role
from src.domain.tokens import TokenCodec


def _account(**overrides) -> Account:
    fields = {
        "id": "acc-1",
        "username": "alice",
        "email": "a@x.com",
        "role": Role.FREELANCER,
        "profile_setup_complete": False,
    }
    fields.update(overrides)
    return Account(**fields)


def _mock_service(hasher: PasswordHasher, codec: TokenCodec) -> tuple[AccountService, Mock]:
    repo = Mock()
    repo.create_account.side_effect = lambda username, email, password_hash, role: _account(
        username=username, email=email, role=role
    )
    return AccountService(repository=repo, hasher=hasher, token_codec=codec), repo


class TestRegistrationNormalization:
    """Tests for username/email normalization."""

    def test_email_is_stripped_and_lowercased(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        service, repo = _mock_service(hasher, codec)
        service.register("alice", "  A@X.COM  ", "secret1", "freelancer")

        call_args = repo.create_account.call_args[0]
        assert call_args[1] == "a@x.com"

    def test_username_is_trimmed(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        service, repo = _mock_service(hasher, codec)
        service.register("  alice ", "a@x.com", "secret1", "freelancer")

        call_args = repo.create_account.call_args[0]
        assert call_args[0] == "alice"

    def test_role_string_is_converted(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        service, repo = _mock_service(hasher, codec)
        service.register("bob", "b@x.com", "secret1", "client")

        call_args = repo.create_account.call_args[0]
        assert call_args[3] is Role.CLIENT


class TestRegistrationValidation:
    """Tests for registration preconditions."""

    @pytest.mark.parametrize(
        "username,email,password,role",
        [
            ("", "a@x.com", "secret1", "freelancer"),
            ("   ", "a@x.com", "secret1", "freelancer"),
            ("alice", "", "secret1", "freelancer"),
            ("alice", "a@x.com", "", "freelancer"),
            ("alice", "a@x.com", "secret1", ""),
        ],
    )
    def test_missing_fields_rejected(
        self, hasher: PasswordHasher, codec: TokenCodec, username: str, email: str, password: str, role: str
    ) -> None:
        service, repo = _mock_service(hasher, codec)
        with pytest.raises(ValidationError):
            service.register(username, email, password, role)
        repo.create_account.assert_not_called()

    def test_short_password_rejected(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        service, repo = _mock_service(hasher, codec)
        with pytest.raises(ValidationError):
            service.register("alice", "a@x.com", "12345", "freelancer")
        repo.create_account.assert_not_called()

    def test_six_character_password_accepted(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        service, _ = _mock_service(hasher, codec)
        service.register("alice", "a@x.com", "123456", "freelancer")

    def test_password_over_72_bytes_rejected(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        service, _ = _mock_service(hasher, codec)
        with pytest.raises(ValidationError):
            service.register("alice", "a@x.com", "x" * 73, "freelancer")

    def test_unknown_role_rejected(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        service, repo = _mock_service(hasher, codec)
        with pytest.raises(ValidationError):
            service.register("alice", "a@x.com", "secret1", "admin")
        repo.create_account.assert_not_called()


class TestRegistrationFlow:
    """Tests for registration orchestration."""

    def test_password_is_hashed_before_storage(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        service, repo = _mock_service(hasher, codec)
        service.register("alice", "a@x.com", "secret1", "freelancer")

        password_hash = repo.create_account.call_args[0][2]
        assert password_hash != "secret1"
        assert hasher.verify("secret1", password_hash)

    def test_conflict_when_repository_rejects(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        service, repo = _mock_service(hasher, codec)
        repo.create_account.side_effect = None
        repo.create_account.return_value = None

        with pytest.raises(ConflictError):
            service.register("alice", "a@x.com", "secret1", "freelancer")

    def test_returns_public_projection(self, service: AccountService) -> None:
        account = service.register("alice", "a@x.com", "secret1", "freelancer")

        assert isinstance(account, Account)
        assert not hasattr(account, "password_hash")
        assert account.profile_setup_complete is False
        assert account.role is Role.FREELANCER

    def test_duplicate_email_case_insensitive(self, service: AccountService) -> None:
        service.register("alice", "a@x.com", "secret1", "freelancer")
        with pytest.raises(ConflictError):
            service.register("alice2", "A@X.com", "secret1", "client")

    def test_duplicate_username(self, service: AccountService) -> None:
        service.register("alice", "a@x.com", "secret1", "freelancer")
        with pytest.raises(ConflictError):
            service.register("alice", "other@x.com", "secret1", "client")

    def test_registration_issues_no_token(self, hasher: PasswordHasher) -> None:
        codec = Mock(spec=TokenCodec)
        service = AccountService(repository=InMemoryAccountRepository(), hasher=hasher, token_codec=codec)
        service.register("alice", "a@x.com", "secret1", "freelancer")
        codec.issue.assert_not_called()


class TestLogin:
    """Tests for credential verification and token issuance."""

    def test_login_returns_token_with_claims(self, service: AccountService, codec: TokenCodec) -> None:
        account = service.register("alice", "a@x.com", "secret1", "freelancer")
        claims = codec.parse(service.login("a@x.com", "secret1"))

        assert claims.id == account.id
        assert claims.username == "alice"
        assert claims.role is Role.FREELANCER
        assert claims.profile_setup_complete is False

    def test_login_normalizes_email(self, service: AccountService, codec: TokenCodec) -> None:
        service.register("alice", "a@x.com", "secret1", "freelancer")
        assert codec.parse(service.login("  A@X.COM ", "secret1")).username == "alice"

    def test_wrong_password_and_unknown_email_are_identical(self, service: AccountService) -> None:
        service.register("alice", "a@x.com", "secret1", "freelancer")

        with pytest.raises(UnauthorizedError) as wrong_password:
            service.login("a@x.com", "wrong-password")
        with pytest.raises(UnauthorizedError) as unknown_email:
            service.login("nobody@x.com", "secret1")

        assert type(wrong_password.value) is type(unknown_email.value)
        assert str(wrong_password.value) == str(unknown_email.value) == INVALID_CREDENTIALS

    def test_unknown_email_still_runs_bcrypt(self, codec: TokenCodec) -> None:
        hasher = Mock(spec=PasswordHasher)
        repo = Mock()
        repo.get_by_email.return_value = None
        service = AccountService(repository=repo, hasher=hasher, token_codec=codec)

        with pytest.raises(UnauthorizedError):
            service.login("nobody@x.com", "secret1")
        hasher.burn.assert_called_once_with("secret1")

    def test_malformed_stored_hash_fails_closed(self, hasher: PasswordHasher, codec: TokenCodec) -> None:
        repo = Mock()
        repo.get_by_email.return_value = AccountRecord(account=_account(), password_hash="corrupted")
        service = AccountService(repository=repo, hasher=hasher, token_codec=codec)

        with pytest.raises(UnauthorizedError):
            service.login("a@x.com", "secret1")

    def test_concurrent_logins_get_independent_tokens(self, service: AccountService, codec: TokenCodec) -> None:
        service.register("alice", "a@x.com", "secret1", "freelancer")
        first = service.login("a@x.com", "secret1")
        second = service.login("a@x.com", "secret1")

        assert codec.parse(first).username == "alice"
        assert codec.parse(second).username == "alice"


class TestProfileSave:
    """Tests for the profile-completion flag."""

    def test_save_profile_sets_flag(self, service: AccountService) -> None:
        account = service.register("alice", "a@x.com", "secret1", "freelancer")
        identity = Identity(account.id, account.username, account.role, False)

        saved = service.save_profile(identity, {"bio": "Python developer"})

        assert saved.profile_setup_complete is True
        assert saved.profile == {"bio": "Python developer"}

    def test_second_save_keeps_flag_and_merges(self, service: AccountService) -> None:
        account = service.register("alice", "a@x.com", "secret1", "freelancer")
        identity = Identity(account.id, account.username, account.role, False)

        service.save_profile(identity, {"bio": "Python developer"})
        saved = service.save_profile(identity, {"skills": ["fastapi"]})

        assert saved.profile_setup_complete is True
        assert saved.profile == {"bio": "Python developer", "skills": ["fastapi"]}

    def test_fresh_login_after_save_carries_new_flag(self, service: AccountService, codec: TokenCodec) -> None:
        account = service.register("alice", "a@x.com", "secret1", "freelancer")
        old_token = service.login("a@x.com", "secret1")

        service.save_profile(codec.parse(old_token).identity, {"bio": "hi"})
        new_token = service.login("a@x.com", "secret1")

        assert codec.parse(old_token).profile_setup_complete is False
        assert codec.parse(new_token).profile_setup_complete is True
        assert codec.parse(new_token).id == account.id

    def test_unknown_fields_rejected(self, service: AccountService) -> None:
        account = service.register("alice", "a@x.com", "secret1", "freelancer")
        identity = Identity(account.id, account.username, account.role, False)

        with pytest.raises(ValidationError):
            service.save_profile(identity, {"profileSetupComplete": False})

    def test_save_for_missing_account(self, service: AccountService) -> None:
        identity = Identity("missing", "ghost", Role.CLIENT, False)
        with pytest.raises(ProfileNotFound):
            service.save_profile(identity, {"bio": "hi"})

    def test_get_profile_for_missing_account(self, service: AccountService) -> None:
        identity = Identity("missing", "ghost", Role.CLIENT, False)
        with pytest.raises(ProfileNotFound):
            service.get_profile(identity)

    def test_every_save_logs_once(self, service: AccountService, caplog: pytest.LogCaptureFixture) -> None:
        account = service.register("alice", "a@x.com", "secret1", "freelancer")
        stale = Identity(account.id, account.username, account.role, False)

        with caplog.at_level(logging.INFO, logger="src.domain.accounts"):
            service.save_profile(stale, {"bio": "hi"})
            service.save_profile(stale, {"bio": "hello"})

        messages = [r.getMessage() for r in caplog.records if r.name == "src.domain.accounts"]
        assert messages.count(f"Profile saved for account id={account.id}") == 2
        assert not any("completed" in message for message in messages)
