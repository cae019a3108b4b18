"""
SQLite user repository tests
"""

from datetime import date, timedelta
from threading import Thread

import pytest

from account_service.domain.errors import DuplicateError
from account_service.domain.models import UserRole, UserStatus
from account_service.services.tokens import utcnow


def _create(repository, email="alice@example.com", **fields):
    return repository.create(
        email=email,
        password_hash="hash",
        first_name="Alice",
        last_name="Walker",
        **fields,
    )


class TestSQLiteUserRepository:
    def test_create_applies_defaults(self, repository):
        user = _create(repository)
        assert user.id
        assert user.role == UserRole.CLIENT
        assert user.status == UserStatus.ACTIVE
        assert user.is_email_verified is False
        assert user.created_at.tzinfo is not None
        assert repository.find_by_id(user.id).email == "alice@example.com"

    def test_create_round_trips_optional_fields(self, repository):
        expires = utcnow() + timedelta(hours=24)
        user = _create(
            repository,
            phone="+15551234567",
            date_of_birth=date(1990, 4, 12),
            role=UserRole.GUIDE,
            email_verification_token="abc",
            email_verification_expires=expires,
        )
        stored = repository.find_by_email("alice@example.com")
        assert stored.id == user.id
        assert stored.date_of_birth == date(1990, 4, 12)
        assert stored.role == UserRole.GUIDE
        assert stored.email_verification_expires == expires

    def test_duplicate_email_is_rejected(self, repository):
        _create(repository)
        with pytest.raises(DuplicateError):
            _create(repository)

    def test_email_lookup_is_exact(self, repository):
        _create(repository)
        assert repository.find_by_email("Alice@example.com") is None

    def test_token_lookups_filter_expired_tokens(self, repository):
        now = utcnow()
        user = _create(
            repository,
            email_verification_token="verify-me",
            email_verification_expires=now + timedelta(minutes=1),
        )
        repository.update(
            user.id,
            {"password_reset_token": "reset-me", "password_reset_expires": now - timedelta(seconds=1)},
        )
        assert repository.find_by_verification_token("verify-me", now).id == user.id
        assert repository.find_by_verification_token("verify-me", now + timedelta(minutes=2)) is None
        assert repository.find_by_reset_token("reset-me", now) is None
        assert repository.find_by_reset_token("unknown", now) is None

    def test_update_is_partial(self, repository):
        user = _create(repository, phone="+15551234567")
        updated = repository.update(user.id, {"first_name": "Alicia"})
        assert updated.first_name == "Alicia"
        assert updated.last_name == "Walker"
        assert updated.phone == "+15551234567"
        assert updated.updated_at >= user.updated_at

    def test_update_with_stale_expectation_writes_nothing(self, repository):
        user = _create(repository)
        repository.update(user.id, {"password_reset_token": "new"})
        result = repository.update(
            user.id,
            {"password_reset_token": None, "password_hash": "changed"},
            expected={"password_reset_token": "old"},
        )
        assert result is None
        stored = repository.find_by_id(user.id)
        assert stored.password_reset_token == "new"
        assert stored.password_hash == "hash"

    def test_update_unknown_user_returns_none(self, repository):
        assert repository.update("missing", {"first_name": "Bob"}) is None

    def test_update_rejects_unknown_columns(self, repository):
        user = _create(repository)
        with pytest.raises(ValueError):
            repository.update(user.id, {"email": "other@example.com"})

    def test_concurrent_guarded_updates_apply_once(self, repository):
        user = _create(repository)
        repository.update(user.id, {"password_reset_token": "once"})
        results = []

        def consume():
            results.append(
                repository.update(
                    user.id,
                    {"password_reset_token": None},
                    expected={"password_reset_token": "once"},
                )
            )

        threads = [Thread(target=consume) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert sum(result is not None for result in results) == 1
