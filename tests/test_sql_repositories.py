from __future__ import annotations

from datetime import datetime, timedelta, timezone
import unittest

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from authcore.application.dto.auth import AccountUpdate, NewAccount
from authcore.domain.exceptions import AccountAlreadyExistsError, StoreUnavailableError
from authcore.infrastructure.db.engine import create_schema, translate_db_errors
from authcore.infrastructure.db.repositories.accounts_repository import SqlAccountRepository
from authcore.infrastructure.db.repositories.refresh_token_repository import SqlRefreshTokenRepository


def _sqlite_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SqlAccountRepositoryTests(unittest.TestCase):
    def setUp(self):
        engine = _sqlite_engine()
        create_schema(engine)
        self.repo = SqlAccountRepository(engine)

    def _create_password_account(self, email="a@x.com"):
        return self.repo.create(
            NewAccount(email=email, name="Alice", provider="password", password_hash="hash")
        )

    def test_create_and_find(self):
        created = self._create_password_account(email="  A@X.com")

        self.assertEqual(created.email, "a@x.com")
        self.assertEqual(self.repo.find_by_id(created.id), created)
        self.assertEqual(self.repo.find_by_email("A@x.COM").id, created.id)
        self.assertIsNone(self.repo.find_by_email("nobody@x.com"))
        self.assertIsNone(self.repo.find_by_id("missing"))
        self.assertEqual(created.created_at.tzinfo, timezone.utc)

    def test_duplicate_email_is_already_exists(self):
        self._create_password_account()

        with self.assertRaises(AccountAlreadyExistsError):
            self._create_password_account(email="A@x.com")

    def test_duplicate_provider_subject_is_already_exists(self):
        self.repo.create(NewAccount(email="g1@x.com", name="G", provider="google", provider_id="sub-1"))

        with self.assertRaises(AccountAlreadyExistsError):
            self.repo.create(NewAccount(email="g2@x.com", name="G", provider="google", provider_id="sub-1"))

        other_provider = self.repo.create(
            NewAccount(email="a1@x.com", name="A", provider="apple", provider_id="sub-1")
        )
        self.assertEqual(self.repo.find_by_provider("apple", "sub-1").id, other_provider.id)
        self.assertEqual(self.repo.find_by_provider("google", "sub-1").email, "g1@x.com")

    def test_update_applies_fields_and_clears_reset_token(self):
        created = self._create_password_account()
        expires = _utcnow() + timedelta(hours=1)

        with_token = self.repo.update(
            created.id,
            AccountUpdate(password_reset_token="digest", password_reset_expires_at=expires),
        )
        self.assertEqual(with_token.password_reset_token, "digest")
        self.assertEqual(self.repo.find_by_reset_token("digest").id, created.id)
        self.assertEqual(with_token.password_reset_expires_at.replace(microsecond=0), expires.replace(microsecond=0))

        cleared = self.repo.update(
            created.id,
            AccountUpdate(password_hash="new-hash", name="Alice B", clear_password_reset=True),
        )
        self.assertEqual(cleared.password_hash, "new-hash")
        self.assertEqual(cleared.name, "Alice B")
        self.assertIsNone(cleared.password_reset_token)
        self.assertIsNone(cleared.password_reset_expires_at)
        self.assertIsNone(self.repo.find_by_reset_token("digest"))
        self.assertEqual(cleared.created_at, created.created_at)

    def test_update_unknown_account_returns_none(self):
        self.assertIsNone(self.repo.update("missing", AccountUpdate(name="x")))

    def test_update_to_taken_email_is_already_exists(self):
        self._create_password_account(email="a@x.com")
        other = self._create_password_account(email="b@x.com")

        with self.assertRaises(AccountAlreadyExistsError):
            self.repo.update(other.id, AccountUpdate(email="a@x.com"))


class SqlRefreshTokenRepositoryTests(unittest.TestCase):
    def setUp(self):
        engine = _sqlite_engine()
        create_schema(engine)
        accounts = SqlAccountRepository(engine)
        self.account_id = accounts.create(
            NewAccount(email="a@x.com", name="A", provider="password", password_hash="h")
        ).id
        self.other_id = accounts.create(
            NewAccount(email="b@x.com", name="B", provider="password", password_hash="h")
        ).id
        self.repo = SqlRefreshTokenRepository(engine)

    def _issue(self, token, *, account_id=None, expires_in=timedelta(days=7)):
        return self.repo.create(
            token=token,
            account_id=account_id or self.account_id,
            expires_at=_utcnow() + expires_in,
        )

    def test_create_and_find(self):
        self._issue("t1")

        record = self.repo.find_by_token("t1")
        self.assertEqual(record.account_id, self.account_id)
        self.assertFalse(record.revoked)
        self.assertIsNone(self.repo.find_by_token("t2"))

    def test_consume_succeeds_exactly_once(self):
        self._issue("t1")

        consumed = self.repo.consume("t1", now=_utcnow())
        self.assertIsNotNone(consumed)
        self.assertEqual(consumed.account_id, self.account_id)
        self.assertIsNone(self.repo.consume("t1", now=_utcnow()))
        self.assertTrue(self.repo.find_by_token("t1").revoked)

    def test_consume_rejects_expired_and_unknown(self):
        self._issue("old", expires_in=timedelta(seconds=-1))

        self.assertIsNone(self.repo.consume("old", now=_utcnow()))
        self.assertFalse(self.repo.find_by_token("old").revoked)
        self.assertIsNone(self.repo.consume("missing", now=_utcnow()))

    def test_revoke_and_delete(self):
        self._issue("t1")

        self.repo.revoke("t1")
        self.repo.revoke("t1")
        self.repo.revoke("missing")
        self.assertTrue(self.repo.find_by_token("t1").revoked)

        self.repo.delete("t1")
        self.assertIsNone(self.repo.find_by_token("t1"))

    def test_revoke_all_for_user_counts_only_live_tokens_of_that_user(self):
        self._issue("a1")
        self._issue("a2")
        self._issue("a3")
        self.repo.revoke("a3")
        self._issue("b1", account_id=self.other_id)

        self.assertEqual(self.repo.revoke_all_for_user(self.account_id), 2)
        self.assertFalse(self.repo.find_by_token("b1").revoked)

    def test_delete_expired(self):
        self._issue("old", expires_in=timedelta(days=-1))
        self._issue("fresh")

        self.assertEqual(self.repo.delete_expired(now=_utcnow()), 1)
        self.assertIsNone(self.repo.find_by_token("old"))
        self.assertIsNotNone(self.repo.find_by_token("fresh"))


class TranslateDbErrorsTests(unittest.TestCase):
    def test_unreachable_database_is_store_unavailable(self):
        engine = create_engine("sqlite:////nonexistent-directory/authcore.db")
        repo = SqlAccountRepository(engine)

        with self.assertRaises(StoreUnavailableError):
            repo.find_by_email("a@x.com")

    def test_integrity_error_without_conflict_mapping_propagates(self):
        with self.assertRaises(IntegrityError):
            with translate_db_errors():
                raise IntegrityError("INSERT", {}, Exception("duplicate"))

    def test_integrity_error_maps_to_conflict(self):
        with self.assertRaises(AccountAlreadyExistsError):
            with translate_db_errors(on_conflict=AccountAlreadyExistsError):
                raise IntegrityError("INSERT", {}, Exception("duplicate"))


if __name__ == "__main__":
    unittest.main()
