from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from authcore.domain.entities.account import AccessTokenClaims
from authcore.domain.exceptions import ConfigurationError
from authcore.infrastructure.memory.refresh_token_store import InMemoryRefreshTokenStore
from authcore.infrastructure.security.token_service import JwtTokenService


SECRET = "test-signing-secret-with-enough-entropy-123"


class FrozenClock:
    def __init__(self):
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _make_service(clock: FrozenClock | None = None):
    store = InMemoryRefreshTokenStore()
    service = JwtTokenService(
        jwt_secret=SECRET,
        refresh_token_store=store,
        access_ttl_minutes=15,
        refresh_ttl_days=7,
        clock=clock or FrozenClock(),
    )
    return service, store


def _claims(sub: str = "account-1") -> AccessTokenClaims:
    return AccessTokenClaims(sub=sub, email="a@x.com", name="A", provider="password")


def test_generate_token_pair_signs_claims_and_persists_hashed_refresh_token():
    service, store = _make_service()

    pair = service.generate_token_pair(_claims())

    assert pair.expires_in == 15 * 60
    payload = jwt.decode(pair.access_token, SECRET, algorithms=["HS256"])
    assert payload["sub"] == "account-1"
    assert payload["email"] == "a@x.com"
    assert payload["provider"] == "password"
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == 15 * 60

    assert store.find_by_token(pair.refresh_token) is None
    record = store.find_by_token(service.hash_token(pair.refresh_token))
    assert record is not None
    assert record.account_id == "account-1"
    assert not record.revoked


def test_refresh_token_is_random_and_independent_of_access_token():
    service, _ = _make_service()

    first = service.generate_token_pair(_claims())
    second = service.generate_token_pair(_claims())

    assert first.refresh_token != second.refresh_token
    assert first.refresh_token not in first.access_token


def test_refresh_token_expiry_is_seven_days():
    clock = FrozenClock()
    service, store = _make_service(clock)

    pair = service.generate_token_pair(_claims())

    record = store.find_by_token(service.hash_token(pair.refresh_token))
    assert record.expires_at == clock.now + timedelta(days=7)


def test_validate_access_token_returns_claims():
    service, _ = _make_service()
    pair = service.generate_token_pair(_claims())

    claims = service.validate_access_token(pair.access_token)

    assert claims is not None
    assert claims.sub == "account-1"
    assert claims.name == "A"
    assert claims.exp - claims.iat == 15 * 60


def test_validate_access_token_collapses_every_failure_to_none():
    clock = FrozenClock()
    service, _ = _make_service(clock)
    pair = service.generate_token_pair(_claims())

    other_secret = JwtTokenService(
        jwt_secret="another-secret-another-secret-another",
        refresh_token_store=InMemoryRefreshTokenStore(),
    ).generate_token_pair(_claims()).access_token
    wrong_type = jwt.encode(
        {"sub": "account-1", "type": "refresh", "provider": "password", "iat": 1, "exp": 4102444800},
        SECRET,
        algorithm="HS256",
    )

    assert service.validate_access_token("not-a-jwt") is None
    assert service.validate_access_token(pair.access_token + "x") is None
    assert service.validate_access_token(other_secret) is None
    assert service.validate_access_token(wrong_type) is None

    clock.advance(minutes=15, seconds=1)
    assert service.validate_access_token(pair.access_token) is None


def test_validate_refresh_token_returns_account_id():
    service, _ = _make_service()
    pair = service.generate_token_pair(_claims())

    assert service.validate_refresh_token(pair.refresh_token) == "account-1"
    assert service.validate_refresh_token("unknown") is None


def test_validate_refresh_token_deletes_expired_rows():
    clock = FrozenClock()
    service, store = _make_service(clock)
    pair = service.generate_token_pair(_claims())

    clock.advance(days=7, seconds=1)

    assert service.validate_refresh_token(pair.refresh_token) is None
    assert store.find_by_token(service.hash_token(pair.refresh_token)) is None


def test_validate_refresh_token_keeps_revoked_rows_for_audit():
    service, store = _make_service()
    pair = service.generate_token_pair(_claims())

    service.revoke_refresh_token(pair.refresh_token)

    assert service.validate_refresh_token(pair.refresh_token) is None
    record = store.find_by_token(service.hash_token(pair.refresh_token))
    assert record is not None
    assert record.revoked


def test_consume_refresh_token_succeeds_once():
    service, _ = _make_service()
    pair = service.generate_token_pair(_claims())

    assert service.consume_refresh_token(pair.refresh_token) == "account-1"
    assert service.consume_refresh_token(pair.refresh_token) is None
    assert service.validate_refresh_token(pair.refresh_token) is None


def test_consume_refresh_token_deletes_expired_rows():
    clock = FrozenClock()
    service, store = _make_service(clock)
    pair = service.generate_token_pair(_claims())

    clock.advance(days=8)

    assert service.consume_refresh_token(pair.refresh_token) is None
    assert store.find_by_token(service.hash_token(pair.refresh_token)) is None


def test_revoke_refresh_token_is_idempotent():
    service, _ = _make_service()
    pair = service.generate_token_pair(_claims())

    service.revoke_refresh_token(pair.refresh_token)
    service.revoke_refresh_token(pair.refresh_token)
    service.revoke_refresh_token("never-issued")

    assert service.validate_refresh_token(pair.refresh_token) is None


def test_revoke_all_user_tokens_only_touches_that_account():
    service, _ = _make_service()
    first = service.generate_token_pair(_claims("account-1"))
    second = service.generate_token_pair(_claims("account-1"))
    other = service.generate_token_pair(_claims("account-2"))

    service.revoke_all_user_tokens("account-1")

    assert service.validate_refresh_token(first.refresh_token) is None
    assert service.validate_refresh_token(second.refresh_token) is None
    assert service.validate_refresh_token(other.refresh_token) == "account-2"


def test_purge_expired_refresh_tokens_removes_only_expired_rows():
    clock = FrozenClock()
    service, _ = _make_service(clock)
    old = service.generate_token_pair(_claims())
    clock.advance(days=5)
    fresh = service.generate_token_pair(_claims())
    clock.advance(days=3)

    assert service.purge_expired_refresh_tokens() == 1
    assert service.validate_refresh_token(old.refresh_token) is None
    assert service.validate_refresh_token(fresh.refresh_token) == "account-1"


def test_password_reset_tokens_are_unique_and_hash_deterministically():
    service, _ = _make_service()

    first = service.generate_password_reset_token()
    second = service.generate_password_reset_token()

    assert first != second
    assert len(first) >= 32
    assert service.hash_token(first) == service.hash_token(first)
    assert service.hash_token(first) != first


def test_empty_secret_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        JwtTokenService(jwt_secret="", refresh_token_store=InMemoryRefreshTokenStore())


def test_access_token_minted_while_clock_runs_ahead_of_wall_time_is_valid():
    clock = FrozenClock()
    clock.advance(minutes=16)
    service, _ = _make_service(clock)

    pair = service.generate_token_pair(_claims())

    claims = service.validate_access_token(pair.access_token)
    assert claims is not None
    assert claims.iat == int(clock.now.timestamp())


def test_access_token_iat_is_checked_against_clock_with_leeway():
    clock = FrozenClock()
    issuer, _ = _make_service(clock)
    pair = issuer.generate_token_pair(_claims())

    clock.advance(seconds=-10)
    assert issuer.validate_access_token(pair.access_token) is not None

    clock.advance(minutes=-5)
    assert issuer.validate_access_token(pair.access_token) is None
