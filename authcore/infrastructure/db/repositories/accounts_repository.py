from __future__ import annotations

from datetime import datetime, timezone
import logging
from uuid import uuid4

from sqlalchemy import insert, select, update

from authcore.application.dto.auth import AccountUpdate, NewAccount
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.domain.entities.account import AccountIdentity
from authcore.domain.exceptions import AccountAlreadyExistsError
from authcore.infrastructure.db.engine import translate_db_errors
from authcore.infrastructure.db.mappers.accounts_mapper import map_row_to_account
from authcore.infrastructure.db.models.accounts import AccountModel


logger = logging.getLogger(__name__)

_accounts = AccountModel.__table__


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class SqlAccountRepository(AccountStorePort):
    def __init__(self, engine):
        self._engine = engine

    def create(self, data: NewAccount) -> AccountIdentity:
        now = _utcnow()
        values = {
            "id": str(uuid4()),
            "email": _normalize_email(data.email),
            "name": data.name,
            "password_hash": data.password_hash,
            "provider": data.provider,
            "provider_id": data.provider_id,
            "password_reset_token": None,
            "password_reset_expires_at": None,
            "created_at": now,
            "updated_at": now,
        }
        with translate_db_errors(on_conflict=AccountAlreadyExistsError), self._engine.begin() as conn:
            conn.execute(insert(_accounts).values(**values))
        logger.info(
            "accounts_repo: account_created account_id=%s provider=%s",
            values["id"],
            data.provider,
        )
        return map_row_to_account(values)

    def find_by_id(self, account_id: str) -> AccountIdentity | None:
        return self._find_one(_accounts.c.id == account_id)

    def find_by_email(self, email: str) -> AccountIdentity | None:
        return self._find_one(_accounts.c.email == _normalize_email(email))

    def find_by_provider(self, provider: str, provider_id: str) -> AccountIdentity | None:
        return self._find_one(
            _accounts.c.provider == provider,
            _accounts.c.provider_id == provider_id,
        )

    def find_by_reset_token(self, token_hash: str) -> AccountIdentity | None:
        return self._find_one(_accounts.c.password_reset_token == token_hash)

    def update(self, account_id: str, data: AccountUpdate) -> AccountIdentity | None:
        values: dict = {"updated_at": _utcnow()}
        if data.email is not None:
            values["email"] = _normalize_email(data.email)
        if data.name is not None:
            values["name"] = data.name
        if data.password_hash is not None:
            values["password_hash"] = data.password_hash
        if data.clear_password_reset:
            values["password_reset_token"] = None
            values["password_reset_expires_at"] = None
        else:
            if data.password_reset_token is not None:
                values["password_reset_token"] = data.password_reset_token
            if data.password_reset_expires_at is not None:
                values["password_reset_expires_at"] = data.password_reset_expires_at

        with translate_db_errors(on_conflict=AccountAlreadyExistsError), self._engine.begin() as conn:
            result = conn.execute(update(_accounts).where(_accounts.c.id == account_id).values(**values))
            row = None
            if result.rowcount:
                row = conn.execute(
                    select(_accounts).where(_accounts.c.id == account_id)
                ).mappings().first()

        if row is None:
            logger.warning("accounts_repo: account_not_found_for_update account_id=%s", account_id)
            return None
        return map_row_to_account(row)

    def _find_one(self, *criteria) -> AccountIdentity | None:
        stmt = select(_accounts).where(*criteria).limit(1)
        with translate_db_errors(), self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return map_row_to_account(row)
