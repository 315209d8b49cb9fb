from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy import delete, insert, select, update

from authcore.application.ports.refresh_token_store_port import RefreshTokenStorePort
from authcore.domain.entities.account import RefreshTokenRecord
from authcore.infrastructure.db.engine import translate_db_errors
from authcore.infrastructure.db.mappers.accounts_mapper import map_row_to_refresh_token
from authcore.infrastructure.db.models.accounts import RefreshTokenModel


logger = logging.getLogger(__name__)

_tokens = RefreshTokenModel.__table__


class SqlRefreshTokenRepository(RefreshTokenStorePort):
    def __init__(self, engine):
        self._engine = engine

    def create(self, *, token: str, account_id: str, expires_at: datetime) -> RefreshTokenRecord:
        values = {
            "token": token,
            "account_id": account_id,
            "expires_at": expires_at,
            "revoked": False,
            "created_at": datetime.now(timezone.utc),
        }
        with translate_db_errors(), self._engine.begin() as conn:
            conn.execute(insert(_tokens).values(**values))
        return map_row_to_refresh_token(values)

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        stmt = select(_tokens).where(_tokens.c.token == token).limit(1)
        with translate_db_errors(), self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return map_row_to_refresh_token(row)

    def consume(self, token: str, *, now: datetime) -> RefreshTokenRecord | None:
        with translate_db_errors(), self._engine.begin() as conn:
            row = conn.execute(select(_tokens).where(_tokens.c.token == token)).mappings().first()
            if row is None:
                return None
            # The conditional UPDATE is the only arbiter between concurrent callers.
            result = conn.execute(
                update(_tokens)
                .where(
                    _tokens.c.token == token,
                    _tokens.c.revoked.is_(False),
                    _tokens.c.expires_at > now,
                )
                .values(revoked=True)
            )
            if result.rowcount != 1:
                return None
        return map_row_to_refresh_token({**row, "revoked": False})

    def delete(self, token: str) -> None:
        with translate_db_errors(), self._engine.begin() as conn:
            conn.execute(delete(_tokens).where(_tokens.c.token == token))

    def revoke(self, token: str) -> None:
        with translate_db_errors(), self._engine.begin() as conn:
            conn.execute(
                update(_tokens)
                .where(_tokens.c.token == token, _tokens.c.revoked.is_(False))
                .values(revoked=True)
            )

    def revoke_all_for_user(self, account_id: str) -> int:
        with translate_db_errors(), self._engine.begin() as conn:
            result = conn.execute(
                update(_tokens)
                .where(_tokens.c.account_id == account_id, _tokens.c.revoked.is_(False))
                .values(revoked=True)
            )
            revoked = result.rowcount
        return revoked

    def delete_expired(self, *, now: datetime) -> int:
        with translate_db_errors(), self._engine.begin() as conn:
            deleted = conn.execute(delete(_tokens).where(_tokens.c.expires_at < now)).rowcount
        logger.info("refresh_token_repo: deleted_expired count=%s", deleted)
        return deleted
