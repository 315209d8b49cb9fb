from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from authcore.domain.entities.account import AccountIdentity, RefreshTokenRecord


def _as_str(value: Any) -> str:
    return str(value)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def map_row_to_account(row: Mapping[str, Any]) -> AccountIdentity:
    return AccountIdentity(
        id=_as_str(row["id"]),
        email=row["email"],
        name=row["name"],
        password_hash=row.get("password_hash"),
        provider=row["provider"],
        provider_id=row.get("provider_id"),
        password_reset_token=row.get("password_reset_token"),
        password_reset_expires_at=_as_utc(row.get("password_reset_expires_at")),
        created_at=_as_utc(row["created_at"]),
        updated_at=_as_utc(row["updated_at"]),
    )


def map_row_to_refresh_token(row: Mapping[str, Any]) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        token=row["token"],
        account_id=_as_str(row["account_id"]),
        expires_at=_as_utc(row["expires_at"]),
        revoked=bool(row["revoked"]),
        created_at=_as_utc(row["created_at"]),
    )
