"""
FastAPI dependencies (DB session, record store, caller identity)
"""
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from finledger.infrastructure.db.session import get_db as _get_db
from finledger.infrastructure.store.sql import SqlRecordStore


# Re-export get_db for routers and test overrides
get_db = _get_db


def get_store(db: Session = Depends(get_db)) -> SqlRecordStore:
    return SqlRecordStore(db)


def get_owner_id(x_owner_id: str | None = Header(default=None)) -> str:
    """
    Opaque caller identity from the X-Owner-Id header

    Authentication happens upstream; this layer only scopes records by owner.

    Raises:
        HTTPException(401): header missing or blank
    """
    owner_id = (x_owner_id or "").strip()
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Owner-Id header"
        )
    return owner_id
