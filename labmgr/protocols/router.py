# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Protocol library endpoints.  Any signed-in user may browse and search;
only admins may add entries here (edits and deletes live under /api/admin).
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from labmgr.database import get_db
from labmgr.core.schemas import parse_id
from labmgr.core.security import get_current_user, require_admin
from labmgr.models.protocol import Protocol
from labmgr.models.user import User
from labmgr.protocols.schemas import ProtocolCreate, ProtocolResponse

router = APIRouter(prefix="/api/protocols", tags=["protocols"])


def search_protocols(db: Session, search: Optional[str] = None) -> list[Protocol]:
    """Newest first; *search* matches title, description or category."""
    q = db.query(Protocol)
    if search:
        pattern = f"%{search}%"
        q = q.filter(
            or_(
                Protocol.title.like(pattern),
                Protocol.description.like(pattern),
                Protocol.category.like(pattern),
            )
        )
    return q.order_by(Protocol.created_at.desc(), Protocol.id.desc()).all()


def create_protocol_for(body: ProtocolCreate, author: User, db: Session) -> Protocol:
    protocol = Protocol(created_by=author.id, **body.model_dump())
    db.add(protocol)
    db.commit()
    db.refresh(protocol)
    return protocol


@router.get("", response_model=list[ProtocolResponse])
def list_protocols(
    search: Optional[str] = Query(None, description="Substring of title, description or category"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return search_protocols(db, search)


@router.post("", response_model=ProtocolResponse, status_code=status.HTTP_201_CREATED)
def create_protocol(
    body: ProtocolCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return create_protocol_for(body, admin, db)


@router.get("/{protocol_id}", response_model=ProtocolResponse)
def get_protocol(
    protocol_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    protocol_pk = parse_id(protocol_id, "protocol")
    protocol = db.query(Protocol).filter(Protocol.id == protocol_pk).first()
    if not protocol:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Protocol not found")
    return protocol
