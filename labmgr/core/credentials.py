# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Credential store – the only code that reads or writes ``users`` rows.

Every method takes the request's ORM session explicitly; the store itself
holds no state and is shared through the application's AuthContext.
"""

from typing import Optional

from sqlalchemy.orm import Session

from labmgr.models.user import User


def normalize_username(username: str) -> str:
    return username.strip().lower()


class CredentialStore:

    def get(self, db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, db: Session, username: str) -> Optional[User]:
        return (
            db.query(User)
            .filter(User.username == normalize_username(username))
            .first()
        )

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    def create(self, db: Session, **fields) -> User:
        """
        Insert a user.  *password* must already be hashed; *username* is
        normalised here so callers cannot bypass the lowercase invariant.
        """
        fields["username"] = normalize_username(fields["username"])
        user = User(**fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def update(self, db: Session, user_id: int, **fields) -> Optional[User]:
        user = self.get(db, user_id)
        if user is None:
            return None
        if "username" in fields:
            fields["username"] = normalize_username(fields["username"])
        for key, value in fields.items():
            setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user

    def list_all(self, db: Session) -> list[User]:
        return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    def delete(self, db: Session, user_id: int) -> None:
        db.query(User).filter(User.id == user_id).delete()
        db.commit()
