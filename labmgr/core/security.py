# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives and auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (scrypt via ``cryptography``)
2. Session cookie signing                   (PyJWT / HS256)
3. AuthContext – hasher, credential store, session store and cookie
   handling bundled per application; runs the login / logout flow
4. FastAPI dependency guards                (get_current_user, require_admin,
                                             ensure_owner_or_admin)
"""

import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import jwt as _jwt        # PyJWT
from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from labmgr.core.config import Settings
from labmgr.core.credentials import CredentialStore
from labmgr.core.logger import logger
from labmgr.core.sessions import SessionStore
from labmgr.database import get_db
from labmgr.models.user import Role, User

# ---------------------------------------------------------------------------
# 1.  scrypt – password hashing
# ---------------------------------------------------------------------------
# Stored format is "<hex derived key>.<hex salt>".  The *hex text* of the salt
# is what goes into the KDF (N=16384 r=8 p=1); existing user rows depend on
# exactly this layout.
# ---------------------------------------------------------------------------


class PasswordHasher:
    salt_bytes = 16
    key_length = 64
    n = 2 ** 14
    r = 8
    p = 1

    def _kdf(self, salt: str) -> Scrypt:
        # A Scrypt instance can only be used once, so build one per call.
        return Scrypt(
            salt=salt.encode("utf-8"),
            length=self.key_length,
            n=self.n,
            r=self.r,
            p=self.p,
        )

    def hash(self, password: str) -> str:
        """Derive a fresh-salted hash for *password*."""
        salt = secrets.token_hex(self.salt_bytes)
        derived = self._kdf(salt).derive(password.encode("utf-8"))
        return f"{derived.hex()}.{salt}"

    def verify(self, supplied: str, stored: str) -> bool:
        """
        Re-derive the key from *supplied* and the salt embedded in *stored*
        and compare in constant time.  Malformed stored values and length
        mismatches simply verify as False.
        """
        hashed, sep, salt = stored.partition(".")
        if not sep or not salt:
            return False
        try:
            expected = bytes.fromhex(hashed)
        except ValueError:
            return False
        try:
            self._kdf(salt).verify(supplied.encode("utf-8"), expected)
        except InvalidKey:
            return False
        return True


# ---------------------------------------------------------------------------
# 2.  Session cookie
# ---------------------------------------------------------------------------


class SessionCookie:
    """
    The browser holds a signed wrapper around the session token so that a
    forged or truncated cookie is rejected before any DB lookup.

    The cookie carries no Max-Age: it lives for the browser session, and
    the rolling expiry is enforced server-side by the SessionStore.
    """

    def __init__(self, secret: str, name: str, secure: bool = False):
        self.secret = secret
        self.name = name
        self.secure = secure

    def sign(self, sid: str) -> str:
        return _jwt.encode({"sid": sid}, self.secret, algorithm="HS256")

    def unsign(self, value: str) -> Optional[str]:
        try:
            payload = _jwt.decode(value, self.secret, algorithms=["HS256"])
        except _jwt.InvalidTokenError:
            return None
        sid = payload.get("sid")
        return sid if isinstance(sid, str) else None

    def set(self, response: Response, sid: str) -> None:
        response.set_cookie(
            self.name,
            self.sign(sid),
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )

    def clear(self, response: Response) -> None:
        response.delete_cookie(self.name, httponly=True, secure=self.secure, samesite="lax")


# ---------------------------------------------------------------------------
# 3.  AuthContext
# ---------------------------------------------------------------------------


@dataclass
class AuthContext:
    hasher: PasswordHasher
    credentials: CredentialStore
    sessions: SessionStore
    cookie: SessionCookie

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthContext":
        max_age = timedelta(minutes=settings.session_max_age_minutes)
        return cls(
            hasher=PasswordHasher(),
            credentials=CredentialStore(),
            sessions=SessionStore(max_age),
            cookie=SessionCookie(
                settings.session_secret,
                settings.session_cookie_name,
                secure=settings.session_cookie_secure,
            ),
        )

    def authenticate(self, db: Session, username: str, password: str) -> Optional[User]:
        """
        Local username/password strategy.  Returns the user on success and
        None for *both* unknown usernames and wrong passwords.
        """
        logger.info("Login attempt for username %r", username)
        user = self.credentials.get_by_username(db, username)
        if user is None:
            logger.info("Login rejected: unknown username %r", username)
            return None
        if not self.hasher.verify(password, user.password):
            logger.info("Login rejected: password mismatch for %r", user.username)
            return None
        logger.info("Login successful for %r", user.username)
        return user

    def login(self, db: Session, request: Request, response: Response, user: User) -> str:
        """
        Open a server-side session for *user* and set the cookie.  Any
        session the request already carried is dropped first.
        """
        previous = self.session_id(request)
        if previous:
            self.sessions.destroy(db, previous)
        sid = self.sessions.create(
            db,
            user.id,
            {
                "ip": get_client_ip(request),
                "user_agent": request.headers.get("user-agent", ""),
            },
        )
        self.cookie.set(response, sid)
        return sid

    def logout(self, db: Session, request: Request, response: Response) -> None:
        sid = self.session_id(request)
        if sid:
            self.sessions.destroy(db, sid)
        self.cookie.clear(response)

    def session_id(self, request: Request) -> Optional[str]:
        raw = request.cookies.get(self.cookie.name)
        if not raw:
            return None
        return self.cookie.unsign(raw)

    def resolve_user(self, db: Session, request: Request) -> Optional[User]:
        """
        Cookie → session row → fresh user row.  Returns None when any link
        is missing, including a session whose user has since been deleted.
        """
        sid = self.session_id(request)
        if not sid:
            return None
        row = self.sessions.load(db, sid)
        if row is None:
            return None
        return self.credentials.get(db, row.user_id)


# ---------------------------------------------------------------------------
# 4.  FastAPI dependency guards
# ---------------------------------------------------------------------------


def get_auth(request: Request) -> AuthContext:
    """Dependency: the AuthContext attached to the running application."""
    return request.app.state.auth


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
) -> Optional[User]:
    return auth.resolve_user(db, request)


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """
    Dependency: the authenticated user for this request.

    Raises a bare 401 when there is no live session.
    """
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Dependency: wraps :func:`get_current_user` and additionally asserts
    the admin role.  Raises 403 otherwise.
    """
    if not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


# -- Role checks --------------------------------------------------------------

# Roles whose access to samples / reports is limited to their own rows
_OWNER_SCOPED_ROLES = frozenset({Role.STUDENT, Role.RESEARCHER, Role.TECHNICIAN})


def is_admin(user: User) -> bool:
    return Role(user.role) is Role.ADMIN


def can_access(user: User, owner_id: int) -> bool:
    """Admins see everything; every other role only what it owns."""
    role = Role(user.role)
    if role is Role.ADMIN:
        return True
    if role in _OWNER_SCOPED_ROLES:
        return user.id == owner_id
    raise ValueError(f"Unhandled role {role!r}")


def ensure_owner_or_admin(user: User, owner_id: int, detail: str = "Access denied") -> None:
    if not can_access(user, owner_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
