# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – registration, login / logout, current user, self-service
profile edits and password reset.

Security notes
--------------
* Login returns the *same* body whether the username doesn't exist or the
  password is wrong.  Registration does reveal taken usernames ("Username
  already exists"); that is the documented contract of the endpoint.
* Responses carry the public user record only; the password hash is
  stripped by ``UserResponse``.
* reset-password is limited to the caller's own account unless the caller
  is an admin.
"""

import secrets
import shutil
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from labmgr.database import get_db
from labmgr.core.logger import logger
from labmgr.core.schemas import parse_payload
from labmgr.core.security import AuthContext, get_auth, get_current_user, is_admin
from labmgr.models.user import User
from labmgr.auth.schemas import (
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
)

router = APIRouter(prefix="/api", tags=["auth"])

# Generic message used for both "no such username" and "wrong password"
_LOGIN_FAIL = "Invalid credentials"

_PICTURE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


async def _read_registration(request: Request) -> tuple[dict, Optional[UploadFile]]:
    """
    Registration accepts either a JSON body or a multipart form carrying an
    optional ``profilePicture`` file.  Returns the plain fields and the file.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        picture = form.get("profilePicture")
        fields = {key: value for key, value in form.items() if isinstance(value, str)}
        if isinstance(picture, UploadFile) and picture.filename:
            return fields, picture
        return fields, None

    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed request body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed request body")
    return body, None


def _store_profile_picture(upload: UploadFile, upload_dir: str) -> str:
    """Persist the upload under a random name and return that name."""
    suffix = Path(upload.filename).suffix.lower()
    if suffix not in _PICTURE_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Profile picture must be a PNG, JPEG, GIF or WebP image",
        )
    target_dir = Path(upload_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    name = f"{secrets.token_hex(16)}{suffix}"
    with (target_dir / name).open("wb") as fh:
        shutil.copyfileobj(upload.file, fh)
    return name


def _complete_registration(
    request: Request,
    response: Response,
    db: Session,
    auth: AuthContext,
    fields: dict,
    picture: Optional[UploadFile],
) -> User:
    """Validation, lookups, scrypt and file I/O: runs in the threadpool."""
    result = parse_payload(RegisterRequest, fields)
    if not result.ok:
        raise RequestValidationError(result.errors)
    body = result.value

    # Uniqueness check (not atomic with the insert; a concurrent duplicate
    # surfaces as an IntegrityError from the unique index)
    if auth.credentials.get_by_username(db, body.username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")
    if auth.credentials.get_by_email(db, body.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    profile_picture = None
    if picture is not None:
        profile_picture = _store_profile_picture(picture, request.app.state.settings.upload_dir)

    user = auth.credentials.create(
        db,
        username=body.username,
        password=auth.hasher.hash(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        mobile=body.mobile,
        city=body.city,
        role=body.role,
        profile_picture=profile_picture,
    )
    auth.login(db, request, response, user)
    logger.info("Registered user %r (id=%d, role=%s)", user.username, user.id, user.role.value)
    return user


# ---------------------------------------------------------------------------
# POST /api/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """Create an account and log it in straight away."""
    # Only reading the body needs the event loop.
    fields, picture = await _read_registration(request)
    return await run_in_threadpool(_complete_registration, request, response, db, auth, fields, picture)


# ---------------------------------------------------------------------------
# POST /api/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=UserResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """Verify credentials and open a session."""
    user = None
    if body.username and body.password:
        user = auth.authenticate(db, body.username, body.password)

    # Unified failure path – no information leaks about whether the username exists
    if user is None:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": _LOGIN_FAIL})

    auth.login(db, request, response, user)
    return user


# ---------------------------------------------------------------------------
# POST /api/logout
# ---------------------------------------------------------------------------


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """Destroy the server-side session (if any) and clear the cookie."""
    auth.logout(db, request, response)
    return {"detail": "Logged out"}


# ---------------------------------------------------------------------------
# GET /api/user
# ---------------------------------------------------------------------------


@router.get("/user", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


# ---------------------------------------------------------------------------
# PUT /api/user
# ---------------------------------------------------------------------------


@router.put("/user", response_model=UserResponse)
def update_profile(
    body: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """Edit the caller's own profile fields."""
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No update data provided")

    if "email" in changes:
        owner = auth.credentials.get_by_email(db, changes["email"])
        if owner is not None and owner.id != current_user.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    return auth.credentials.update(db, current_user.id, **changes)


# ---------------------------------------------------------------------------
# POST /api/reset-password
# ---------------------------------------------------------------------------


@router.post("/reset-password")
def reset_password(
    body: ResetPasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """Set a new password for *username*: self-service, or any account for admins."""
    if not body.username or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username and password are required",
        )

    target = auth.credentials.get_by_username(db, body.username)
    if target is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if not is_admin(current_user) and current_user.id != target.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only reset your own password",
        )

    auth.credentials.update(db, target.id, password=auth.hasher.hash(body.password))
    logger.info("Password reset for %r by user id=%d", target.username, current_user.id)
    return {"detail": "Password reset successful"}
