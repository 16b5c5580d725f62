import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import (
    Identity,
    create_access_token,
    get_current_identity,
    get_password_hash,
    verify_password,
)
from ..config import settings
from ..database import get_db
from ..repositories import users as user_repository
from ..responses import bad_request, created, forbidden, not_found, ok, unauthorized

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def serialize_user(user) -> dict:
    return schemas.UserResponse.model_validate(user).model_dump(mode="json")


@router.post("/register", status_code=201)
def register(user_in: schemas.UserCreate, db: Session = Depends(get_db)):
    # Check if user already exists
    if user_repository.get_user_by_email(db, user_in.email):
        raise bad_request("Email already registered")

    email = user_in.email.lower()
    user = user_repository.create_user(db, {
        "email": email,
        "password_hash": get_password_hash(user_in.password),
        "name": user_in.name.strip(),
        "account_type": user_in.account_type,
        "address": user_in.address,
        "role": "admin" if email in settings.admin_emails else "user",
    })
    if user is None:
        raise bad_request("Email already registered")
    logger.info("Registered account %s", user.id)

    return created(
        "User registered successfully",
        token=create_access_token(user),
        user=serialize_user(user),
    )


@router.post("/login")
def login(credentials: schemas.UserLogin, db: Session = Depends(get_db)):
    user = user_repository.get_user_by_email(db, credentials.email)
    if not user or not verify_password(credentials.password, user.password_hash):
        raise unauthorized("Invalid credentials")
    if user.is_blocked:
        raise forbidden("Account is blocked")

    user_repository.touch_last_active(db, user)
    return ok(
        "Login successful",
        token=create_access_token(user),
        user=serialize_user(user),
    )


@router.get("/me")
def me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    user = user_repository.get_user_by_id(db, identity.id)
    if user is None:
        raise not_found("User not found")
    return ok(user=serialize_user(user))


@router.put("/change-password")
def change_password(
    passwords: schemas.PasswordChange,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user = user_repository.get_user_by_id(db, identity.id)
    if user is None:
        raise not_found("User not found")
    if not verify_password(passwords.current_password, user.password_hash):
        raise unauthorized("Current password is incorrect")

    user_repository.update_user(db, user.id, {"password_hash": get_password_hash(passwords.new_password)})
    return ok("Password changed successfully")


@router.put("/profile")
def update_profile(
    profile: schemas.ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    changes = profile.model_dump(exclude_unset=True)
    # Name and avatar cannot be cleared, only replaced
    for field in ("name", "avatar_url"):
        if not changes.get(field):
            changes.pop(field, None)

    user = user_repository.update_user(db, identity.id, changes)
    if user is None:
        raise not_found("User not found")
    return ok("Profile updated successfully", user=serialize_user(user))
