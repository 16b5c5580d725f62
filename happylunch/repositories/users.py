import logging
from datetime import datetime
from typing import Dict, Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from . import reviews
from .common import Page, apply_changes, paginate

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email.lower()).first()


def get_user_by_id(db: Session, user_id: int) -> Optional[models.User]:
    return db.get(models.User, user_id)


def create_user(db: Session, user_data: Dict) -> Optional[models.User]:
    """Insert the account; None when the email is already taken"""
    user_data = dict(user_data, email=user_data["email"].lower())
    user = models.User(**user_data)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent registration took the email first
        db.rollback()
        return None
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, changes: Dict) -> Optional[models.User]:
    user = get_user_by_id(db, user_id)
    if user is None:
        return None
    apply_changes(user, changes)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int) -> bool:
    """Delete the account with its reviews and refresh the ratings they fed"""
    user = get_user_by_id(db, user_id)
    if user is None:
        return False
    restaurant_ids = {review.restaurant_id for review in user.reviews}
    db.delete(user)
    db.flush()
    for restaurant_id in restaurant_ids:
        reviews.recompute_restaurant_rating(db, restaurant_id)
    db.commit()
    return True


def find_all(
    db: Session,
    search: Optional[str] = None,
    role: Optional[str] = None,
    is_blocked: Optional[bool] = None,
    page: int = 1,
    limit: int = 20,
) -> Page:
    query = db.query(models.User)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(models.User.name.ilike(pattern), models.User.email.ilike(pattern)))
    if role:
        query = query.filter(models.User.role == role)
    if is_blocked is not None:
        query = query.filter(models.User.is_blocked == is_blocked)
    query = query.order_by(models.User.created_at.desc(), models.User.id.desc())
    return paginate(query, page, limit)


def set_blocked(db: Session, user_id: int, is_blocked: bool) -> Optional[models.User]:
    return update_user(db, user_id, {"is_blocked": is_blocked})


def touch_last_active(db: Session, user: models.User):
    user.last_active_at = datetime.utcnow()
    db.commit()


def get_stats(db: Session) -> Dict[str, int]:
    query = db.query(models.User)
    return {
        "total": query.count(),
        "active": query.filter(models.User.is_blocked.is_(False)).count(),
        "blocked": query.filter(models.User.is_blocked.is_(True)).count(),
        "admins": query.filter(models.User.role == "admin").count(),
    }


def promote_admins(db: Session, emails: Iterable[str]) -> int:
    """Grant the admin role to existing accounts whose email is listed"""
    emails = [email.lower() for email in emails]
    if not emails:
        return 0
    users = (
        db.query(models.User)
        .filter(models.User.email.in_(emails), models.User.role != "admin")
        .all()
    )
    for user in users:
        user.role = "admin"
        logger.info("Granted admin role to %s", user.email)
    db.commit()
    return len(users)
