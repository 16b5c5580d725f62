from typing import Dict, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from .common import Outcome, Page, apply_changes, paginate

_LOAD_OPTIONS = (
    selectinload(models.Review.user),
    selectinload(models.Review.restaurant),
    selectinload(models.Review.likes),
)


def serialize_review(review: models.Review, viewer_id: Optional[int] = None, detail: bool = True) -> Dict:
    """Dump a review with its like count and whether the viewer liked it"""
    schema = schemas.ReviewDetail if detail else schemas.Review
    data = schema.model_validate(review).model_dump(mode="json")
    data["like_count"] = len(review.likes)
    data["liked_by_viewer"] = viewer_id is not None and any(
        like.user_id == viewer_id for like in review.likes
    )
    return data


def find_all(
    db: Session,
    restaurant_id: Optional[int] = None,
    user_id: Optional[int] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> Page:
    query = db.query(models.Review).options(*_LOAD_OPTIONS)
    if restaurant_id is not None:
        query = query.filter(models.Review.restaurant_id == restaurant_id)
    if user_id is not None:
        query = query.filter(models.Review.user_id == user_id)
    if status:
        query = query.filter(models.Review.status == status)
    query = query.order_by(models.Review.created_at.desc(), models.Review.id.desc())
    return paginate(query, page, limit)


def find_by_id(db: Session, review_id: int) -> Optional[models.Review]:
    return db.query(models.Review).options(*_LOAD_OPTIONS).filter(models.Review.id == review_id).first()


def exists(db: Session, review_id: int) -> bool:
    return db.query(models.Review.id).filter(models.Review.id == review_id).first() is not None


def is_owner(db: Session, review_id: int, user_id: int) -> bool:
    owner_id = db.query(models.Review.user_id).filter(models.Review.id == review_id).scalar()
    return owner_id is not None and owner_id == user_id


def get_owner_id(db: Session, review_id: int) -> Optional[int]:
    return db.query(models.Review.user_id).filter(models.Review.id == review_id).scalar()


def recompute_restaurant_rating(db: Session, restaurant_id: int):
    """Store the mean of the restaurant's approved ratings, 0 when there are none"""
    average = (
        db.query(func.avg(models.Review.rating))
        .filter(models.Review.restaurant_id == restaurant_id, models.Review.status == "approved")
        .scalar()
    )
    restaurant = db.get(models.Restaurant, restaurant_id)
    if restaurant is not None:
        restaurant.rating = round(float(average), 1) if average is not None else 0.0


def create_review(db: Session, review_data: Dict) -> models.Review:
    review = models.Review(**review_data)
    db.add(review)
    db.flush()
    recompute_restaurant_rating(db, review.restaurant_id)
    db.commit()
    return find_by_id(db, review.id)


def update_review(db: Session, review_id: int, changes: Dict) -> Optional[models.Review]:
    review = db.get(models.Review, review_id)
    if review is None:
        return None
    apply_changes(review, changes)
    db.flush()
    recompute_restaurant_rating(db, review.restaurant_id)
    db.commit()
    return find_by_id(db, review_id)


def update_status(db: Session, review_id: int, status: str) -> Optional[models.Review]:
    return update_review(db, review_id, {"status": status})


def delete_review(db: Session, review_id: int) -> bool:
    review = db.get(models.Review, review_id)
    if review is None:
        return False
    restaurant_id = review.restaurant_id
    db.delete(review)
    db.flush()
    recompute_restaurant_rating(db, restaurant_id)
    db.commit()
    return True


def like(db: Session, review_id: int, user_id: int) -> Outcome:
    existing = (
        db.query(models.ReviewLike)
        .filter(models.ReviewLike.review_id == review_id, models.ReviewLike.user_id == user_id)
        .first()
    )
    if existing is not None:
        return Outcome.CONFLICT

    db.add(models.ReviewLike(review_id=review_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same like first
        db.rollback()
        return Outcome.CONFLICT
    return Outcome.OK


def unlike(db: Session, review_id: int, user_id: int) -> Outcome:
    existing = (
        db.query(models.ReviewLike)
        .filter(models.ReviewLike.review_id == review_id, models.ReviewLike.user_id == user_id)
        .first()
    )
    if existing is None:
        return Outcome.NOT_FOUND
    db.delete(existing)
    db.commit()
    return Outcome.OK


def get_stats(db: Session) -> Dict:
    average = db.query(func.avg(models.Review.rating)).scalar()
    by_status = dict(
        db.query(models.Review.status, func.count(models.Review.id))
        .group_by(models.Review.status)
        .all()
    )
    return {
        "total": db.query(models.Review).count(),
        "total_likes": db.query(models.ReviewLike).count(),
        "average_rating": round(float(average or 0), 2),
        "by_status": {status: by_status.get(status, 0) for status in models.REVIEW_STATUSES},
    }
