from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from .. import models, schemas

LIKE_REVIEW = "like_review"
LIKE_REVIEW_MESSAGE = "{name} liked your review"


def serialize_notification(notification: models.Notification, restaurant: Optional[models.Restaurant] = None) -> Dict:
    data = schemas.Notification.model_validate(notification).model_dump(mode="json")
    if restaurant is not None:
        data["restaurant"] = schemas.RestaurantSummary.model_validate(restaurant).model_dump(mode="json")
    return data


def find_for_user(db: Session, user_id: int, limit: int = 20) -> List[Dict]:
    """Latest notifications for the account, with the liked review's restaurant"""
    rows = (
        db.query(models.Notification, models.Restaurant)
        .outerjoin(
            models.Review,
            (models.Notification.type == LIKE_REVIEW)
            & (models.Review.id == models.Notification.reference_id),
        )
        .outerjoin(models.Restaurant, models.Restaurant.id == models.Review.restaurant_id)
        .filter(models.Notification.user_id == user_id)
        .order_by(models.Notification.created_at.desc(), models.Notification.id.desc())
        .limit(limit)
        .all()
    )
    return [serialize_notification(notification, restaurant) for notification, restaurant in rows]


def unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(models.Notification)
        .filter(models.Notification.user_id == user_id, models.Notification.is_read.is_(False))
        .count()
    )


def create_notification(db: Session, notification_data: Dict) -> models.Notification:
    notification = models.Notification(**notification_data)
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def notify_review_liked(db: Session, review: models.Review, liker: models.User) -> Dict:
    """Persist a like notification for the review's author and return its payload"""
    notification = create_notification(db, {
        "user_id": review.user_id,
        "type": LIKE_REVIEW,
        "reference_id": review.id,
        "message": LIKE_REVIEW_MESSAGE.format(name=liker.name if liker else "Someone"),
        "is_read": False,
    })
    return serialize_notification(notification, review.restaurant)


def mark_read(db: Session, notification_id: int, user_id: int) -> bool:
    notification = (
        db.query(models.Notification)
        .filter(models.Notification.id == notification_id, models.Notification.user_id == user_id)
        .first()
    )
    if notification is None:
        return False
    notification.is_read = True
    db.commit()
    return True


def mark_all_read(db: Session, user_id: int) -> int:
    updated = (
        db.query(models.Notification)
        .filter(models.Notification.user_id == user_id, models.Notification.is_read.is_(False))
        .update({models.Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated
