import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from .. import schemas
from ..auth import Identity, get_current_identity, get_optional_identity
from ..database import get_db
from ..permissions import authorize, can
from ..realtime import manager
from ..repositories import notifications as notification_repository
from ..repositories import restaurants as restaurant_repository
from ..repositories import reviews as review_repository
from ..repositories import users as user_repository
from ..repositories.common import Outcome
from ..responses import bad_request, created, not_found, ok, pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.get("")
def list_reviews(
    restaurant_id: Optional[int] = None,
    user_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    # Authors see every status on their own profile, everyone else only approved
    show_all = user_id is not None and can(identity, "reviews:list_all_statuses", user_id)
    result = review_repository.find_all(
        db,
        restaurant_id=restaurant_id,
        user_id=user_id,
        status=None if show_all else "approved",
        page=page,
        limit=limit,
    )
    viewer_id = identity.id if identity else None
    return ok(
        reviews=[review_repository.serialize_review(review, viewer_id) for review in result.items],
        pagination=pagination(result),
    )


@router.get("/{review_id}")
def get_review(
    review_id: int,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    review = review_repository.find_by_id(db, review_id)
    if review is None:
        raise not_found("Review not found")
    if review.status != "approved" and not can(identity, "review:view_unpublished", review.user_id):
        raise not_found("Review not found")
    viewer_id = identity.id if identity else None
    return ok(review=review_repository.serialize_review(review, viewer_id))


@router.post("", status_code=201)
def create_review(
    review_in: schemas.ReviewCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    if not restaurant_repository.exists(db, review_in.restaurant_id):
        raise not_found("Restaurant not found")

    review = review_repository.create_review(db, {
        "user_id": identity.id,
        "restaurant_id": review_in.restaurant_id,
        "rating": review_in.rating,
        "comment": review_in.comment.strip() if review_in.comment else review_in.comment,
        "image_urls": review_in.image_urls,
        "dish_names": review_in.dish_names,
        "status": "pending",
    })
    return created(
        "Review created successfully",
        review=review_repository.serialize_review(review, identity.id),
    )


@router.put("/{review_id}")
def update_review(
    review_id: int,
    review_in: schemas.ReviewUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    owner_id = review_repository.get_owner_id(db, review_id)
    if owner_id is None:
        raise not_found("Review not found")
    authorize(identity, "review:update", owner_id)

    changes = review_in.model_dump(exclude_unset=True)
    for field in ("rating", "image_urls", "dish_names"):
        if field in changes and changes[field] is None:
            raise bad_request(f"{field} cannot be null")
    # Author edits go back through moderation
    if changes and identity.id == owner_id and not identity.is_admin:
        changes["status"] = "pending"

    review = review_repository.update_review(db, review_id, changes)
    if review is None:
        raise not_found("Review not found")
    return ok("Review updated successfully", review=review_repository.serialize_review(review, identity.id))


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    owner_id = review_repository.get_owner_id(db, review_id)
    if owner_id is None:
        raise not_found("Review not found")
    authorize(identity, "review:delete", owner_id)

    if not review_repository.delete_review(db, review_id):
        raise not_found("Review not found")
    return ok("Review deleted successfully")


def _record_like(db: Session, review_id: int, identity: Identity) -> Optional[dict]:
    """Store the like and the author's notification; returns the notification payload"""
    if not review_repository.exists(db, review_id):
        raise not_found("Review not found")

    if review_repository.like(db, review_id, identity.id) is Outcome.CONFLICT:
        raise bad_request("Already liked")

    review = review_repository.find_by_id(db, review_id)
    if review is None or review.user_id == identity.id:
        return None
    liker = user_repository.get_user_by_id(db, identity.id)
    return notification_repository.notify_review_liked(db, review, liker)


@router.post("/{review_id}/like")
async def like_review(
    review_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    notification = await run_in_threadpool(_record_like, db, review_id, identity)

    # The like stands even if the push fails
    if notification is not None:
        delivered = await manager.send_notification(notification["user_id"], notification)
        logger.debug("Like notification %s pushed live: %s", notification["id"], delivered)

    return ok("Liked successfully")


@router.delete("/{review_id}/unlike")
def unlike_review(
    review_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    if review_repository.unlike(db, review_id, identity.id) is Outcome.NOT_FOUND:
        raise not_found("Like not found")
    return ok("Unliked successfully")
