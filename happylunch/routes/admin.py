import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Identity, get_admin_identity
from ..database import get_db
from ..permissions import authorize
from ..repositories import favorites as favorite_repository
from ..repositories import menu as menu_repository
from ..repositories import restaurants as restaurant_repository
from ..repositories import reviews as review_repository
from ..repositories import users as user_repository
from ..responses import bad_request, created, not_found, ok, pagination
from .auth import serialize_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(get_admin_identity)],
)


# Users

@router.get("/users")
def list_users(
    search: Optional[str] = None,
    role: Optional[Literal["user", "admin"]] = None,
    is_blocked: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    result = user_repository.find_all(
        db, search=search, role=role, is_blocked=is_blocked, page=page, limit=limit
    )
    return ok(
        users=[serialize_user(user) for user in result.items],
        pagination=pagination(result),
    )


@router.get("/users/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = user_repository.get_user_by_id(db, user_id)
    if user is None:
        raise not_found("User not found")
    return ok(user=serialize_user(user))


@router.put("/users/{user_id}/block")
def block_user(
    user_id: int,
    identity: Identity = Depends(get_admin_identity),
    db: Session = Depends(get_db),
):
    authorize(identity, "account:block", user_id)
    user = user_repository.set_blocked(db, user_id, True)
    if user is None:
        raise not_found("User not found")
    logger.info("Admin %s blocked user %s", identity.id, user_id)
    return ok("User blocked successfully", user=serialize_user(user))


@router.put("/users/{user_id}/unblock")
def unblock_user(user_id: int, db: Session = Depends(get_db)):
    user = user_repository.set_blocked(db, user_id, False)
    if user is None:
        raise not_found("User not found")
    return ok("User unblocked successfully", user=serialize_user(user))


@router.put("/users/{user_id}/role")
def update_user_role(
    user_id: int,
    role_in: schemas.RoleUpdate,
    identity: Identity = Depends(get_admin_identity),
    db: Session = Depends(get_db),
):
    authorize(identity, "account:change_role", user_id)
    user = user_repository.update_user(db, user_id, {"role": role_in.role})
    if user is None:
        raise not_found("User not found")
    logger.info("Admin %s set role of user %s to %s", identity.id, user_id, role_in.role)
    return ok("User role updated successfully", user=serialize_user(user))


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    identity: Identity = Depends(get_admin_identity),
    db: Session = Depends(get_db),
):
    authorize(identity, "account:delete", user_id)
    if not user_repository.delete_user(db, user_id):
        raise not_found("User not found")
    logger.info("Admin %s deleted user %s", identity.id, user_id)
    return ok("User deleted successfully")


# Reviews

@router.get("/reviews")
def list_reviews(
    status: Optional[Literal["pending", "approved", "rejected"]] = None,
    restaurant_id: Optional[int] = None,
    user_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    result = review_repository.find_all(
        db, restaurant_id=restaurant_id, user_id=user_id, status=status, page=page, limit=limit
    )
    return ok(
        reviews=[review_repository.serialize_review(review) for review in result.items],
        pagination=pagination(result),
    )


@router.put("/reviews/{review_id}/status")
def update_review_status(
    review_id: int,
    status_in: schemas.ReviewStatusUpdate,
    db: Session = Depends(get_db),
):
    review = review_repository.update_status(db, review_id, status_in.status)
    if review is None:
        raise not_found("Review not found")
    return ok(f"Review {status_in.status} successfully", review=review_repository.serialize_review(review))


@router.delete("/reviews/{review_id}")
def delete_review(review_id: int, db: Session = Depends(get_db)):
    if not review_repository.delete_review(db, review_id):
        raise not_found("Review not found")
    return ok("Review deleted successfully")


# Menu items

@router.get("/menu-items")
def list_menu_items(
    restaurant_id: Optional[int] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    result = menu_repository.find_all(
        db, restaurant_id=restaurant_id, search=search, page=page, limit=limit
    )
    return ok(
        menu_items=[menu_repository.serialize_menu_item(item) for item in result.items],
        pagination=pagination(result),
    )


@router.get("/menu-items/{item_id}")
def get_menu_item(item_id: int, db: Session = Depends(get_db)):
    item = menu_repository.find_by_id(db, item_id)
    if item is None:
        raise not_found("Menu item not found")
    return ok(menu_item=menu_repository.serialize_menu_item(item))


@router.post("/menu-items", status_code=201)
def create_menu_item(item_in: schemas.MenuItemCreate, db: Session = Depends(get_db)):
    if not restaurant_repository.exists(db, item_in.restaurant_id):
        raise not_found("Restaurant not found")
    item = menu_repository.create_menu_item(db, item_in.model_dump())
    return created("Menu item created successfully", menu_item=menu_repository.serialize_menu_item(item))


@router.put("/menu-items/{item_id}")
def update_menu_item(item_id: int, item_in: schemas.MenuItemUpdate, db: Session = Depends(get_db)):
    changes = item_in.model_dump(exclude_unset=True)
    for field in ("name", "price"):
        if field in changes and changes[field] is None:
            raise bad_request(f"{field} cannot be null")
    item = menu_repository.update_menu_item(db, item_id, changes)
    if item is None:
        raise not_found("Menu item not found")
    return ok("Menu item updated successfully", menu_item=menu_repository.serialize_menu_item(item))


@router.delete("/menu-items/{item_id}")
def delete_menu_item(item_id: int, db: Session = Depends(get_db)):
    if not menu_repository.delete_menu_item(db, item_id):
        raise not_found("Menu item not found")
    return ok("Menu item deleted successfully")


# Statistics

@router.get("/stats/users")
def user_stats(db: Session = Depends(get_db)):
    return ok(stats=user_repository.get_stats(db))


@router.get("/stats/reviews")
def review_stats(db: Session = Depends(get_db)):
    return ok(stats=review_repository.get_stats(db))


@router.get("/stats/menu")
def menu_stats(db: Session = Depends(get_db)):
    return ok(stats=menu_repository.get_stats(db))


@router.get("/stats/favorites")
def favorite_stats(db: Session = Depends(get_db)):
    return ok(stats=favorite_repository.get_stats(db))
