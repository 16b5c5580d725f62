from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from .common import Outcome

PREVIEW_MENU_ITEMS = 3


def _get(db: Session, user_id: int, restaurant_id: int):
    return db.get(models.Favorite, (user_id, restaurant_id))


def find_by_user(db: Session, user_id: int) -> List[Dict]:
    """Favorited restaurants, most recently added first, with a short menu preview"""
    favorites = (
        db.query(models.Favorite)
        .options(selectinload(models.Favorite.restaurant).selectinload(models.Restaurant.menu_items))
        .filter(models.Favorite.user_id == user_id)
        .order_by(models.Favorite.created_at.desc())
        .all()
    )
    results = []
    for favorite in favorites:
        restaurant = favorite.restaurant
        data = schemas.Restaurant.model_validate(restaurant).model_dump(mode="json")
        data["menu_items"] = [
            schemas.MenuItem.model_validate(item).model_dump(mode="json")
            for item in restaurant.menu_items[:PREVIEW_MENU_ITEMS]
        ]
        data["favorited_at"] = favorite.created_at.isoformat()
        results.append(data)
    return results


def add(db: Session, user_id: int, restaurant_id: int) -> Outcome:
    if _get(db, user_id, restaurant_id) is not None:
        return Outcome.CONFLICT
    db.add(models.Favorite(user_id=user_id, restaurant_id=restaurant_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return Outcome.CONFLICT
    return Outcome.OK


def remove(db: Session, user_id: int, restaurant_id: int) -> Outcome:
    favorite = _get(db, user_id, restaurant_id)
    if favorite is None:
        return Outcome.NOT_FOUND
    db.delete(favorite)
    db.commit()
    return Outcome.OK


def is_favorited(db: Session, user_id: int, restaurant_id: int) -> bool:
    return _get(db, user_id, restaurant_id) is not None


def toggle(db: Session, user_id: int, restaurant_id: int) -> bool:
    """Add the favorite if missing, remove it otherwise; returns the new state"""
    if remove(db, user_id, restaurant_id) is Outcome.OK:
        return False
    add(db, user_id, restaurant_id)
    return True


def count_by_restaurant(db: Session, restaurant_id: int) -> int:
    return db.query(models.Favorite).filter(models.Favorite.restaurant_id == restaurant_id).count()


def count_by_user(db: Session, user_id: int) -> int:
    return db.query(models.Favorite).filter(models.Favorite.user_id == user_id).count()


def get_stats(db: Session) -> Dict:
    favorite_count = func.count(models.Favorite.user_id)
    top = (
        db.query(models.Restaurant, favorite_count)
        .join(models.Favorite, models.Favorite.restaurant_id == models.Restaurant.id)
        .group_by(models.Restaurant.id)
        .order_by(favorite_count.desc())
        .limit(5)
        .all()
    )
    return {
        "total": db.query(models.Favorite).count(),
        "most_favorited": [
            {
                "restaurant": schemas.RestaurantSummary.model_validate(restaurant).model_dump(mode="json"),
                "favorite_count": count,
            }
            for restaurant, count in top
        ],
    }
