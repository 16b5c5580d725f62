from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..geo import haversine_distance, is_open_during
from .common import Page, apply_changes, paginate, paginate_list
from .reviews import serialize_review

_LOAD_OPTIONS = (
    selectinload(models.Restaurant.menu_items),
    selectinload(models.Restaurant.approved_reviews).selectinload(models.Review.user),
    selectinload(models.Restaurant.approved_reviews).selectinload(models.Review.likes),
)


def serialize_restaurant(
    restaurant: models.Restaurant,
    viewer_id: Optional[int] = None,
    distance_km: Optional[float] = None,
) -> Dict:
    """Dump a restaurant with its menu and its approved reviews"""
    data = schemas.Restaurant.model_validate(restaurant).model_dump(mode="json")
    data["menu_items"] = [
        schemas.MenuItem.model_validate(item).model_dump(mode="json")
        for item in restaurant.menu_items
    ]
    data["reviews"] = [
        serialize_review(review, viewer_id, detail=False)
        for review in restaurant.approved_reviews
    ]
    if distance_km is not None:
        data["distance_km"] = round(distance_km, 2)
    return data


def find_all(
    db: Session,
    search: Optional[str] = None,
    cuisines: Optional[List[str]] = None,
    min_rating: Optional[float] = None,
    periods: Optional[List[str]] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    max_distance_km: Optional[float] = None,
    page: int = 1,
    limit: int = 10,
) -> Page:
    """List restaurants.

    Items of the returned page are ``(restaurant, distance_km)`` pairs; the
    distance is ``None`` unless a location was given, in which case the list
    is ordered nearest first.
    """
    query = db.query(models.Restaurant)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            models.Restaurant.name.ilike(pattern),
            models.Restaurant.address.ilike(pattern),
            models.Restaurant.cuisine_type.ilike(pattern),
        ))
    if cuisines:
        query = query.filter(or_(*[
            models.Restaurant.cuisine_type.ilike(f"%{cuisine}%") for cuisine in cuisines
        ]))
    if min_rating is not None:
        query = query.filter(models.Restaurant.rating >= min_rating)
    query = query.order_by(models.Restaurant.created_at.desc(), models.Restaurant.id.desc())

    has_location = latitude is not None and longitude is not None
    if not periods and not has_location:
        result = paginate(query.options(*_LOAD_OPTIONS), page, limit)
        result.items = [(restaurant, None) for restaurant in result.items]
        return result

    # Opening hours and distance are evaluated in Python
    rows = []
    for restaurant in query.all():
        if periods and not any(is_open_during(restaurant.opening_hours, p) for p in periods):
            continue
        distance = None
        if has_location:
            if restaurant.latitude is None or restaurant.longitude is None:
                if max_distance_km is not None:
                    continue
            else:
                distance = haversine_distance(
                    latitude, longitude, restaurant.latitude, restaurant.longitude
                )
                if max_distance_km is not None and distance > max_distance_km:
                    continue
        rows.append((restaurant, distance))

    if has_location:
        # Restaurants without coordinates go last
        rows.sort(key=lambda row: (row[1] is None, row[1] or 0.0))
    result = paginate_list(rows, page, limit)

    # Only the rows on this page need their menu and reviews
    page_ids = [restaurant.id for restaurant, _ in result.items]
    loaded = {
        restaurant.id: restaurant
        for restaurant in (
            db.query(models.Restaurant)
            .options(*_LOAD_OPTIONS)
            .filter(models.Restaurant.id.in_(page_ids))
            .all()
        )
    }
    result.items = [(loaded[restaurant.id], distance) for restaurant, distance in result.items]
    return result


def find_by_id(db: Session, restaurant_id: int) -> Optional[models.Restaurant]:
    return (
        db.query(models.Restaurant)
        .options(*_LOAD_OPTIONS)
        .filter(models.Restaurant.id == restaurant_id)
        .first()
    )


def exists(db: Session, restaurant_id: int) -> bool:
    return db.query(models.Restaurant.id).filter(models.Restaurant.id == restaurant_id).first() is not None


def create_restaurant(db: Session, restaurant_data: Dict) -> models.Restaurant:
    restaurant = models.Restaurant(**restaurant_data)
    db.add(restaurant)
    db.commit()
    return find_by_id(db, restaurant.id)


def update_restaurant(db: Session, restaurant_id: int, changes: Dict) -> Optional[models.Restaurant]:
    restaurant = db.get(models.Restaurant, restaurant_id)
    if restaurant is None:
        return None
    apply_changes(restaurant, changes)
    db.commit()
    return find_by_id(db, restaurant_id)


def delete_restaurant(db: Session, restaurant_id: int) -> bool:
    restaurant = db.get(models.Restaurant, restaurant_id)
    if restaurant is None:
        return False
    db.delete(restaurant)
    db.commit()
    return True
