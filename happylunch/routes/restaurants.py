from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Identity, get_admin_identity, get_optional_identity
from ..database import get_db
from ..repositories import menu as menu_repository
from ..repositories import restaurants as restaurant_repository
from ..responses import bad_request, created, not_found, ok, pagination

router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])

Period = Literal["morning", "afternoon", "lateafternoon", "evening"]


@router.get("")
def list_restaurants(
    search: Optional[str] = None,
    cuisine: Optional[List[str]] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    period: Optional[List[Period]] = Query(None),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    max_distance_km: Optional[float] = Query(None, gt=0),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    if (lat is None) != (lng is None):
        raise bad_request("lat and lng must be given together")
    if max_distance_km is not None and lat is None:
        raise bad_request("max_distance_km requires lat and lng")

    result = restaurant_repository.find_all(
        db,
        search=search,
        cuisines=cuisine,
        min_rating=min_rating,
        periods=period,
        latitude=lat,
        longitude=lng,
        max_distance_km=max_distance_km,
        page=page,
        limit=limit,
    )
    viewer_id = identity.id if identity else None
    return ok(
        restaurants=[
            restaurant_repository.serialize_restaurant(restaurant, viewer_id, distance)
            for restaurant, distance in result.items
        ],
        pagination=pagination(result),
    )


@router.get("/{restaurant_id}")
def get_restaurant(
    restaurant_id: int,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    restaurant = restaurant_repository.find_by_id(db, restaurant_id)
    if restaurant is None:
        raise not_found("Restaurant not found")
    viewer_id = identity.id if identity else None
    return ok(restaurant=restaurant_repository.serialize_restaurant(restaurant, viewer_id))


@router.get("/{restaurant_id}/menu")
def get_restaurant_menu(restaurant_id: int, db: Session = Depends(get_db)):
    restaurant = restaurant_repository.find_by_id(db, restaurant_id)
    if restaurant is None:
        raise not_found("Restaurant not found")
    return ok(
        restaurant={"id": restaurant.id, "name": restaurant.name},
        menu_items=[
            schemas.MenuItem.model_validate(item).model_dump(mode="json")
            for item in menu_repository.find_by_restaurant(db, restaurant_id)
        ],
    )


@router.post("", status_code=201)
def create_restaurant(
    restaurant_in: schemas.RestaurantCreate,
    identity: Identity = Depends(get_admin_identity),
    db: Session = Depends(get_db),
):
    restaurant = restaurant_repository.create_restaurant(db, restaurant_in.model_dump())
    return created(
        "Restaurant created successfully",
        restaurant=restaurant_repository.serialize_restaurant(restaurant),
    )


@router.put("/{restaurant_id}")
def update_restaurant(
    restaurant_id: int,
    restaurant_in: schemas.RestaurantUpdate,
    identity: Identity = Depends(get_admin_identity),
    db: Session = Depends(get_db),
):
    changes = restaurant_in.model_dump(exclude_unset=True)
    for field in ("name", "address"):
        if field in changes and changes[field] is None:
            raise bad_request(f"{field} cannot be empty")

    restaurant = restaurant_repository.update_restaurant(db, restaurant_id, changes)
    if restaurant is None:
        raise not_found("Restaurant not found")
    return ok(
        "Restaurant updated successfully",
        restaurant=restaurant_repository.serialize_restaurant(restaurant, identity.id),
    )


@router.delete("/{restaurant_id}")
def delete_restaurant(
    restaurant_id: int,
    identity: Identity = Depends(get_admin_identity),
    db: Session = Depends(get_db),
):
    if not restaurant_repository.delete_restaurant(db, restaurant_id):
        raise not_found("Restaurant not found")
    return ok("Restaurant deleted successfully")
