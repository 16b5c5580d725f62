from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Identity, get_current_identity
from ..database import get_db
from ..repositories import favorites as favorite_repository
from ..repositories import restaurants as restaurant_repository
from ..repositories.common import Outcome
from ..responses import bad_request, created, not_found, ok

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


@router.get("")
def list_favorites(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return ok(favorites=favorite_repository.find_by_user(db, identity.id))


@router.post("", status_code=201)
def add_favorite(
    favorite_in: schemas.FavoriteCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    if not restaurant_repository.exists(db, favorite_in.restaurant_id):
        raise not_found("Restaurant not found")
    if favorite_repository.add(db, identity.id, favorite_in.restaurant_id) is Outcome.CONFLICT:
        raise bad_request("Already in favorites")
    return created("Added to favorites")


@router.delete("/{restaurant_id}")
def remove_favorite(
    restaurant_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    if favorite_repository.remove(db, identity.id, restaurant_id) is Outcome.NOT_FOUND:
        raise not_found("Favorite not found")
    return ok("Removed from favorites")


@router.get("/check/{restaurant_id}")
def check_favorite(
    restaurant_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return ok(is_favorite=favorite_repository.is_favorited(db, identity.id, restaurant_id))


@router.post("/{restaurant_id}/toggle")
def toggle_favorite(
    restaurant_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    if not restaurant_repository.exists(db, restaurant_id):
        raise not_found("Restaurant not found")
    is_favorite = favorite_repository.toggle(db, identity.id, restaurant_id)
    return ok(
        "Added to favorites" if is_favorite else "Removed from favorites",
        action="added" if is_favorite else "removed",
        is_favorite=is_favorite,
    )
