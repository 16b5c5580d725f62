from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from .common import Page, apply_changes, paginate


def serialize_menu_item(item: models.MenuItem) -> Dict:
    return schemas.MenuItemDetail.model_validate(item).model_dump(mode="json")


def find_all(
    db: Session,
    restaurant_id: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
) -> Page:
    query = db.query(models.MenuItem).options(selectinload(models.MenuItem.restaurant))
    if restaurant_id is not None:
        query = query.filter(models.MenuItem.restaurant_id == restaurant_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            models.MenuItem.name.ilike(pattern),
            models.MenuItem.description.ilike(pattern),
        ))
    query = query.order_by(
        models.MenuItem.restaurant_id.asc(),
        models.MenuItem.created_at.desc(),
        models.MenuItem.id.desc(),
    )
    return paginate(query, page, limit)


def find_by_id(db: Session, item_id: int) -> Optional[models.MenuItem]:
    return (
        db.query(models.MenuItem)
        .options(selectinload(models.MenuItem.restaurant))
        .filter(models.MenuItem.id == item_id)
        .first()
    )


def find_by_restaurant(db: Session, restaurant_id: int) -> List[models.MenuItem]:
    return (
        db.query(models.MenuItem)
        .filter(models.MenuItem.restaurant_id == restaurant_id)
        .order_by(models.MenuItem.created_at.desc(), models.MenuItem.id.desc())
        .all()
    )


def create_menu_item(db: Session, item_data: Dict) -> models.MenuItem:
    item = models.MenuItem(**item_data)
    db.add(item)
    db.commit()
    return find_by_id(db, item.id)


def update_menu_item(db: Session, item_id: int, changes: Dict) -> Optional[models.MenuItem]:
    item = db.get(models.MenuItem, item_id)
    if item is None:
        return None
    apply_changes(item, changes)
    db.commit()
    return find_by_id(db, item_id)


def delete_menu_item(db: Session, item_id: int) -> bool:
    item = db.get(models.MenuItem, item_id)
    if item is None:
        return False
    db.delete(item)
    db.commit()
    return True


def count_by_restaurant(db: Session, restaurant_id: int) -> int:
    return db.query(models.MenuItem).filter(models.MenuItem.restaurant_id == restaurant_id).count()


def get_stats(db: Session) -> Dict:
    average_price = db.query(func.avg(models.MenuItem.price)).scalar()
    item_count = func.count(models.MenuItem.id)
    top = (
        db.query(models.Restaurant, item_count)
        .join(models.MenuItem, models.MenuItem.restaurant_id == models.Restaurant.id)
        .group_by(models.Restaurant.id)
        .order_by(item_count.desc())
        .limit(5)
        .all()
    )
    return {
        "total": db.query(models.MenuItem).count(),
        "average_price": round(float(average_price or 0), 2),
        "top_restaurants": [
            {
                "restaurant": schemas.RestaurantSummary.model_validate(restaurant).model_dump(mode="json"),
                "menu_item_count": count,
            }
            for restaurant, count in top
        ],
    }
