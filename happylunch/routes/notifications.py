from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import Identity, get_current_identity
from ..database import get_db
from ..repositories import notifications as notification_repository
from ..responses import not_found, ok

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("")
def list_notifications(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return ok(
        notifications=notification_repository.find_for_user(db, identity.id),
        unread_count=notification_repository.unread_count(db, identity.id),
    )


@router.put("/read-all")
def mark_all_read(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    updated = notification_repository.mark_all_read(db, identity.id)
    return ok("All notifications marked as read", updated=updated)


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    if not notification_repository.mark_read(db, notification_id, identity.id):
        raise not_found("Notification not found")
    return ok("Notification marked as read")
