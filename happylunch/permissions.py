"""Authorization policies shared by the routers.

Each policy takes the acting identity and the id of the account that owns
(or is the target of) the resource.
"""
from typing import Callable, Dict, Optional

from .auth import Identity
from .responses import bad_request, forbidden


def _owner_or_admin(actor: Identity, owner_id: Optional[int]) -> bool:
    return actor.is_admin or actor.id == owner_id


def _admin_not_self(actor: Identity, target_id: Optional[int]) -> bool:
    return actor.is_admin and actor.id != target_id


POLICIES: Dict[str, Callable[[Identity, Optional[int]], bool]] = {
    "review:update": _owner_or_admin,
    "review:delete": _owner_or_admin,
    "review:view_unpublished": _owner_or_admin,
    "reviews:list_all_statuses": _owner_or_admin,
    "account:block": _admin_not_self,
    "account:change_role": _admin_not_self,
    "account:delete": _admin_not_self,
}

SELF_ACTION_MESSAGES = {
    "account:block": "Cannot block yourself",
    "account:change_role": "Cannot change your own role",
    "account:delete": "Cannot delete yourself",
}


def can(actor: Optional[Identity], action: str, owner_id: Optional[int] = None) -> bool:
    if actor is None:
        return False
    return POLICIES[action](actor, owner_id)


def authorize(actor: Identity, action: str, owner_id: Optional[int] = None):
    """Raise the matching ApiError when the actor may not perform the action"""
    if can(actor, action, owner_id):
        return
    if action in SELF_ACTION_MESSAGES and actor.id == owner_id:
        raise bad_request(SELF_ACTION_MESSAGES[action])
    raise forbidden()
