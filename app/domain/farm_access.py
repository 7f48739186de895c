from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class FarmAction(str, Enum):
    """Actions an actor can request on a farm-scoped resource."""

    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    COMPLETE = "complete"
    DELETE = "delete"
    MANAGE = "manage"


ADMIN_ROLE = "admin"


@dataclass(frozen=True, slots=True)
class Actor:
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @classmethod
    def from_user(cls, user) -> Actor:
        return cls(id=user.id, role=user.role.name)


@dataclass(frozen=True, slots=True)
class FarmMembership:
    """The owner/managers/workers reference sets of a single farm."""

    owner_id: int
    manager_ids: frozenset[int] = field(default_factory=frozenset)
    worker_ids: frozenset[int] = field(default_factory=frozenset)

    @classmethod
    def from_farm(cls, farm) -> FarmMembership:
        return cls(
            owner_id=farm.owner_id,
            manager_ids=frozenset(user.id for user in farm.managers),
            worker_ids=frozenset(user.id for user in farm.workers),
        )

    def is_owner(self, user_id: int) -> bool:
        return self.owner_id == user_id

    def is_manager(self, user_id: int) -> bool:
        return user_id in self.manager_ids

    def is_worker(self, user_id: int) -> bool:
        return user_id in self.worker_ids

    def is_member(self, user_id: int) -> bool:
        return self.is_owner(user_id) or self.is_manager(user_id) or self.is_worker(user_id)


def authorize(
    actor: Actor,
    membership: FarmMembership,
    action: FarmAction,
    assignee_ids: Iterable[int] = (),
) -> bool:
    """Decide whether ``actor`` may perform ``action`` on a farm.

    Tiers (any true branch grants access):
    - admin role: every action, regardless of membership
    - VIEW: owner, manager or worker
    - CREATE / UPDATE: owner or manager
    - COMPLETE: owner, manager, or one of ``assignee_ids``
    - DELETE / MANAGE: owner only

    Pure function: never raises and never touches the database. Whether the
    farm exists is the caller's concern and must be checked first.
    """
    if actor.is_admin:
        return True

    user_id = actor.id
    if action is FarmAction.VIEW:
        return membership.is_member(user_id)
    if action in (FarmAction.CREATE, FarmAction.UPDATE):
        return membership.is_owner(user_id) or membership.is_manager(user_id)
    if action is FarmAction.COMPLETE:
        return (
            membership.is_owner(user_id)
            or membership.is_manager(user_id)
            or user_id in set(assignee_ids)
        )
    if action in (FarmAction.DELETE, FarmAction.MANAGE):
        return membership.is_owner(user_id)
    return False
