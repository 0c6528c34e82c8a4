"""
DevCamper Backend — Ownership Policy
======================================

What:  The one rule deciding who may change a bootcamp.
How:   can_mutate() answers the question for a loaded record;
       mutable_by() expresses the same rule as a SQL criterion so
       UPDATE/DELETE statements can apply it atomically with the id filter.

Rule:
    can_mutate(user, bootcamp) = user.id == bootcamp.user_id or user.role == "admin"

Update, delete and photo upload all go through this module; nothing else
compares owner ids.
"""

from sqlalchemy import ColumnElement, true

from devcamper.models.bootcamp import Bootcamp
from devcamper.models.user import ADMIN_ROLE, User


def is_admin(user: User) -> bool:
    return user.role == ADMIN_ROLE


def can_mutate(user: User, bootcamp: Bootcamp) -> bool:
    """True when `user` owns `bootcamp` or is an admin."""
    return is_admin(user) or bootcamp.user_id == user.id


def mutable_by(user: User) -> ColumnElement[bool]:
    """SQL criterion selecting only the bootcamps `user` may change."""
    if is_admin(user):
        return true()
    return Bootcamp.user_id == user.id
