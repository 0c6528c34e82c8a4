"""
DevCamper Backend — Ownership Policy Tests
============================================

can_mutate() truth table, and mutable_by() rendered to SQL.
"""

from sqlalchemy.dialects import sqlite

from devcamper.models.user import ADMIN_ROLE, PUBLISHER_ROLE, USER_ROLE
from devcamper.policies import can_mutate, is_admin, mutable_by


class TestCanMutate:

    def test_owner_may_mutate(self, make_user, make_bootcamp):
        owner = make_user(PUBLISHER_ROLE)
        assert can_mutate(owner, make_bootcamp(owner)) is True

    def test_other_publisher_may_not(self, make_user, make_bootcamp):
        owner = make_user(PUBLISHER_ROLE)
        other = make_user(PUBLISHER_ROLE)
        assert can_mutate(other, make_bootcamp(owner)) is False

    def test_admin_may_mutate_any(self, make_user, make_bootcamp):
        owner = make_user(PUBLISHER_ROLE)
        admin = make_user(ADMIN_ROLE)
        assert can_mutate(admin, make_bootcamp(owner)) is True

    def test_plain_user_owner_still_owner(self, make_user, make_bootcamp):
        """The role gate lives in the route; the policy only looks at ownership."""
        owner = make_user(USER_ROLE)
        assert can_mutate(owner, make_bootcamp(owner)) is True


class TestMutableBy:

    @staticmethod
    def _sql(criterion) -> str:
        return str(criterion.compile(dialect=sqlite.dialect()))

    def test_admin_criterion_is_unconditional(self, make_user):
        admin = make_user(ADMIN_ROLE)
        assert is_admin(admin)
        assert self._sql(mutable_by(admin)) in ("1", "true", "1 = 1")

    def test_owner_criterion_filters_on_user_id(self, make_user):
        publisher = make_user(PUBLISHER_ROLE)
        assert "bootcamps.user_id" in self._sql(mutable_by(publisher))
