"""
DevCamper Backend — Listing Query Builder Tests
=================================================

What:  Parameter parsing in QueryParams, and advanced_results() against an
       in-memory SQLite database.
"""

import pytest
import pytest_asyncio

from devcamper.exceptions import ValidationError
from devcamper.models.bootcamp import Bootcamp
from devcamper.schemas.bootcamp import BootcampResponse
from devcamper.services.advanced_results import QueryParams, advanced_results


def _serialize(bootcamp):
    return BootcampResponse.from_model(bootcamp).model_dump(mode="json")


class TestQueryParams:

    def test_defaults(self):
        query = QueryParams(Bootcamp, {})
        assert query.page == 1
        assert query.limit == 25
        assert query.offset == 0
        assert query.select is None
        assert query.criteria == []

    def test_operators_become_criteria(self):
        query = QueryParams(
            Bootcamp,
            {"average_cost[lte]": "10000", "average_rating[gt]": "5", "city[in]": "Boston,Lowell"},
        )
        assert len(query.criteria) == 3

    def test_unknown_fields_ignored(self):
        query = QueryParams(Bootcamp, {"colour": "blue", "foo[gt]": "1", "weird key": "x"})
        assert query.criteria == []

    def test_reserved_keys_never_filter(self):
        query = QueryParams(Bootcamp, {"select": "name", "sort": "name", "page": "2", "limit": "5"})
        assert query.criteria == []
        assert query.offset == 5

    def test_uncoercible_value_rejected(self):
        with pytest.raises(ValidationError, match="average_cost"):
            QueryParams(Bootcamp, {"average_cost[lte]": "cheap"})

    def test_bool_filter_values(self):
        QueryParams(Bootcamp, {"housing": "true", "accept_gi": "0"})
        with pytest.raises(ValidationError):
            QueryParams(Bootcamp, {"housing": "maybe"})

    def test_json_column_not_filterable(self):
        with pytest.raises(ValidationError, match="not supported"):
            QueryParams(Bootcamp, {"careers": "UI/UX"})

    def test_unknown_sort_field_rejected(self):
        with pytest.raises(ValidationError, match="Cannot sort by 'popularity'"):
            QueryParams(Bootcamp, {"sort": "-popularity"})

    @pytest.mark.parametrize("raw", ["0", "-1", "abc", "101"])
    def test_bad_limit_rejected(self, raw):
        with pytest.raises(ValidationError):
            QueryParams(Bootcamp, {"limit": raw})

    def test_alias_maps_api_name_to_column(self, make_user):
        owner = make_user()
        query = QueryParams(Bootcamp, {"user": str(owner.id)}, aliases={"user": "user_id"})
        assert len(query.criteria) == 1

    def test_pagination_links(self):
        query = QueryParams(Bootcamp, {"page": "2", "limit": "2"})
        assert query.pagination(total=5) == {
            "next": {"page": 3, "limit": 2},
            "prev": {"page": 1, "limit": 2},
        }
        assert query.pagination(total=4) == {"prev": {"page": 1, "limit": 2}}

    def test_first_page_has_no_prev(self):
        query = QueryParams(Bootcamp, {"limit": "2"})
        assert query.pagination(total=1) == {}

    def test_project_keeps_id(self):
        query = QueryParams(Bootcamp, {"select": "name"})
        assert query.project({"id": "1", "name": "A", "slug": "a"}) == {"id": "1", "name": "A"}


class TestAdvancedResults:

    @pytest_asyncio.fixture
    async def seeded(self, db_session_factory, seed_user, make_bootcamp):
        owner = await seed_user()
        async with db_session_factory() as session:
            for i, (cost, city) in enumerate([(5000, "Boston"), (9000, "Lowell"), (12000, "Boston")]):
                session.add(
                    make_bootcamp(
                        owner,
                        name=f"Camp {i}",
                        slug=f"camp-{i}",
                        average_cost=cost,
                        city=city,
                    )
                )
            await session.commit()
        return owner

    @pytest.mark.asyncio
    async def test_filter_sort_and_count(self, db_session_factory, seeded):
        async with db_session_factory() as session:
            envelope = await advanced_results(
                session,
                Bootcamp,
                {"average_cost[lte]": "10000", "sort": "-average_cost"},
                serialize=_serialize,
            )

        assert envelope["success"] is True
        assert envelope["count"] == 2
        assert [b["name"] for b in envelope["data"]] == ["Camp 1", "Camp 0"]
        assert envelope["pagination"] == {}

    @pytest.mark.asyncio
    async def test_in_filter_and_select(self, db_session_factory, seeded):
        async with db_session_factory() as session:
            envelope = await advanced_results(
                session,
                Bootcamp,
                {"city[in]": "Lowell", "select": "name"},
                serialize=_serialize,
            )

        assert envelope["count"] == 1
        assert set(envelope["data"][0]) == {"id", "name"}

    @pytest.mark.asyncio
    async def test_pages(self, db_session_factory, seeded):
        async with db_session_factory() as session:
            first = await advanced_results(
                session, Bootcamp, {"limit": "2", "sort": "name"}, serialize=_serialize
            )
            second = await advanced_results(
                session, Bootcamp, {"limit": "2", "page": "2", "sort": "name"}, serialize=_serialize
            )

        assert [b["name"] for b in first["data"]] == ["Camp 0", "Camp 1"]
        assert first["pagination"] == {"next": {"page": 2, "limit": 2}}
        assert [b["name"] for b in second["data"]] == ["Camp 2"]
        assert second["pagination"] == {"prev": {"page": 1, "limit": 2}}
