"""Tests for the grid query facade over stored collections."""

from unittest.mock import MagicMock

import pytest

from app.entities.organization import Organization
from app.repositories.repository import LIST_PROJECTION
from app.services.errors import ValidationError
from app.services.grid_service import (
    GridService,
    build_pagination,
    build_query,
    parse_filters,
)
from app.services.sync.merge import merge_commits

from conftest import make_repository, raw_commit


@pytest.fixture
def service():
    service = GridService(MagicMock())
    service._repositories = {
        "organizations": MagicMock(),
        "repositories": MagicMock(),
    }
    return service


def test_pagination_math():
    pagination = build_pagination(page=3, page_size=100, total_count=250)

    assert pagination == {
        "page": 3,
        "page_size": 100,
        "total_count": 250,
        "total_pages": 3,
        "has_next_page": False,
        "has_prev_page": True,
    }


def test_pagination_without_rows():
    pagination = build_pagination(page=1, page_size=100, total_count=0)

    assert pagination["total_pages"] == 0
    assert pagination["has_next_page"] is False
    assert pagination["has_prev_page"] is False


class TestBuildQuery:
    def test_search_covers_every_search_field(self):
        query = build_query("user-1", ["name", "description"], search="cli")

        assert query["user_id"] == "user-1"
        assert query["$or"] == [
            {"name": {"$regex": "cli", "$options": "i"}},
            {"description": {"$regex": "cli", "$options": "i"}},
        ]

    def test_search_term_is_matched_literally(self):
        query = build_query("user-1", ["name"], search="c++ (beta)")

        assert query["$or"][0]["name"]["$regex"] == r"c\+\+\ \(beta\)"

    def test_string_filters_match_substrings_others_match_exactly(self):
        query = build_query(
            "user-1",
            [],
            filters={"language": "Py", "private": False, "data_counts.issues": 3},
        )

        assert query["language"] == {"$regex": "Py", "$options": "i"}
        assert query["private"] == {"$eq": False}
        assert query["data_counts.issues"] == {"$eq": 3}

    def test_operator_objects_are_matched_as_values(self):
        query = build_query(
            "user-1",
            [],
            filters={"sync_status": {"$ne": "completed"}, "topics": {"$where": "1"}},
        )

        assert query["sync_status"] == {"$eq": {"$ne": "completed"}}
        assert query["topics"] == {"$eq": {"$where": "1"}}

    def test_filters_cannot_escape_the_user_scope(self):
        query = build_query(
            "user-1",
            [],
            filters={"user_id": "someone-else", "$where": "1", "name": ""},
        )

        assert query == {"user_id": "user-1"}


class TestParseFilters:
    def test_json_object(self):
        assert parse_filters('{"language": "Go"}') == {"language": "Go"}

    def test_malformed_json_is_ignored(self):
        assert parse_filters("{not json") == {}

    def test_non_object_is_ignored(self):
        assert parse_filters("[1, 2]") == {}

    def test_empty(self):
        assert parse_filters(None) == {}
        assert parse_filters("") == {}


class TestGridData:
    def test_page_three_skips_two_hundred(self, service):
        repo = service._repositories["repositories"]
        repo.paginate.return_value = ([], 250)

        result = service.get_grid_data("repositories", "user-1", page=3, page_size=100)

        kwargs = repo.paginate.call_args.kwargs
        assert kwargs["skip"] == 200
        assert kwargs["limit"] == 100
        assert kwargs["projection"] == LIST_PROJECTION
        assert result["pagination"]["total_pages"] == 3
        assert result["pagination"]["has_next_page"] is False
        assert result["collection"] == "repositories"

    def test_default_sort_is_most_recently_synced(self, service):
        repo = service._repositories["organizations"]
        repo.paginate.return_value = ([], 0)

        service.get_grid_data("organizations", "user-1")

        assert repo.paginate.call_args.kwargs["sort"] == [("last_synced_at", -1)]
        assert repo.paginate.call_args.kwargs["limit"] == 100

    def test_explicit_sort(self, service):
        repo = service._repositories["repositories"]
        repo.paginate.return_value = ([], 0)

        service.get_grid_data(
            "repositories", "user-1", sort_field="stats.stargazers_count", sort_order="desc"
        )

        assert repo.paginate.call_args.kwargs["sort"] == [("stats.stargazers_count", -1)]

    @pytest.mark.parametrize("sort_field", ["commits", "issues", "topics", "no_such_field"])
    def test_unsortable_fields_are_rejected(self, service, sort_field):
        with pytest.raises(ValidationError) as exc_info:
            service.get_grid_data("repositories", "user-1", sort_field=sort_field)

        assert sort_field in exc_info.value.message
        service._repositories["repositories"].paginate.assert_not_called()

    def test_page_size_is_capped(self, service):
        repo = service._repositories["repositories"]
        repo.paginate.return_value = ([], 0)

        result = service.get_grid_data("repositories", "user-1", page_size=50000)

        assert result["pagination"]["page_size"] == 1000

    def test_search_and_filters_reach_the_store(self, service):
        repo = service._repositories["repositories"]
        repo.paginate.return_value = ([], 0)

        service.get_grid_data(
            "repositories", "user-1", search="cli", filters='{"language": "Go"}'
        )

        query = repo.paginate.call_args.args[0]
        assert query["user_id"] == "user-1"
        assert query["language"]["$regex"] == "Go"
        searched = [next(iter(clause)) for clause in query["$or"]]
        assert "description" in searched
        assert "organization_login" in searched

    def test_repository_rows_exclude_children(self, service):
        stored = make_repository()
        merge_commits(stored, [raw_commit("a1")])
        service._repositories["repositories"].paginate.return_value = ([stored], 1)

        result = service.get_grid_data("repositories", "user-1")

        row = result["data"][0]
        assert row["name"] == "widgets"
        assert row["data_counts"]["commits"] == 1
        for child in ("commits", "pull_requests", "issues"):
            assert child not in row

    def test_organization_rows(self, service):
        stored = Organization(user_id="user-1", github_id=10, login="acme")
        service._repositories["organizations"].paginate.return_value = ([stored], 1)

        result = service.get_grid_data("organizations", "user-1")

        assert result["data"][0]["login"] == "acme"
        assert result["data"][0]["members"] == []

    def test_unknown_collection(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.get_grid_data("commits", "user-1")

        assert "organizations, repositories" in exc_info.value.message

    def test_requires_user_id(self, service):
        with pytest.raises(ValidationError):
            service.get_grid_data("repositories", None)


class TestCollections:
    def test_counts_are_scoped_to_user(self, service):
        service._repositories["organizations"].count.return_value = 2
        service._repositories["repositories"].count.return_value = 14

        collections = service.list_collections("user-1")

        assert [(c["name"], c["count"]) for c in collections] == [
            ("organizations", 2),
            ("repositories", 14),
        ]
        service._repositories["repositories"].count.assert_called_once_with(
            {"user_id": "user-1"}
        )

    def test_schema(self, service):
        schema = service.get_schema("repositories", "user-1")

        assert schema["collection"] == "repositories"
        assert schema["version"] == 1
        assert any(column.field == "stats" for column in schema["fields"])

    def test_schema_unknown_collection(self, service):
        with pytest.raises(ValidationError):
            service.get_schema("issues", "user-1")
