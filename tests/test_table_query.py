"""Tests for PostgREST parameter rendering."""

import pytest

from akora_cache.entities import Filter, Order, TableQuery


class TestTableQuery:
    def test_defaults(self) -> None:
        assert TableQuery(table="profiles").to_params() == [("select", "*")]

    def test_filters_order_and_range(self) -> None:
        query = TableQuery(
            table="posts",
            columns="id, content,\n  profiles (id, username)",
            filters=(Filter("user_id", "eq", "42"), Filter("is_active", "eq", True)),
            order=Order("created_at", ascending=False),
            range_start=10,
            range_end=19,
        )

        assert query.to_params() == [
            ("select", "id,content,profiles(id,username)"),
            ("user_id", "eq.42"),
            ("is_active", "eq.true"),
            ("order", "created_at.desc"),
            ("offset", "10"),
            ("limit", "10"),
        ]

    def test_in_and_is_filters(self) -> None:
        assert Filter("id", "in", ["a", "b"]).render() == "in.(a,b)"
        assert Filter("deleted_at", "is", None).render() == "is.null"

    def test_or_filter(self) -> None:
        query = TableQuery(table="friendships", or_filter="user_id.eq.1,friend_id.eq.1")

        assert ("or", "(user_id.eq.1,friend_id.eq.1)") in query.to_params()

    def test_half_open_range_rejected(self) -> None:
        with pytest.raises(ValueError):
            TableQuery(table="posts", range_start=0)

    def test_inverted_range_rejected(self) -> None:
        with pytest.raises(ValueError):
            TableQuery(table="posts", range_start=5, range_end=1)
