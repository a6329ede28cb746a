"""Unit tests for rendering predicates and seek filters as SQL."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from cursor_connection.core.database import SeekFilter, SqlAlchemyDataSource, render_predicate
from cursor_connection.core.exceptions import InvalidPaginationArguments, MalformedCursor
from cursor_connection.core.pagination import (
    Clause,
    Compare,
    CursorKind,
    FetchQuery,
    Operator,
    build_cursor_predicate,
    parse_order,
)
from cursor_connection.core.pagination.ordering import PlainField
from tests.models import Post, User


def compile_sql(clause) -> str:
    return str(clause.compile(compile_kwargs={"literal_binds": True}))


@pytest.fixture
def user_source():
    # never touches the session: only statements are built
    return SqlAlchemyDataSource(User, session=None)


ORDER = parse_order([("firstName", "ASC"), ("id", "DESC")])


@pytest.mark.unit
class TestRenderPredicate:
    """Tests for render_predicate."""

    def test_seek_condition(self, user_source):
        """The seek condition should render as nested OR/AND column comparisons."""
        predicate = build_cursor_predicate(ORDER, {"firstName": "Cedric", "id": 3}, CursorKind.AFTER)

        sql = compile_sql(render_predicate(predicate, user_source.resolve_column))

        assert "users.first_name > 'Cedric'" in sql
        assert "users.first_name = 'Cedric'" in sql
        assert "users.id < 3" in sql
        assert " OR " in sql

    def test_clause_is_passed_through(self, user_source):
        """A Clause should render as the SQLAlchemy expression it wraps."""
        expression = User.lastName == "Brown"

        assert render_predicate(Clause(expression), user_source.resolve_column) is expression

    def test_equality_with_none_renders_is_null(self, user_source):
        """Equality against None should render as IS NULL."""
        predicate = Compare(PlainField("optionsUnique"), Operator.EQ, None)

        sql = compile_sql(render_predicate(predicate, user_source.resolve_column))

        assert "IS NULL" in sql

    @pytest.mark.parametrize("operator", [Operator.GT, Operator.LT])
    def test_strict_comparison_with_none_raises_malformed_cursor(self, user_source, operator):
        """A strict comparison against a None cursor value should be rejected."""
        predicate = build_cursor_predicate(
            parse_order([("optionsUnique", "DESC"), ("id", "ASC")]),
            {"optionsUnique": None, "id": 2},
            CursorKind.AFTER if operator is Operator.LT else CursorKind.BEFORE,
        )

        with pytest.raises(MalformedCursor, match="optionsUnique"):
            render_predicate(predicate, user_source.resolve_column)

    def test_unknown_node_raises_type_error(self, user_source):
        """Anything that is not a predicate node should raise TypeError."""
        with pytest.raises(TypeError):
            render_predicate("users.id > 3", user_source.resolve_column)


@pytest.mark.unit
class TestSeekFilter:
    """Tests for SeekFilter."""

    def test_applies_where_order_and_limit(self, user_source):
        """SeekFilter should add WHERE, ORDER BY and LIMIT from the query."""
        query = FetchQuery(
            filter=build_cursor_predicate(ORDER, {"firstName": "Alan", "id": 5}, CursorKind.AFTER),
            order=ORDER,
            limit=3,
        )

        sql = compile_sql(SeekFilter(query, user_source.resolve_column).apply(select(User)))

        assert "WHERE" in sql
        assert "ORDER BY users.first_name ASC, users.id DESC" in sql
        assert "LIMIT 3" in sql

    def test_replaces_existing_order_by(self, user_source):
        """An ORDER BY already on the statement should be replaced, not extended."""
        query = FetchQuery(filter=None, order=ORDER, limit=1)
        statement = select(User).order_by(User.lastName)

        sql = compile_sql(SeekFilter(query, user_source.resolve_column).apply(statement))

        assert sql.count("ORDER BY") == 1
        assert "last_name" not in sql.split("ORDER BY")[1]
        assert "WHERE" not in sql


@pytest.mark.unit
class TestBuildStatement:
    """Tests for SqlAlchemyDataSource.build_statement."""

    def test_joins_association_from_order(self):
        """A $relation.field$ order entry should join the relationship."""
        source = SqlAlchemyDataSource(Post, session=None, join_associations=True)
        order = parse_order([("$author.firstName$", "ASC"), ("id", "ASC")])

        sql = compile_sql(source.build_statement(FetchQuery(filter=None, order=order, limit=2)))

        assert "JOIN users ON" in sql
        assert "ORDER BY users.first_name ASC, posts.id ASC" in sql

    def test_joins_association_from_filter_once(self):
        """A relationship named in both order and filter should be joined once."""
        source = SqlAlchemyDataSource(Post, session=None, join_associations=True)
        order = parse_order([("$author.firstName$", "ASC"), ("id", "ASC")])
        predicate = build_cursor_predicate(
            order, {"$author.firstName$": "Alan", "id": 51}, CursorKind.AFTER
        )

        sql = compile_sql(source.build_statement(FetchQuery(filter=predicate, order=order, limit=2)))

        assert sql.count("JOIN users") == 1

    def test_join_can_be_disabled(self):
        """With join_associations off, the base statement's own join should be used."""
        source = SqlAlchemyDataSource(Post, session=None, join_associations=False)
        statement = select(Post).join(Post.author)
        source.statement = statement
        order = parse_order([("$author.lastName$", "DESC"), ("id", "ASC")])

        sql = compile_sql(source.build_statement(FetchQuery(filter=None, order=order, limit=2)))

        assert sql.count("JOIN users") == 1
        assert "users.last_name DESC" in sql

    def test_join_setting_read_from_environment(self, monkeypatch):
        """join_associations should default to the environment setting."""
        monkeypatch.setenv("CURSOR_PAGINATION_JOIN_ASSOCIATIONS", "false")

        assert SqlAlchemyDataSource(Post, session=None).join_associations is False

    def test_unknown_option_rejected(self, user_source):
        """Unsupported pass-through options should be rejected."""
        query = FetchQuery(filter=None, order=ORDER, limit=2, options={"timeout": 5})

        with pytest.raises(InvalidPaginationArguments) as exc_info:
            user_source.build_statement(query)

        assert exc_info.value.argument == "options"

    def test_execution_options_applied(self, user_source):
        """execution_options should be set on the statement."""
        query = FetchQuery(
            filter=None,
            order=ORDER,
            limit=2,
            options={"execution_options": {"yield_per": 10}},
        )

        statement = user_source.build_statement(query)

        assert statement.get_execution_options()["yield_per"] == 10

    @pytest.mark.parametrize(
        "field",
        [PlainField("nope"), PlainField("metadata")],
    )
    def test_unknown_attribute_rejected(self, user_source, field):
        """Fields that are not sortable model attributes should be rejected."""
        with pytest.raises(InvalidPaginationArguments):
            user_source.resolve_column(field)

    def test_unknown_relationship_rejected(self, user_source):
        """Association references through a non-relationship should be rejected."""
        order = parse_order([("$firstName.x$", "ASC")])

        with pytest.raises(InvalidPaginationArguments, match="no relationship"):
            user_source.resolve_column(order[0].field)
