from datetime import date, datetime

import pytest
from pydantic import ValidationError
from youtrack_client.query import (
    ArticleFilter,
    IssueFilter,
    QueryBuilder,
    QueryFilter,
    WorkItemFilter,
    build_query,
    escape_value,
    quote,
)


def test_project_and_created_range():
    f = IssueFilter(project="MYD", created_from="2025-07-01", created_to="2025-07-31")

    assert build_query(f) == "project: MYD created: 2025-07-01 .. 2025-07-31"


def test_same_filter_builds_same_string():
    kwargs = dict(project="MYD", assignee="jdoe", tags=["ui", "backend"], free_text="crash")

    assert IssueFilter(**kwargs).to_query() == IssueFilter(**kwargs).to_query()


def test_unset_and_blank_fields_produce_no_clause():
    f = IssueFilter(project="MYD", assignee=None, state="   ", priority="")

    assert build_query(f) == "project: MYD"


def test_empty_filter_builds_empty_string():
    assert build_query(IssueFilter()) == ""
    assert build_query(None) == ""


def test_clause_order_is_fixed():
    f = IssueFilter(
        free_text="timeout",
        priority="Major",
        state="Open",
        assignee="jdoe",
        project="MYD",
        tags=["backend"],
        updated_from=date(2025, 7, 1),
    )

    assert build_query(f) == (
        "project: MYD assignee: jdoe state: Open priority: Major "
        "tag: backend updated: 2025-07-01 .. * timeout"
    )


def test_values_with_spaces_are_quoted():
    f = IssueFilter(project="MYD", state="In Progress")

    assert build_query(f) == 'project: MYD state: "In Progress"'


def test_quotes_and_backslashes_are_escaped():
    assert quote('say "hi"') == '"say \\"hi\\""'
    assert escape_value('a\\b c') == '"a\\\\b c"'


@pytest.mark.parametrize(
    "raw",
    ["a:b", "1..2", "x,y", "{x}", 'q"q', "tab\tbed"],
)
def test_reserved_characters_force_quoting(raw):
    assert escape_value(raw).startswith('"')


def test_plain_values_are_not_quoted():
    assert escape_value("MYD") == "MYD"
    assert escape_value(42) == "42"
    assert escape_value(date(2025, 1, 2)) == "2025-01-02"
    assert escape_value(datetime(2025, 1, 2, 13, 45)) == "2025-01-02"


def test_open_range_bounds():
    assert QueryBuilder().range("created", None, "2025-07-31").build() == (
        "created: * .. 2025-07-31"
    )
    assert QueryBuilder().range("created", "2025-07-01", None).build() == (
        "created: 2025-07-01 .. *"
    )
    assert QueryBuilder().range("created", None, "").build() == ""


def test_free_text_is_last_and_whitespace_normalized():
    qb = QueryBuilder().text("  login   page ").field("project", "MYD")

    assert qb.build() == "project: MYD login page"


def test_free_text_with_reserved_tokens_is_quoted():
    f = IssueFilter(project="MYD", free_text="state: Open")

    assert build_query(f) == 'project: MYD "state: Open"'


def test_tags_repeat_clause():
    f = IssueFilter(tags=["ui", "needs review"])

    assert build_query(f) == 'tag: ui tag: "needs review"'


def test_spent_time_range():
    f = IssueFilter(spent_time_from="1h", spent_time_to="1d")

    assert build_query(f) == "spent time: 1h .. 1d"


def test_work_item_filter():
    f = WorkItemFilter(
        project="MYD",
        issue="MYD-17",
        author="jdoe",
        work_from=date(2025, 7, 1),
        work_to=date(2025, 7, 31),
    )

    assert build_query(f) == (
        "project: MYD issue id: MYD-17 work author: jdoe "
        "work date: 2025-07-01 .. 2025-07-31"
    )


def test_article_filter():
    f = ArticleFilter(project="MYD", author="jdoe", tags=["runbook"], free_text="deploy")

    assert build_query(f) == "project: MYD author: jdoe tag: runbook deploy"


def test_unknown_filter_field_is_rejected():
    with pytest.raises(ValidationError):
        IssueFilter(projcet="MYD")


def test_query_filter_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        QueryFilter()
