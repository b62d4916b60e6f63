# tests/test_board.py
from utils.board import (
    DEFAULT_COLUMNS, HAS_TASKS, RESERVED, column_delete_blocker, column_sort_key,
    is_reserved, missing_defaults,
)


def test_missing_defaults_on_empty_board():
    assert missing_defaults([]) == list(DEFAULT_COLUMNS)


def test_missing_defaults_ignores_case_and_spacing():
    assert missing_defaults(["to do", " Done ", "REVIEW"]) == ["IN PROGRESS"]


def test_column_with_tasks_is_blocked_first():
    assert column_delete_blocker("REVIEW", 1) == HAS_TASKS
    assert column_delete_blocker("DONE", 2) == HAS_TASKS


def test_reserved_column_is_blocked_even_when_empty():
    assert column_delete_blocker("DONE", 0) == RESERVED
    assert is_reserved("in progress")


def test_custom_empty_column_may_go():
    assert column_delete_blocker("REVIEW", 0) is None


def test_custom_columns_sort_before_done():
    titles = ["DONE", "REVIEW", "TO DO", "IN PROGRESS"]
    assert sorted(titles, key=column_sort_key) == ["TO DO", "IN PROGRESS", "REVIEW", "DONE"]
