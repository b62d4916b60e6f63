# utils/board.py
from typing import Iterable, List, Optional

TODO, IN_PROGRESS, DONE = "TO DO", "IN PROGRESS", "DONE"
DEFAULT_COLUMNS = (TODO, IN_PROGRESS, DONE)

# reasons a column cannot be deleted
HAS_TASKS = "has_tasks"
RESERVED = "reserved"

BLOCKER_MESSAGES = {
    HAS_TASKS: "This column still has tasks. Move or delete them first.",
    RESERVED: "The default columns (TO DO, IN PROGRESS, DONE) cannot be deleted.",
}


def normalize_title(title: str) -> str:
    return " ".join((title or "").split()).upper()


def is_reserved(title: str) -> bool:
    return normalize_title(title) in DEFAULT_COLUMNS


def missing_defaults(existing_titles: Iterable[str]) -> List[str]:
    have = {normalize_title(t) for t in existing_titles}
    return [t for t in DEFAULT_COLUMNS if t not in have]


def column_delete_blocker(title: str, task_count: int) -> Optional[str]:
    """None when the column may go, else HAS_TASKS or RESERVED."""
    if task_count > 0:
        return HAS_TASKS
    if is_reserved(title):
        return RESERVED
    return None


def column_sort_key(title: str):
    t = normalize_title(title)
    if t in DEFAULT_COLUMNS:
        # custom columns sit between IN PROGRESS and DONE
        return ({TODO: 0, IN_PROGRESS: 1, DONE: 3}[t], "")
    return (2, t)
