# utils/progress.py
from utils.board import DONE, normalize_title


def compute_sprint_progress(store, sprint_id: str) -> float:
    """Percent of story points sitting in DONE; task count when no points are set."""
    columns = store.columns_with_tasks(sprint_id)
    tasks = [t for c in columns for t in c.tasks]
    if not tasks:
        return 0.0
    done = [t for c in columns if normalize_title(c.title) == DONE for t in c.tasks]
    total_points = sum(t.story_points for t in tasks)
    if total_points:
        return float(100.0 * sum(t.story_points for t in done) / total_points)
    return float(100.0 * len(done) / len(tasks))


def compute_project_progress(store, project_id: str) -> float:
    sprints = store.sprints_for(project_id)
    if not sprints:
        return 0.0
    vals = [100.0 if s.is_completed else compute_sprint_progress(store, s.id) for s in sprints]
    return float(sum(vals) / len(vals))
