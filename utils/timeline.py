# utils/timeline.py
from datetime import date, timedelta
from typing import Optional

import pandas as pd

from utils.progress import compute_sprint_progress


def sprint_status(sprint, today: Optional[date] = None) -> str:
    today = today or date.today()
    if sprint.is_completed:
        return "Completed"
    if sprint.start_date > today:
        return "Planned"
    if sprint.end_date < today:
        return "Overdue"
    return "Active"


def timeline_df_for_project(store, project_id: str, today: Optional[date] = None) -> pd.DataFrame:
    rows = []
    for s in store.sprints_for(project_id):
        finish = s.end_date if s.end_date > s.start_date else s.start_date + timedelta(days=1)
        rows.append({
            "Item": s.title,
            "Start": s.start_date,
            "Finish": finish,
            "Status": sprint_status(s, today),
            "Progress": round(compute_sprint_progress(store, s.id), 1),
        })
    df = pd.DataFrame(rows, columns=["Item", "Start", "Finish", "Status", "Progress"])
    if not df.empty:
        df = df.dropna(subset=["Start", "Finish"], how="any")
    return df
