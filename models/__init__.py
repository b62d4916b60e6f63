# models/__init__.py
from .project import Project, ProjectSummary
from .collaborator import Collaborator, Invitation, ROLES, STATUSES
from .sprint import Sprint
from .column import BoardColumn, ColumnWithTasks
from .task import Task
from .backlog_item import BacklogItem
from .user import Identity
