"""Core data models for claude-viz.

Timestamps are epoch milliseconds (float), matching what the dashboard
client compares against ``Date.now()``.
"""

from dataclasses import dataclass, field

PLAN_HISTORY_LIMIT = 10


@dataclass
class PlanFile:
    """A markdown plan document as read from the plans directory."""

    filename: str  # unique within the plans directory
    path: str
    content: str
    last_modified: float

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "path": self.path,
            "content": self.content,
            "lastModified": self.last_modified,
        }


@dataclass(frozen=True)
class PlanUpdate:
    """A single create/modify/delete event for one plan file."""

    kind: str  # "created" | "modified" | "deleted"
    file: PlanFile
    timestamp: float

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "file": self.file.to_dict(),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class PlanVersion:
    content: str
    timestamp: float

    def to_dict(self) -> dict:
        return {"content": self.content, "timestamp": self.timestamp}


@dataclass
class PlanHistory:
    """Retained versions of one plan, oldest first."""

    filename: str
    versions: list[PlanVersion] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "versions": [v.to_dict() for v in self.versions],
        }


@dataclass
class PlanSection:
    level: int  # 1..6
    title: str
    content: str
    id: str

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "title": self.title,
            "content": self.content,
            "id": self.id,
        }


@dataclass
class ParsedPlan:
    """Rendered HTML plus the outline extracted from a plan."""

    html: str
    sections: list[PlanSection] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "html": self.html,
            "sections": [s.to_dict() for s in self.sections],
            "steps": list(self.steps),
        }


@dataclass
class TodoTask:
    content: str  # imperative form, e.g. "Run build"
    active_form: str  # present participle, e.g. "Running build"
    status: str  # "pending" | "in_progress" | "completed"
    timestamp: float | None = None  # mtime of the source file

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "activeForm": self.active_form,
            "status": self.status,
            "timestamp": self.timestamp,
        }


@dataclass
class TodoState:
    """One session's task list, in source file order."""

    session_id: str
    tasks: list[TodoTask]
    last_updated: float

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "tasks": [t.to_dict() for t in self.tasks],
            "lastUpdated": self.last_updated,
        }


@dataclass
class TodoStats:
    total: int
    pending: int
    in_progress: int
    completed: int
    completion_percentage: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "pending": self.pending,
            "inProgress": self.in_progress,
            "completed": self.completed,
            "completionPercentage": self.completion_percentage,
        }


@dataclass
class SessionSummary:
    """An archived session as offered in the session picker."""

    filename: str
    last_updated: float
    task_count: int

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "lastUpdated": self.last_updated,
            "taskCount": self.task_count,
        }
