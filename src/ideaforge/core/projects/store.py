from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from typing import Any

from sqlalchemy import select

from ideaforge.core.runtime.errors import InputValidationError, InvalidProjectStructure, ProjectNotFound
from ideaforge.core.telemetry.logging import get_logger
from ideaforge.db.models import Project, now_ms
from ideaforge.db.session import session_scope


def _project_dict(row: Project, *, include_tree: bool = True) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": row.id,
        "name": row.name,
        "createdAt": row.created_at,
        "updatedAt": row.updated_at,
    }
    if include_tree:
        out["ideaTree"] = json.loads(row.idea_tree)
    return out


class ProjectStore:
    """Key-value store of serialized idea trees, keyed by project id."""

    def __init__(self, session_factory, *, clock: Callable[[], int] = now_ms, logger=None) -> None:
        self.session_factory = session_factory
        self._clock = clock
        self.logger = logger or get_logger("ideaforge.projects")

    def save(self, project_id: str | None, name: str | None, idea_tree: Any) -> dict[str, Any]:
        if not project_id or not name or idea_tree is None:
            raise InputValidationError("Missing id, name, or ideaTree")
        now = self._clock()
        with session_scope(self.session_factory) as db:
            row = db.get(Project, project_id)
            if row is None:
                row = Project(id=project_id, name=name, idea_tree=json.dumps(idea_tree), created_at=now, updated_at=now)
                db.add(row)
            else:
                row.name = name
                row.idea_tree = json.dumps(idea_tree)
                row.updated_at = now
        self.logger.info("project_saved", id=project_id, name=name)
        return {"id": project_id, "name": name, "savedAt": now}

    def list_projects(self) -> list[dict[str, Any]]:
        with session_scope(self.session_factory) as db:
            rows = db.execute(select(Project).order_by(Project.updated_at.desc())).scalars().all()
            projects = [_project_dict(r, include_tree=False) for r in rows]
        self.logger.info("projects_listed", count=len(projects))
        return projects

    def get(self, project_id: str) -> dict[str, Any]:
        with session_scope(self.session_factory) as db:
            row = db.get(Project, project_id)
            if row is None:
                self.logger.warning("project_not_found", id=project_id)
                raise ProjectNotFound("Project not found")
            return _project_dict(row)

    def delete(self, project_id: str) -> dict[str, Any]:
        with session_scope(self.session_factory) as db:
            row = db.get(Project, project_id)
            if row is None:
                self.logger.warning("project_delete_missing", id=project_id)
                raise ProjectNotFound("Project not found")
            db.delete(row)
        self.logger.info("project_deleted", id=project_id)
        return {"id": project_id, "deleted": True}

    def import_project(self, data: Any) -> dict[str, Any]:
        if not isinstance(data, dict) or not isinstance(data.get("ideaTree"), list):
            raise InvalidProjectStructure("Invalid project structure - missing ideaTree")
        idea_tree = data["ideaTree"]
        name = f"{data['name']} (imported)" if data.get("name") else "Imported Project"
        new_id = str(uuid.uuid4())
        now = self._clock()
        with session_scope(self.session_factory) as db:
            db.add(Project(id=new_id, name=name, idea_tree=json.dumps(idea_tree), created_at=now, updated_at=now))
        self.logger.info("project_imported", id=new_id, name=name, node_count=len(idea_tree))
        return {"id": new_id, "name": name, "ideaTree": idea_tree, "imported": True}
