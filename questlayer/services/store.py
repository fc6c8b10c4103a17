"""Persistence adapter for projects and their quest tasks."""

import logging
from typing import Any, Dict, Optional, Protocol, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from questlayer.db import ProjectRow, TaskRow, create_session_factory, init_models
from questlayer.errors import PersistenceError
from questlayer.models.task import Task

logger = logging.getLogger(__name__)


class ProjectStore(Protocol):
    async def find_project_id_by_domain(self, domain: str) -> Optional[str]: ...

    async def upsert_project(self, project_id: Optional[str], fields: Dict[str, Any]) -> str: ...

    async def replace_tasks(self, project_id: str, tasks: Sequence[Task]) -> None: ...


class SqlProjectStore:
    """:class:`ProjectStore` backed by SQLAlchemy async sessions."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._sessions: async_sessionmaker = create_session_factory(engine)
        self._schema_ready = False

    async def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        try:
            await init_models(self._engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not initialise database schema: {exc}") from exc
        self._schema_ready = True

    async def find_project_id_by_domain(self, domain: str) -> Optional[str]:
        try:
            async with self._sessions() as session:
                result = await session.execute(
                    select(ProjectRow.id).where(ProjectRow.domain == domain).limit(1)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Project lookup failed: {exc}") from exc

    async def upsert_project(self, project_id: Optional[str], fields: Dict[str, Any]) -> str:
        """Create a project when *project_id* is None, else update it in place."""
        try:
            async with self._sessions() as session, session.begin():
                row = await session.get(ProjectRow, project_id) if project_id else None
                if row is None:
                    row = ProjectRow(**fields)
                    session.add(row)
                else:
                    for key, value in fields.items():
                        setattr(row, key, value)
                await session.flush()
                return row.id
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Project upsert failed: {exc}") from exc

    async def replace_tasks(self, project_id: str, tasks: Sequence[Task]) -> None:
        """Delete the project's tasks and insert *tasks* in one transaction."""
        rows = [
            TaskRow(project_id=project_id, **task.model_dump(exclude_none=True))
            for task in tasks
        ]
        try:
            async with self._sessions() as session, session.begin():
                await session.execute(delete(TaskRow).where(TaskRow.project_id == project_id))
                session.add_all(rows)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Task replacement failed: {exc}") from exc
        logger.debug("Stored %d tasks for project %s", len(rows), project_id)
