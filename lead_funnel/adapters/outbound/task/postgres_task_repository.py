"""Postgres-backed task repository adapter."""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lead_funnel.adapters.outbound.persistence.models import TaskModel, UserModel
from lead_funnel.application.dtos.task import Task
from lead_funnel.application.ports.task_repository import TaskRepository
from lead_funnel.infrastructure.db import get_db_session
from lead_funnel.infrastructure.logging.logger import logger


class PostgresTaskRepository(TaskRepository):
    """Postgres implementation of task repository."""

    def _model_to_dto(self, model: TaskModel) -> Task:
        return Task(
            id=model.id,
            title=model.title,
            description=model.description or "",
            script=model.ai_prompt or "",
            opening_question=model.first_question or "",
            notify_email=model.notify_email or None,
            is_public=bool(model.is_public),
            show_others=bool(model.show_others),
            source_post_url=model.source_post_url,
            owner_id=model.user_id,
        )

    async def get(self, task_id: str) -> Optional[Task]:
        """
        Get a task by id.

        Args:
            task_id: Task identifier

        Returns:
            Task DTO, or None if not found
        """
        db: Session = get_db_session()
        try:
            model = db.query(TaskModel).filter(TaskModel.id == task_id).first()
            if model is None:
                return None
            return self._model_to_dto(model)
        except SQLAlchemyError as e:
            logger.error(f"Database error while getting task {task_id}: {str(e)}")
            raise
        finally:
            db.close()

    async def get_owner_email(self, owner_id: str) -> Optional[str]:
        """
        Get the account email of a task owner.

        Args:
            owner_id: Owner identifier

        Returns:
            Email, or None if the owner is unknown or has no email
        """
        db: Session = get_db_session()
        try:
            user = db.query(UserModel).filter(UserModel.id == owner_id).first()
            return user.email if user and user.email else None
        except SQLAlchemyError as e:
            logger.error(f"Database error while getting owner {owner_id}: {str(e)}")
            return None
        finally:
            db.close()
