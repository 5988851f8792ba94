"""Postgres-backed lead repository adapter."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lead_funnel.adapters.outbound.persistence.models import LeadModel
from lead_funnel.application.dtos.lead import Lead
from lead_funnel.application.ports.lead_repository import LeadRepository
from lead_funnel.domain.errors import ConflictRace, NotFoundError
from lead_funnel.infrastructure.db import get_db_session
from lead_funnel.infrastructure.logging.logger import logger


class PostgresLeadRepository(LeadRepository):
    """Postgres implementation of lead repository."""

    def _model_to_dto(self, model: LeadModel) -> Lead:
        """
        Convert LeadModel to Lead DTO.

        Args:
            model: SQLAlchemy model instance

        Returns:
            Lead DTO
        """
        # SQLite returns naive datetimes
        created_at = model.created_at
        if created_at and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        return Lead(
            id=model.id,
            task_id=model.task_id,
            name=model.name,
            phone=model.phone,
            email=model.email,
            rating=model.rating,
            notified=bool(model.email_sent),
            created_at=created_at,
        )

    def _get_model(self, db: Session, lead_id: str) -> LeadModel:
        model = db.query(LeadModel).filter(LeadModel.id == lead_id).first()
        if model is None:
            raise NotFoundError(f"Lead {lead_id} does not exist", error="Lead not found")
        return model

    async def get(self, lead_id: str) -> Optional[Lead]:
        """
        Get a lead by id.

        Args:
            lead_id: Lead identifier

        Returns:
            Lead DTO, or None if not found
        """
        db: Session = get_db_session()
        try:
            model = db.query(LeadModel).filter(LeadModel.id == lead_id).first()
            if model is None:
                return None
            return self._model_to_dto(model)
        except SQLAlchemyError as e:
            logger.error(f"Database error while getting lead {lead_id}: {str(e)}")
            raise
        finally:
            db.close()

    async def find_by_identity(
        self, task_id: str, phone: str, email: Optional[str] = None
    ) -> Optional[Lead]:
        """
        Find the oldest lead under a task matching the phone OR the email.

        Args:
            task_id: Task identifier
            phone: Phone to match exactly
            email: Email to match exactly (clause skipped when empty)

        Returns:
            Matching Lead DTO, or None
        """
        clauses = [LeadModel.phone == phone]
        if email:
            clauses.append(LeadModel.email == email)

        db: Session = get_db_session()
        try:
            model = (
                db.query(LeadModel)
                .filter(LeadModel.task_id == task_id)
                .filter(or_(*clauses))
                .order_by(LeadModel.created_at.asc(), LeadModel.id.asc())
                .first()
            )
            if model is None:
                return None
            return self._model_to_dto(model)
        except SQLAlchemyError as e:
            logger.error(f"Database error while matching lead for task {task_id}: {str(e)}")
            raise
        finally:
            db.close()

    async def insert(self, lead: Lead) -> Lead:
        """
        Insert a new lead.

        Args:
            lead: Lead DTO to insert

        Returns:
            Stored Lead DTO

        Raises:
            ConflictRace: If (task_id, phone) is already taken
        """
        db: Session = get_db_session()
        try:
            model = LeadModel(
                id=lead.id,
                task_id=lead.task_id,
                name=lead.name,
                phone=lead.phone,
                email=lead.email,
                rating=lead.rating,
                email_sent=lead.notified,
                created_at=lead.created_at,
                updated_at=datetime.now(timezone.utc),
            )
            db.add(model)
            db.commit()
            db.refresh(model)
            return self._model_to_dto(model)
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Duplicate lead insert for task {lead.task_id}: {str(e.orig)}")
            raise ConflictRace(f"Lead with this phone already exists for task {lead.task_id}") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error while inserting lead for task {lead.task_id}: {str(e)}")
            raise
        finally:
            db.close()

    async def update_identity(
        self, lead_id: str, name: Optional[str], email: Optional[str], phone: str
    ) -> Lead:
        """
        Overwrite the identity fields of an existing lead.

        Raises:
            ConflictRace: If the new phone belongs to another lead of the same task
        """
        db: Session = get_db_session()
        try:
            model = self._get_model(db, lead_id)
            model.name = name
            model.email = email
            model.phone = phone
            model.updated_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(model)
            return self._model_to_dto(model)
        except IntegrityError as e:
            db.rollback()
            raise ConflictRace(f"Phone already belongs to another lead: {str(e.orig)}") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error while updating lead {lead_id}: {str(e)}")
            raise
        finally:
            db.close()

    async def set_rating(self, lead_id: str, rating: int) -> None:
        """Store the visitor's rating for a lead."""
        db: Session = get_db_session()
        try:
            model = self._get_model(db, lead_id)
            model.rating = rating
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error while rating lead {lead_id}: {str(e)}")
            raise
        finally:
            db.close()

    async def mark_notified(self, lead_id: str) -> None:
        """Flag a lead as notified."""
        db: Session = get_db_session()
        try:
            model = self._get_model(db, lead_id)
            model.email_sent = True
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error while marking lead {lead_id} notified: {str(e)}")
            raise
        finally:
            db.close()

    async def list(self, task_id: Optional[str] = None) -> list[Lead]:
        """
        List leads.

        Args:
            task_id: Optional task filter

        Returns:
            List of leads
        """
        db: Session = get_db_session()
        try:
            query = db.query(LeadModel)
            if task_id is not None:
                query = query.filter(LeadModel.task_id == task_id)
            models = query.order_by(LeadModel.created_at.asc()).all()
            return [self._model_to_dto(model) for model in models]
        except SQLAlchemyError as e:
            logger.error(f"Database error while listing leads: {str(e)}")
            return []
        finally:
            db.close()
