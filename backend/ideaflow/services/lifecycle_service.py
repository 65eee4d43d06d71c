"""
IdeaFlow Backend — Case Lifecycle Service
===========================================

What:  The two state transitions of the marketplace workflow.
How:   Each transition is a single transaction on the request's session:
       every read and write happens between the implicit BEGIN and one
       COMMIT. Any failure rolls back before the exception leaves the service.
Who:   Called by PUT /api/cases/{id}/accept and
       PUT /api/processed-cases/{id}/complete.

Transitions:
    accept(case_id, executor_id)
        1. SELECT case ... FOR UPDATE          → 404 if absent
        2. case.status must be "open"          → 400 conflict otherwise
        3. load executor                       → 404 if absent
        4. INSERT processed_cases (copy of the case + executor id/email)
        5. UPDATE cases SET status='accepted'
        6. COMMIT
       A concurrent accept that slips past step 2 trips the UNIQUE constraint
       on processed_cases.case_id at step 4/6 and is reported as a conflict.

    complete(processed_case_id, user_id, overrides)
        1. SELECT processed case WHERE id AND executor_id = user_id → 404 if absent
        2. load executor email (None if the user row is gone)
        3. INSERT projects (overrides win when non-empty)
        4. DELETE the processed case
        5. COMMIT

    The Case row keeps status "accepted" after completion.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.database import fits_integer_column
from ideaflow.exceptions import ConflictError, DatabaseError, IdeaFlowError, NotFoundError
from ideaflow.models.case import (
    CASE_STATUS_ACCEPTED,
    CASE_STATUS_OPEN,
    PROCESSED_CASE_STATUS,
    PROJECT_STATUS,
    Case,
    ProcessedCase,
    Project,
)
from ideaflow.models.user import User
from ideaflow.schemas.case import AcceptCaseResponse, CompleteCaseRequest, CompleteCaseResponse
from ideaflow.services.validation import require_fields

logger = logging.getLogger(__name__)


class LifecycleService:
    """Atomic accept and complete transitions."""

    async def accept_case(
        self,
        db: AsyncSession,
        case_id: int,
        executor_id: Optional[int],
    ) -> AcceptCaseResponse:
        require_fields({"executorId": executor_id})
        if not fits_integer_column(case_id):
            raise NotFoundError(resource="case", resource_id=case_id)
        if not fits_integer_column(executor_id):
            raise NotFoundError(resource="executor", resource_id=executor_id)

        try:
            result = await db.execute(
                select(Case).where(Case.id == case_id).with_for_update()
            )
            case = result.scalar_one_or_none()
            if case is None:
                raise NotFoundError(resource="case", resource_id=case_id)

            if case.status != CASE_STATUS_OPEN:
                raise ConflictError(
                    message="Case has already been accepted",
                    context={"case_id": case_id, "status": case.status},
                )

            executor = await db.get(User, executor_id)
            if executor is None:
                raise NotFoundError(resource="executor", resource_id=executor_id)

            processed = ProcessedCase(
                case_id=case.id,
                user_id=case.user_id,
                title=case.title,
                theme=case.theme,
                description=case.description,
                cover=case.cover,
                files=list(case.files or []),
                status=PROCESSED_CASE_STATUS,
                executor_id=executor.id,
                executor_email=executor.email,
            )
            db.add(processed)
            case.status = CASE_STATUS_ACCEPTED
            await db.flush()
            await db.commit()
        except IdeaFlowError:
            await db.rollback()
            raise
        except IntegrityError as e:
            await db.rollback()
            logger.warning("Concurrent accept rejected for case %s: %s", case_id, str(e))
            raise ConflictError(
                message="Case has already been accepted",
                context={"case_id": case_id},
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Accept failed for case %s: %s", case_id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "accept", "case_id": case_id})

        logger.info(
            "Case %s accepted by user %s → processed case %s",
            case_id, executor_id, processed.id,
        )
        return AcceptCaseResponse(case_id=case_id, processed_case_id=processed.id)

    async def complete_case(
        self,
        db: AsyncSession,
        processed_case_id: int,
        payload: CompleteCaseRequest,
    ) -> CompleteCaseResponse:
        """
        Turn an assigned ProcessedCase into a closed Project.

        title/theme/description/cover fall back to the ProcessedCase values
        when missing or empty. files falls back only when omitted, so an
        explicit empty list clears the attachments.
        """
        require_fields({"userId": payload.user_id})
        user_id = payload.user_id
        if not (fits_integer_column(processed_case_id) and fits_integer_column(user_id)):
            raise NotFoundError(
                resource="processed case",
                resource_id=processed_case_id,
                message="Processed case not found or not assigned to you",
            )

        try:
            result = await db.execute(
                select(ProcessedCase).where(
                    ProcessedCase.id == processed_case_id,
                    ProcessedCase.executor_id == user_id,
                )
            )
            processed = result.scalar_one_or_none()
            if processed is None:
                raise NotFoundError(
                    resource="processed case",
                    resource_id=processed_case_id,
                    message="Processed case not found or not assigned to you",
                )

            executor = await db.get(User, user_id)
            executor_email = executor.email if executor is not None else None

            project = Project(
                case_id=processed.case_id,
                user_id=processed.user_id,
                title=payload.title or processed.title,
                theme=payload.theme or processed.theme,
                description=payload.description or processed.description,
                cover=payload.cover or processed.cover,
                files=list(processed.files or []) if payload.files is None else list(payload.files),
                status=PROJECT_STATUS,
                executor_email=executor_email,
            )
            db.add(project)
            await db.delete(processed)
            await db.flush()
            await db.commit()
        except IdeaFlowError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Complete failed for processed case %s: %s",
                processed_case_id, str(e), exc_info=True,
            )
            raise DatabaseError(
                context={"operation": "complete", "processed_case_id": processed_case_id}
            )

        logger.info(
            "Processed case %s completed by user %s → project %s",
            processed_case_id, user_id, project.id,
        )
        return CompleteCaseResponse(project_id=project.id)


lifecycle_service = LifecycleService()
