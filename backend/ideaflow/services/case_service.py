"""
IdeaFlow Backend — Case Service
=================================

What:  Creating Cases and reading Cases, ProcessedCases and Projects; appending
       attachments to a ProcessedCase.
How:   Every read LEFT JOINs the owner's row so responses carry `userEmail`.
       Attachment lists come back already decoded by the `files` column type.
Who:   Called by routes/cases.py, routes/processed_cases.py and routes/projects.py.
       The accept/complete transitions live in lifecycle_service.py.

Read ordering:
    cases            newest first (created_at DESC, id DESC)
    processed_cases  id ASC
    projects         id ASC
"""

import logging
from typing import List, Optional, Sequence, Tuple, Type, TypeVar

from fastapi import UploadFile
from sqlalchemy import Select, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.database import fits_integer_column
from ideaflow.exceptions import DatabaseError, FileStorageError, NotFoundError, ValidationError
from ideaflow.models.case import (
    CASE_STATUS_OPEN,
    PROJECT_STATUS,
    Case,
    ProcessedCase,
    Project,
)
from ideaflow.models.user import User
from ideaflow.schemas.case import (
    CaseCreateResponse,
    CaseResponse,
    FilesUploadResponse,
    ProcessedCaseResponse,
    ProjectResponse,
)
from ideaflow.services.storage_service import FileStorage, check_attachment_count
from ideaflow.services.validation import require_fields

logger = logging.getLogger(__name__)

R = TypeVar("R", CaseResponse, ProcessedCaseResponse, ProjectResponse)


def _with_owner_email(model) -> Select:
    """SELECT model, owner email FROM model LEFT JOIN users ON owner."""
    return select(model, User.email).outerjoin(User, User.id == model.user_id)


def _to_response(schema: Type[R], row: Tuple) -> R:
    record, user_email = row
    response = schema.model_validate(record)
    response.user_email = user_email
    return response


class CaseService:
    """
    Reads and simple writes for the three lifecycle tables.

    Error Handling Strategy:
        SQLAlchemy failures are logged and wrapped in DatabaseError.
        Application exceptions (NotFoundError, ValidationError) propagate
        unchanged.
    """

    async def _fetch_all(self, db: AsyncSession, stmt: Select, schema: Type[R]) -> List[R]:
        try:
            result = await db.execute(stmt)
            rows: Sequence = result.all()
        except SQLAlchemyError as e:
            logger.error("List query failed for %s: %s", schema.__name__, str(e), exc_info=True)
            raise DatabaseError(context={"operation": f"list {schema.__name__}"})
        return [_to_response(schema, row) for row in rows]

    async def _fetch_one(
        self,
        db: AsyncSession,
        stmt: Select,
        schema: Type[R],
        resource: str,
        resource_id: int,
    ) -> R:
        if not fits_integer_column(resource_id):
            raise NotFoundError(resource=resource, resource_id=resource_id)
        try:
            result = await db.execute(stmt)
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Query failed for %s %s: %s", resource, resource_id, str(e))
            raise DatabaseError(context={resource: resource_id})
        if row is None:
            raise NotFoundError(resource=resource, resource_id=resource_id)
        return _to_response(schema, row)

    # ── Cases ─────────────────────────────────────────────────────────────

    async def create_case(
        self,
        db: AsyncSession,
        storage: FileStorage,
        user_id: Optional[int],
        title: Optional[str],
        theme: Optional[str] = None,
        description: Optional[str] = None,
        cover: Optional[UploadFile] = None,
        files: Optional[List[UploadFile]] = None,
    ) -> CaseCreateResponse:
        """
        Insert an open Case owned by `user_id`.

        Uploads are written to storage only after the required fields and the
        owner have been checked. If the insert then fails, the stored files
        are deleted again, so a failed request leaves no files behind.
        """
        require_fields({"userId": user_id, "title": title})
        uploads = check_attachment_count(files, field="files")

        if not fits_integer_column(user_id):
            raise NotFoundError(resource="user", resource_id=user_id)
        try:
            owner = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Owner lookup failed for user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})
        if owner is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        cover_paths = await storage.put_uploads([cover] if cover is not None else [])
        try:
            file_paths = await storage.put_uploads(uploads)
        except FileStorageError:
            await storage.discard(cover_paths)
            raise

        try:
            case = Case(
                user_id=user_id,
                title=title,
                theme=theme or "",
                description=description or "",
                cover=cover_paths[0] if cover_paths else None,
                files=file_paths,
                status=CASE_STATUS_OPEN,
            )
            db.add(case)
            await db.flush()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to create case for user %s: %s", user_id, str(e), exc_info=True)
            await storage.discard([*cover_paths, *file_paths])
            raise DatabaseError(context={"operation": "create_case", "user_id": user_id})

        logger.info("Case created: id=%s owner=%s files=%d", case.id, user_id, len(case.files))
        return CaseCreateResponse(id=case.id)

    async def list_cases(self, db: AsyncSession, user_id: Optional[int] = None) -> List[CaseResponse]:
        if not fits_integer_column(user_id):
            return []
        stmt = _with_owner_email(Case)
        if user_id is not None:
            stmt = stmt.where(Case.user_id == user_id)
        stmt = stmt.order_by(desc(Case.created_at), desc(Case.id))
        return await self._fetch_all(db, stmt, CaseResponse)

    async def get_case(self, db: AsyncSession, case_id: int) -> CaseResponse:
        stmt = _with_owner_email(Case).where(Case.id == case_id)
        return await self._fetch_one(db, stmt, CaseResponse, "case", case_id)

    # ── Processed Cases ───────────────────────────────────────────────────

    async def list_processed_cases(
        self,
        db: AsyncSession,
        executor_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> List[ProcessedCaseResponse]:
        if not (fits_integer_column(executor_id) and fits_integer_column(user_id)):
            return []
        stmt = _with_owner_email(ProcessedCase)
        if executor_id is not None:
            stmt = stmt.where(ProcessedCase.executor_id == executor_id)
        if user_id is not None:
            stmt = stmt.where(ProcessedCase.user_id == user_id)
        stmt = stmt.order_by(ProcessedCase.id)
        return await self._fetch_all(db, stmt, ProcessedCaseResponse)

    async def get_processed_case(self, db: AsyncSession, processed_case_id: int) -> ProcessedCaseResponse:
        stmt = _with_owner_email(ProcessedCase).where(ProcessedCase.id == processed_case_id)
        return await self._fetch_one(db, stmt, ProcessedCaseResponse, "processed case", processed_case_id)

    async def ensure_processed_case(self, db: AsyncSession, processed_case_id: int) -> ProcessedCase:
        """Returns the ProcessedCase row or raises NotFoundError."""
        if not fits_integer_column(processed_case_id):
            raise NotFoundError(resource="processed case", resource_id=processed_case_id)
        try:
            processed = await db.get(ProcessedCase, processed_case_id)
        except SQLAlchemyError as e:
            logger.error("Query failed for processed case %s: %s", processed_case_id, str(e))
            raise DatabaseError(context={"processed_case_id": processed_case_id})
        if processed is None:
            raise NotFoundError(resource="processed case", resource_id=processed_case_id)
        return processed

    async def append_files(
        self,
        db: AsyncSession,
        storage: FileStorage,
        processed_case_id: int,
        uploads: Optional[List[UploadFile]],
    ) -> FilesUploadResponse:
        """Stores new attachments and appends their paths after the existing ones."""
        uploads = check_attachment_count(uploads, field="extraFiles")
        if not uploads:
            raise ValidationError(message="No files were uploaded", field="extraFiles")

        processed = await self.ensure_processed_case(db, processed_case_id)
        paths = await storage.put_uploads(uploads)
        try:
            # Assign a new list: the column type does not track in-place mutation
            processed.files = [*(processed.files or []), *paths]
            await db.flush()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to append files to processed case %s: %s", processed_case_id, str(e))
            await storage.discard(paths)
            raise DatabaseError(context={"processed_case_id": processed_case_id})

        logger.info(
            "Appended %d files to processed case %s (now %d)",
            len(paths), processed_case_id, len(processed.files),
        )
        return FilesUploadResponse(files=processed.files)

    # ── Projects ──────────────────────────────────────────────────────────

    async def list_projects(
        self,
        db: AsyncSession,
        user_id: Optional[int] = None,
        user_email: Optional[str] = None,
    ) -> List[ProjectResponse]:
        """
        userId filters by owner; otherwise userEmail filters closed projects
        by the executor's email. With neither, every project is returned.
        """
        if not fits_integer_column(user_id):
            return []
        stmt = _with_owner_email(Project)
        if user_id is not None:
            stmt = stmt.where(Project.user_id == user_id)
        elif user_email:
            stmt = stmt.where(
                Project.executor_email == user_email,
                Project.status == PROJECT_STATUS,
            )
        stmt = stmt.order_by(Project.id)
        return await self._fetch_all(db, stmt, ProjectResponse)

    async def get_project(self, db: AsyncSession, project_id: int) -> ProjectResponse:
        stmt = _with_owner_email(Project).where(Project.id == project_id)
        return await self._fetch_one(db, stmt, ProjectResponse, "project", project_id)


case_service = CaseService()
