import logging
from typing import List, Optional
from uuid import uuid4

from ..db.db_client import AsyncPostgresClient, affected_rows
from ..models.db_models import Student, Field, DEFAULT_LEVELS
from ..models.rollcall_models import StudentImportRow, SkippedImportRow, StudentImportResult
from .errors import ServiceError, NotFoundError

logger = logging.getLogger(__name__)


class RosterService:
    """
    Service layer for students and the academic fields they belong to.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    # ===== Students =====

    async def list_students(self, field: Optional[str] = None, level: Optional[str] = None, search: Optional[str] = None) -> List[Student]:
        try:
            return await self.db_client.get_students(field, level, search)
        except Exception as e:
            logger.error("Error reading the student roster.", exc_info=True)
            raise ServiceError("A server error occurred while reading students.") from e

    async def get_student(self, student_id: str) -> Student:
        try:
            student = await self.db_client.get_student(student_id)
        except Exception as e:
            logger.error(f"Error reading student {student_id}.", exc_info=True)
            raise ServiceError("A server error occurred while reading the student.") from e
        if student is None:
            raise NotFoundError("Student not found.")
        return student

    async def _ensure_unique_matricule(self, matricule: str, own_id: Optional[str] = None):
        try:
            holder = await self.db_client.get_student_by_matricule(matricule)
        except Exception as e:
            logger.error(f"Error checking matricule '{matricule}'.", exc_info=True)
            raise ServiceError("A server error occurred while checking the matricule.") from e
        if holder is not None and holder.id != own_id:
            logger.warning(f"Matricule '{matricule}' is already used by student {holder.id}.")
            raise ServiceError(f"A student with matricule '{matricule}' already exists.")

    async def add_student(self, name: str, matricule: str, field: str, level: str, parent_name: str, parent_phone: str,
                          parent_email: Optional[str] = None, photo: Optional[str] = None) -> Student:
        await self._ensure_unique_matricule(matricule)
        student = Student(
            id=str(uuid4()), name=name, matricule=matricule, field=field, level=level,
            parent_name=parent_name, parent_phone=parent_phone, parent_email=parent_email, photo=photo
        )
        try:
            await self.db_client.add_students([student])
            logger.info(f"Student {student.id} ({matricule}) added to {field} {level}.")
            return student
        except Exception as e:
            logger.error(f"Error adding student '{matricule}'.", exc_info=True)
            raise ServiceError("A server error occurred while adding the student.") from e

    async def update_student(self, student_id: str, name: str, matricule: str, field: str, level: str, parent_name: str,
                             parent_phone: str, parent_email: Optional[str] = None, photo: Optional[str] = None) -> Student:
        await self.get_student(student_id)
        await self._ensure_unique_matricule(matricule, own_id=student_id)
        student = Student(
            id=student_id, name=name, matricule=matricule, field=field, level=level,
            parent_name=parent_name, parent_phone=parent_phone, parent_email=parent_email, photo=photo
        )
        try:
            result = await self.db_client.update_student(student)
        except Exception as e:
            logger.error(f"Error updating student {student_id}.", exc_info=True)
            raise ServiceError("A server error occurred while updating the student.") from e
        if affected_rows(result) == 0:
            raise NotFoundError("Student not found.")
        logger.info(f"Student {student_id} updated.")
        return student

    async def delete_student(self, student_id: str):
        try:
            result = await self.db_client.delete_student(student_id)
        except Exception as e:
            logger.error(f"Error deleting student {student_id}.", exc_info=True)
            raise ServiceError("A server error occurred while deleting the student.") from e
        if affected_rows(result) == 0:
            raise NotFoundError("Student not found.")
        logger.info(f"Student {student_id} deleted.")

    async def import_students(self, rows: List[StudentImportRow]) -> StudentImportResult:
        """
        Adds many students at once. Rows are skipped, with a reason, when the
        matricule is repeated in the batch or already on the roster, or when
        the field or level is not one of the configured fields.
        """
        try:
            fields = await self.db_client.get_fields()
            existing = await self.db_client.get_students()
        except Exception as e:
            logger.error("Error loading reference data for the student import.", exc_info=True)
            raise ServiceError("A server error occurred while importing students.") from e

        levels_by_field = {field.name: field.levels for field in fields}
        known_matricules = {student.matricule for student in existing}

        to_add: List[Student] = []
        skipped: List[SkippedImportRow] = []
        for row in rows:
            if row.matricule in known_matricules:
                skipped.append(SkippedImportRow(matricule=row.matricule, reason="Duplicate matricule"))
                continue
            if levels_by_field:
                if row.field not in levels_by_field:
                    skipped.append(SkippedImportRow(matricule=row.matricule, reason=f"Unknown field '{row.field}'"))
                    continue
                if row.level not in levels_by_field[row.field]:
                    skipped.append(SkippedImportRow(matricule=row.matricule, reason=f"Unknown level '{row.level}' for {row.field}"))
                    continue
            known_matricules.add(row.matricule)
            to_add.append(Student(id=str(uuid4()), **row.model_dump()))

        try:
            await self.db_client.add_students(to_add)
        except Exception as e:
            logger.error("Error saving imported students.", exc_info=True)
            raise ServiceError("A server error occurred while importing students.") from e

        logger.info(f"Student import finished: {len(to_add)} imported, {len(skipped)} skipped.")
        return StudentImportResult(imported=len(to_add), skipped=skipped)

    # ===== Fields =====

    async def list_fields(self) -> List[Field]:
        try:
            return await self.db_client.get_fields()
        except Exception as e:
            logger.error("Error reading fields.", exc_info=True)
            raise ServiceError("A server error occurred while reading fields.") from e

    async def _ensure_unique_code(self, code: str, own_id: Optional[str] = None):
        try:
            holder = await self.db_client.get_field_by_code(code)
        except Exception as e:
            logger.error(f"Error checking field code '{code}'.", exc_info=True)
            raise ServiceError("A server error occurred while checking the field code.") from e
        if holder is not None and holder.id != own_id:
            raise ServiceError(f"A field with code '{code}' already exists.")

    async def add_field(self, name: str, code: str, description: Optional[str] = None, levels: Optional[List[str]] = None) -> Field:
        code = code.strip().upper()
        await self._ensure_unique_code(code)
        field = Field(id=str(uuid4()), name=name, code=code, description=description, levels=levels or list(DEFAULT_LEVELS))
        try:
            await self.db_client.add_field(field)
            logger.info(f"Field '{name}' ({code}) added.")
            return field
        except Exception as e:
            logger.error(f"Error adding field '{name}'.", exc_info=True)
            raise ServiceError("A server error occurred while adding the field.") from e

    async def update_field(self, field_id: str, name: str, code: str, description: Optional[str] = None, levels: Optional[List[str]] = None) -> Field:
        try:
            current = await self.db_client.get_field(field_id)
        except Exception as e:
            logger.error(f"Error reading field {field_id}.", exc_info=True)
            raise ServiceError("A server error occurred while reading the field.") from e
        if current is None:
            raise NotFoundError("Field not found.")

        code = code.strip().upper()
        await self._ensure_unique_code(code, own_id=field_id)
        field = Field(
            id=field_id, name=name, code=code, description=description,
            levels=levels or current.levels, total_students=current.total_students
        )
        try:
            result = await self.db_client.update_field(field)
        except Exception as e:
            logger.error(f"Error updating field {field_id}.", exc_info=True)
            raise ServiceError("A server error occurred while updating the field.") from e
        if affected_rows(result) == 0:
            raise NotFoundError("Field not found.")
        logger.info(f"Field {field_id} updated.")
        return field

    async def delete_field(self, field_id: str):
        try:
            result = await self.db_client.delete_field(field_id)
        except Exception as e:
            logger.error(f"Error deleting field {field_id}.", exc_info=True)
            raise ServiceError("A server error occurred while deleting the field.") from e
        if affected_rows(result) == 0:
            raise NotFoundError("Field not found.")
        logger.info(f"Field {field_id} deleted.")
