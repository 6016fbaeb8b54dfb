import logging
from datetime import date
from typing import Any, Dict, List, Optional, Set, Tuple
import asyncpg
from ..models.db_models import (
    AbsenteeRecord, AdminUser, AttendanceRecord, DashboardStats, Field,
    FieldAttendanceSummary, FieldStats, SessionCompletion, Student,
    TimetableEntry, TopAbsenteeField,
)

logger = logging.getLogger(__name__)

STUDENT_COLUMNS = "id, name, matricule, field, level, parent_name, parent_phone, parent_email, photo"
TIMETABLE_COLUMNS = "id, day, time_slot, course, field, level, room, lecturer"
ADMIN_COLUMNS = "id, name, email, phone, department, role, employee_id, created_at"


def affected_rows(status: str) -> int:
    """Row count from an asyncpg command status such as 'UPDATE 1'."""
    try:
        return int(str(status).split()[-1])
    except (ValueError, IndexError, AttributeError):
        return 0


class AsyncPostgresClient:
    """
    PostgreSQL client that owns every database operation of the rollcall backend.
    """
    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    # ===== Timetable =====

    async def get_timetable(self, field: Optional[str] = None) -> List[TimetableEntry]:
        """Returns timetable entries in day and time order, optionally for one field."""
        query = f"""
            SELECT {TIMETABLE_COLUMNS} FROM TimetableEntries
            WHERE ($1::text IS NULL OR field = $1)
            ORDER BY array_position(ARRAY['Monday','Tuesday','Wednesday','Thursday','Friday'], day), time_slot, field;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, field)
            return [TimetableEntry(**record) for record in records]

    async def get_timetable_entry(self, entry_id: str) -> Optional[TimetableEntry]:
        query = f"SELECT {TIMETABLE_COLUMNS} FROM TimetableEntries WHERE id = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, entry_id)
            return TimetableEntry(**record) if record else None

    async def add_timetable_entry(self, entry: TimetableEntry):
        query = f"""
            INSERT INTO TimetableEntries ({TIMETABLE_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8);
        """
        async with self._pool.acquire() as connection:
            await connection.execute(
                query, entry.id, entry.day, entry.time_slot, entry.course,
                entry.field, entry.level, entry.room, entry.lecturer
            )

    async def update_timetable_entry(self, entry: TimetableEntry) -> str:
        query = """
            UPDATE TimetableEntries
            SET day = $2, time_slot = $3, course = $4, field = $5, level = $6, room = $7, lecturer = $8
            WHERE id = $1;
        """
        async with self._pool.acquire() as connection:
            return await connection.execute(
                query, entry.id, entry.day, entry.time_slot, entry.course,
                entry.field, entry.level, entry.room, entry.lecturer
            )

    async def delete_timetable_entry(self, entry_id: str) -> str:
        async with self._pool.acquire() as connection:
            return await connection.execute("DELETE FROM TimetableEntries WHERE id = $1;", entry_id)

    # ===== Students =====

    async def get_students(self, field: Optional[str] = None, level: Optional[str] = None, search: Optional[str] = None) -> List[Student]:
        """Lists the roster. `search` matches name, matricule or parent name, case-insensitively."""
        query = f"""
            SELECT {STUDENT_COLUMNS} FROM Students
            WHERE ($1::text IS NULL OR field = $1)
              AND ($2::text IS NULL OR level = $2)
              AND ($3::text IS NULL OR name ILIKE '%' || $3 || '%'
                   OR matricule ILIKE '%' || $3 || '%'
                   OR parent_name ILIKE '%' || $3 || '%')
            ORDER BY field, level, name;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, field, level, search)
            return [Student(**record) for record in records]

    async def get_student(self, student_id: str) -> Optional[Student]:
        query = f"SELECT {STUDENT_COLUMNS} FROM Students WHERE id = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, student_id)
            return Student(**record) if record else None

    async def get_students_by_ids(self, student_ids: List[str]) -> List[Student]:
        if not student_ids:
            return []
        query = f"SELECT {STUDENT_COLUMNS} FROM Students WHERE id = ANY($1);"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, student_ids)
            return [Student(**record) for record in records]

    async def get_student_by_matricule(self, matricule: str) -> Optional[Student]:
        query = f"SELECT {STUDENT_COLUMNS} FROM Students WHERE matricule = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, matricule)
            return Student(**record) if record else None

    async def add_students(self, students: List[Student]):
        """Adds students. Rows whose matricule already exists are left untouched."""
        if not students:
            return
        query = f"""
            INSERT INTO Students ({STUDENT_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            ON CONFLICT (matricule) DO NOTHING;
        """
        student_data = [(
            s.id, s.name, s.matricule, s.field, s.level,
            s.parent_name, s.parent_phone, s.parent_email, s.photo
        ) for s in students]
        async with self._pool.acquire() as connection:
            await connection.executemany(query, student_data)

    async def update_student(self, student: Student) -> str:
        query = """
            UPDATE Students
            SET name = $2, matricule = $3, field = $4, level = $5,
                parent_name = $6, parent_phone = $7, parent_email = $8, photo = $9
            WHERE id = $1;
        """
        async with self._pool.acquire() as connection:
            return await connection.execute(
                query, student.id, student.name, student.matricule, student.field, student.level,
                student.parent_name, student.parent_phone, student.parent_email, student.photo
            )

    async def delete_student(self, student_id: str) -> str:
        async with self._pool.acquire() as connection:
            return await connection.execute("DELETE FROM Students WHERE id = $1;", student_id)

    # ===== Fields =====

    async def get_fields(self) -> List[Field]:
        query = """
            SELECT f.id, f.name, f.code, f.description, f.levels,
                   COUNT(s.id)::int AS total_students
            FROM Fields f
            LEFT JOIN Students s ON s.field = f.name
            GROUP BY f.id
            ORDER BY f.name;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query)
            return [Field(**record) for record in records]

    async def get_field(self, field_id: str) -> Optional[Field]:
        query = """
            SELECT f.id, f.name, f.code, f.description, f.levels,
                   (SELECT COUNT(*)::int FROM Students s WHERE s.field = f.name) AS total_students
            FROM Fields f WHERE f.id = $1;
        """
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, field_id)
            return Field(**record) if record else None

    async def get_field_by_code(self, code: str) -> Optional[Field]:
        query = "SELECT id, name, code, description, levels FROM Fields WHERE code = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, code)
            return Field(**record) if record else None

    async def add_field(self, field: Field):
        query = "INSERT INTO Fields (id, name, code, description, levels) VALUES ($1, $2, $3, $4, $5);"
        async with self._pool.acquire() as connection:
            await connection.execute(query, field.id, field.name, field.code, field.description, field.levels)

    async def update_field(self, field: Field) -> str:
        query = "UPDATE Fields SET name = $2, code = $3, description = $4, levels = $5 WHERE id = $1;"
        async with self._pool.acquire() as connection:
            return await connection.execute(query, field.id, field.name, field.code, field.description, field.levels)

    async def delete_field(self, field_id: str) -> str:
        async with self._pool.acquire() as connection:
            return await connection.execute("DELETE FROM Fields WHERE id = $1;", field_id)

    # ===== Attendance =====

    async def upsert_attendance_record(self, record: AttendanceRecord) -> str:
        """
        Inserts the record, or updates the existing row for the same
        (session_id, student_id, attendance_date). Returns 'inserted' or 'updated'.
        """
        query = """
            INSERT INTO Attendance (session_id, student_id, is_present, recorded_at, attendance_date,
                                    course_title, course_code, field_name, level, room, lecturer)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
            ON CONFLICT (session_id, student_id, attendance_date) DO UPDATE SET
                is_present = EXCLUDED.is_present,
                recorded_at = EXCLUDED.recorded_at,
                course_title = EXCLUDED.course_title,
                course_code = EXCLUDED.course_code,
                field_name = EXCLUDED.field_name,
                level = EXCLUDED.level,
                room = EXCLUDED.room,
                lecturer = EXCLUDED.lecturer
            RETURNING (xmax = 0) AS inserted;
        """
        async with self._pool.acquire() as connection:
            inserted = await connection.fetchval(
                query, record.session_id, record.student_id, record.is_present, record.timestamp,
                record.attendance_date, record.course_title, record.course_code, record.field_name,
                record.level, record.room, record.lecturer
            )
            return "inserted" if inserted else "updated"

    async def get_attendance_records(self, session_id: str, attendance_date: date) -> List[AttendanceRecord]:
        query = """
            SELECT session_id, student_id, is_present, recorded_at AS timestamp, attendance_date,
                   course_title, course_code, field_name, level, room, lecturer
            FROM Attendance WHERE session_id = $1 AND attendance_date = $2;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, session_id, attendance_date)
            return [AttendanceRecord(**record) for record in records]

    # ===== Session completion =====

    async def add_session_completion(self, completion: SessionCompletion) -> bool:
        """Records a completion. Returns False if the session was already completed for that date."""
        query = """
            INSERT INTO SessionCompletions (session_id, session_date, completed_by, completed_at)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (session_id, session_date) DO NOTHING
            RETURNING session_id;
        """
        async with self._pool.acquire() as connection:
            inserted = await connection.fetchval(
                query, completion.session_id, completion.session_date,
                completion.completed_by, completion.completed_at
            )
            return inserted is not None

    async def get_completed_session_ids(self, session_date: date) -> Set[str]:
        query = "SELECT session_id FROM SessionCompletions WHERE session_date = $1;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, session_date)
            return {record["session_id"] for record in records}

    async def is_session_completed(self, session_id: str, session_date: date) -> bool:
        query = "SELECT EXISTS (SELECT 1 FROM SessionCompletions WHERE session_id = $1 AND session_date = $2);"
        async with self._pool.acquire() as connection:
            return await connection.fetchval(query, session_id, session_date)

    # ===== Reports =====

    async def get_absentee_report(self, date_from: date, date_to: date, field: Optional[str] = None,
                                  level: Optional[str] = None, course: Optional[str] = None,
                                  student_name: Optional[str] = None, matricule: Optional[str] = None) -> List[AbsenteeRecord]:
        """Absent rows in the date range joined with the student's parent contact details."""
        query = """
            SELECT
                a.id::text AS id,
                s.name AS student_name,
                s.matricule,
                s.field AS field_name,
                s.level,
                COALESCE(NULLIF(a.course_title, ''), 'Unknown Course') AS course_title,
                COALESCE(NULLIF(a.course_code, ''), 'N/A') AS course_code,
                s.parent_name,
                s.parent_phone,
                s.parent_email,
                a.recorded_at AS date,
                a.session_id,
                to_char(a.recorded_at, 'HH24:MI') || ' - ' || to_char(a.recorded_at + interval '2 hours', 'HH24:MI') AS time_slot
            FROM Attendance a
            JOIN Students s ON a.student_id = s.id
            WHERE a.is_present = FALSE
              AND a.attendance_date BETWEEN $1 AND $2
              AND ($3::text IS NULL OR s.field = $3)
              AND ($4::text IS NULL OR s.level = $4)
              AND ($5::text IS NULL OR a.course_title ILIKE '%' || $5 || '%')
              AND ($6::text IS NULL OR s.name ILIKE '%' || $6 || '%')
              AND ($7::text IS NULL OR s.matricule ILIKE '%' || $7 || '%')
            ORDER BY a.recorded_at DESC, s.field, s.name;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, date_from, date_to, field, level, course, student_name, matricule)
            return [AbsenteeRecord(**record) for record in records]

    async def get_dashboard_stats(self, today: date, week: Tuple[date, date], month: Tuple[date, date]) -> DashboardStats:
        """Aggregate counts plus per-field rollups for `today`."""
        field_stats_query = """
            SELECT
                s.field AS field_name,
                COUNT(DISTINCT s.id)::int AS total_students,
                COALESCE(SUM(CASE WHEN a.is_present AND a.attendance_date = $1 THEN 1 ELSE 0 END), 0)::int AS present_today,
                COALESCE(SUM(CASE WHEN NOT a.is_present AND a.attendance_date = $1 THEN 1 ELSE 0 END), 0)::int AS absent_today,
                CASE
                    WHEN COUNT(CASE WHEN a.attendance_date = $1 THEN 1 END) > 0 THEN
                        ROUND(SUM(CASE WHEN a.is_present AND a.attendance_date = $1 THEN 1 ELSE 0 END) * 100.0
                              / COUNT(CASE WHEN a.attendance_date = $1 THEN 1 END), 2)::float8
                    ELSE 100.0::float8
                END AS attendance_rate
            FROM Students s
            LEFT JOIN Attendance a ON s.id = a.student_id
            GROUP BY s.field
            ORDER BY attendance_rate DESC;
        """
        top_absentee_query = """
            SELECT * FROM (
                SELECT
                    s.field AS field_name,
                    COUNT(DISTINCT s.id)::int AS total_students,
                    COALESCE(SUM(CASE WHEN NOT a.is_present AND a.attendance_date = $1 THEN 1 ELSE 0 END), 0)::int AS absentee_count,
                    CASE
                        WHEN COUNT(CASE WHEN a.attendance_date = $1 THEN 1 END) > 0 THEN
                            ROUND(SUM(CASE WHEN NOT a.is_present AND a.attendance_date = $1 THEN 1 ELSE 0 END) * 100.0
                                  / COUNT(CASE WHEN a.attendance_date = $1 THEN 1 END), 2)::float8
                        ELSE 0.0::float8
                    END AS absentee_rate
                FROM Students s
                LEFT JOIN Attendance a ON s.id = a.student_id
                GROUP BY s.field
            ) per_field
            WHERE absentee_count > 0
            ORDER BY absentee_rate DESC, absentee_count DESC
            LIMIT 5;
        """
        absences_query = "SELECT COUNT(*) FROM Attendance WHERE is_present = FALSE AND attendance_date BETWEEN $1 AND $2;"
        async with self._pool.acquire() as connection:
            total_students = await connection.fetchval("SELECT COUNT(*) FROM Students;")
            total_fields = await connection.fetchval("SELECT COUNT(DISTINCT field) FROM Students;")
            today_absentees = await connection.fetchval(absences_query, today, today)
            weekly_absentees = await connection.fetchval(absences_query, week[0], week[1])
            monthly_absentees = await connection.fetchval(absences_query, month[0], month[1])
            field_stats = await connection.fetch(field_stats_query, today)
            top_fields = await connection.fetch(top_absentee_query, today)

        return DashboardStats(
            total_students=total_students,
            total_fields=total_fields,
            today_absentees=today_absentees,
            weekly_absentees=weekly_absentees,
            monthly_absentees=monthly_absentees,
            field_stats=[FieldStats(**record) for record in field_stats],
            top_absentee_fields=[TopAbsenteeField(**record) for record in top_fields],
        )

    async def get_field_attendance_summary(self, date_from: date, date_to: date) -> List[FieldAttendanceSummary]:
        query = """
            SELECT
                s.field AS field_name,
                COUNT(DISTINCT s.id)::int AS total_students,
                COALESCE(SUM(CASE WHEN a.is_present THEN 1 ELSE 0 END), 0)::int AS present_count,
                COALESCE(SUM(CASE WHEN NOT a.is_present THEN 1 ELSE 0 END), 0)::int AS absent_count,
                CASE
                    WHEN COUNT(a.id) > 0 THEN
                        ROUND(SUM(CASE WHEN a.is_present THEN 1 ELSE 0 END) * 100.0 / COUNT(a.id), 2)::float8
                    ELSE 100.0::float8
                END AS attendance_rate
            FROM Students s
            LEFT JOIN Attendance a ON s.id = a.student_id AND a.attendance_date BETWEEN $1 AND $2
            GROUP BY s.field
            ORDER BY attendance_rate DESC;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, date_from, date_to)
            return [FieldAttendanceSummary(**record) for record in records]

    async def get_student_absence_rows(self, date_from: date, date_to: date) -> List[Dict[str, Any]]:
        """
        One row per (student, absence) in the range; students without absences
        appear once with NULL absence columns.
        """
        query = """
            SELECT
                s.id AS student_id, s.name AS student_name, s.matricule, s.field, s.level,
                a.course_title, a.course_code, a.attendance_date, a.recorded_at
            FROM Students s
            LEFT JOIN Attendance a ON s.id = a.student_id
                AND a.is_present = FALSE
                AND a.attendance_date BETWEEN $1 AND $2
            ORDER BY s.name, a.recorded_at DESC;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, date_from, date_to)
            return [dict(record) for record in records]

    # ===== Admin users =====

    async def get_admin_with_password_hash(self, email: str) -> Optional[Tuple[AdminUser, str]]:
        query = f"SELECT {ADMIN_COLUMNS}, password_hash FROM AdminUsers WHERE email = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, email)
            if not record:
                return None
            data = dict(record)
            password_hash = data.pop("password_hash")
            return AdminUser(**data), password_hash

    async def get_admins(self) -> List[AdminUser]:
        query = f"SELECT {ADMIN_COLUMNS} FROM AdminUsers ORDER BY created_at DESC;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query)
            return [AdminUser(**record) for record in records]

    async def get_admin(self, admin_id: str) -> Optional[AdminUser]:
        query = f"SELECT {ADMIN_COLUMNS} FROM AdminUsers WHERE id = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, admin_id)
            return AdminUser(**record) if record else None

    async def add_admin(self, admin: AdminUser, password_hash: str) -> bool:
        """Adds an admin. Returns False if the email is already registered."""
        query = f"""
            INSERT INTO AdminUsers ({ADMIN_COLUMNS}, password_hash)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            ON CONFLICT (email) DO NOTHING
            RETURNING id;
        """
        async with self._pool.acquire() as connection:
            inserted = await connection.fetchval(
                query, admin.id, admin.name, admin.email, admin.phone, admin.department,
                admin.role, admin.employee_id, admin.created_at, password_hash
            )
            return inserted is not None

    async def delete_admin(self, admin_id: str) -> str:
        async with self._pool.acquire() as connection:
            return await connection.execute("DELETE FROM AdminUsers WHERE id = $1;", admin_id)
