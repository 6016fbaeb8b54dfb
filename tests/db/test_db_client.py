import os
import pytest
import pytest_asyncio
import asyncpg
from datetime import date, datetime
from pathlib import Path
from typing import List

from rollcall.backend.models.db_models import Student, Field, TimetableEntry, AttendanceRecord, SessionCompletion, AdminUser
from rollcall.backend.db.db_client import AsyncPostgresClient, affected_rows

# ----- Test database connection details -----
# Point this at a disposable database; every table is emptied before each test.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")
SCHEMA_PATH = Path(__file__).resolve().parents[2] / "rollcall" / "backend" / "db" / "schema.sql"

pytestmark = pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL is not set")

@pytest_asyncio.fixture(scope="function")
async def db_pool():
    """Creates a connection pool for each test function and makes sure the schema exists."""
    pool = await asyncpg.create_pool(TEST_DATABASE_URL)
    async with pool.acquire() as connection:
        await connection.execute(SCHEMA_PATH.read_text())
    yield pool
    await pool.close()

@pytest_asyncio.fixture
async def db_client(db_pool) -> AsyncPostgresClient:
    """Empties the tables before each test for isolation."""
    async with db_pool.acquire() as connection:
        await connection.execute(
            "TRUNCATE TABLE Attendance, SessionCompletions, TimetableEntries, Students, Fields, AdminUsers RESTART IDENTITY CASCADE;"
        )
    return AsyncPostgresClient(pool=db_pool)

# ===== Helpers & sample data =====

def create_sample_students() -> List[Student]:
    return [
        Student(id="s1", name="Jane Doe", matricule="CS001", field="CS", level="Level 200",
                parent_name="Mr. Doe", parent_phone="+237600000001"),
        Student(id="s2", name="John Roe", matricule="CS002", field="CS", level="Level 200",
                parent_name="Mrs. Roe", parent_phone="+237600000002"),
        Student(id="s3", name="Ann Poe", matricule="SE001", field="SE", level="Level 100",
                parent_name="Mr. Poe", parent_phone="+237600000003"),
    ]

def create_record(student_id: str, is_present: bool, on: date = date(2025, 3, 3), hour: int = 8) -> AttendanceRecord:
    return AttendanceRecord(
        session_id="CS-Level-200-Monday-08:00---10:00", student_id=student_id, is_present=is_present,
        timestamp=datetime(on.year, on.month, on.day, hour, 5), attendance_date=on,
        course_title="Database Systems", course_code="DS", field_name="CS", level="Level 200",
        room="101", lecturer="Dr. Codd"
    )

# ===== Test scenarios =====

@pytest.mark.asyncio
class TestTimetable:

    async def test_add_get_update_delete(self, db_client: AsyncPostgresClient):
        entry = TimetableEntry(id="tt-1", day="Monday", time_slot="08:00 - 10:00", course="DB",
                               field="CS", level="Level 200", room="101", lecturer="Dr. Codd")
        await db_client.add_timetable_entry(entry)

        assert await db_client.get_timetable() == [entry]
        assert await db_client.get_timetable("SE") == []

        entry.room = "202"
        assert affected_rows(await db_client.update_timetable_entry(entry)) == 1
        assert (await db_client.get_timetable_entry("tt-1")).room == "202"

        assert affected_rows(await db_client.delete_timetable_entry("tt-1")) == 1
        assert await db_client.get_timetable_entry("tt-1") is None


@pytest.mark.asyncio
class TestStudentsAndFields:

    async def test_duplicate_matricule_is_ignored(self, db_client: AsyncPostgresClient):
        students = create_sample_students()
        await db_client.add_students(students)
        await db_client.add_students([students[0].model_copy(update={"id": "s9", "name": "Impostor"})])

        assert len(await db_client.get_students()) == 3
        assert (await db_client.get_student_by_matricule("CS001")).id == "s1"

    async def test_student_filters(self, db_client: AsyncPostgresClient):
        await db_client.add_students(create_sample_students())

        assert {s.id for s in await db_client.get_students(field="CS")} == {"s1", "s2"}
        assert [s.id for s in await db_client.get_students(level="Level 100")] == ["s3"]
        assert [s.id for s in await db_client.get_students(search="roe")] == ["s2"]
        assert {s.id for s in await db_client.get_students_by_ids(["s1", "s3", "missing"])} == {"s1", "s3"}

    async def test_fields_carry_student_counts(self, db_client: AsyncPostgresClient):
        await db_client.add_students(create_sample_students())
        await db_client.add_field(Field(id="f1", name="CS", code="CS"))

        fields = await db_client.get_fields()
        assert fields[0].total_students == 2
        assert fields[0].levels == ["Level 100", "Level 200"]
        assert (await db_client.get_field_by_code("CS")).id == "f1"


@pytest.mark.asyncio
class TestAttendance:

    async def test_upsert_inserts_then_updates(self, db_client: AsyncPostgresClient):
        await db_client.add_students(create_sample_students())

        assert await db_client.upsert_attendance_record(create_record("s1", False)) == "inserted"
        assert await db_client.upsert_attendance_record(create_record("s1", True)) == "updated"

        records = await db_client.get_attendance_records("CS-Level-200-Monday-08:00---10:00", date(2025, 3, 3))
        assert len(records) == 1
        assert records[0].is_present is True

    async def test_session_completion_is_recorded_once(self, db_client: AsyncPostgresClient):
        completion = SessionCompletion(session_id="x", session_date=date(2025, 3, 3),
                                       completed_by="a1", completed_at=datetime(2025, 3, 3, 9, 0))

        assert await db_client.add_session_completion(completion) is True
        assert await db_client.add_session_completion(completion) is False
        assert await db_client.is_session_completed("x", date(2025, 3, 3)) is True
        assert await db_client.is_session_completed("x", date(2025, 3, 4)) is False
        assert await db_client.get_completed_session_ids(date(2025, 3, 3)) == {"x"}


@pytest.mark.asyncio
class TestReports:

    async def test_absentee_report_and_dashboard(self, db_client: AsyncPostgresClient):
        await db_client.add_students(create_sample_students())
        await db_client.upsert_attendance_record(create_record("s1", True))
        await db_client.upsert_attendance_record(create_record("s2", False))

        absentees = await db_client.get_absentee_report(date(2025, 3, 1), date(2025, 3, 31))
        assert [a.student_name for a in absentees] == ["John Roe"]
        assert absentees[0].parent_phone == "+237600000002"
        assert await db_client.get_absentee_report(date(2025, 3, 1), date(2025, 3, 31), course="network") == []

        stats = await db_client.get_dashboard_stats(date(2025, 3, 3), (date(2025, 3, 3), date(2025, 3, 9)), (date(2025, 3, 1), date(2025, 3, 31)))
        assert stats.total_students == 3
        assert stats.total_fields == 2
        assert stats.today_absentees == 1
        by_field = {f.field_name: f for f in stats.field_stats}
        assert by_field["CS"].attendance_rate == 50.0
        assert by_field["SE"].attendance_rate == 100.0
        assert [f.field_name for f in stats.top_absentee_fields] == ["CS"]

    async def test_student_absence_rows(self, db_client: AsyncPostgresClient):
        await db_client.add_students(create_sample_students())
        await db_client.upsert_attendance_record(create_record("s2", False))

        rows = await db_client.get_student_absence_rows(date(2025, 3, 1), date(2025, 3, 31))
        by_student = {row["student_id"]: row for row in rows}
        assert by_student["s2"]["course_code"] == "DS"
        assert by_student["s1"]["attendance_date"] is None


@pytest.mark.asyncio
class TestAdmins:

    async def test_admin_round_trip(self, db_client: AsyncPostgresClient):
        admin = AdminUser(id="a1", name="DM", email="dm@example.com", department="Discipline",
                          employee_id="E001", created_at=datetime(2025, 1, 1))

        assert await db_client.add_admin(admin, "pbkdf2:sha256:1000$salt$digest") is True
        assert await db_client.add_admin(admin.model_copy(update={"id": "a2"}), "x") is False

        found_admin, password_hash = await db_client.get_admin_with_password_hash("dm@example.com")
        assert found_admin == admin
        assert password_hash == "pbkdf2:sha256:1000$salt$digest"
        assert affected_rows(await db_client.delete_admin("a1")) == 1
        assert await db_client.get_admins() == []
