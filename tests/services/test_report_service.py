import pytest
import pytest_asyncio
from datetime import date, datetime
from unittest.mock import AsyncMock

from rollcall.backend.services.report_service import ReportService, ABSENCE_HOURS_PER_SESSION
from rollcall.backend.services.errors import ServiceError
from rollcall.backend.models.db_models import DashboardStats

TODAY = date(2025, 2, 12)

@pytest_asyncio.fixture
async def service_instance():
    mock_db_client = AsyncMock()
    return ReportService(db_client=mock_db_client), mock_db_client


def absence_row(student_id, name, course=None, on=None, at=None):
    return {
        "student_id": student_id, "student_name": name, "matricule": f"M-{student_id}",
        "field": "CS", "level": "Level 200", "course_title": course,
        "course_code": "".join(w[0] for w in course.split()) if course else None,
        "attendance_date": on, "recorded_at": at,
    }


@pytest.mark.asyncio
class TestReportService:

    async def test_absentee_report_resolves_weekly_range(self, service_instance):
        service, mock_db_client = service_instance
        mock_db_client.get_absentee_report.return_value = []

        await service.absentee_report(TODAY, "weekly", field="CS", matricule="CS0")

        mock_db_client.get_absentee_report.assert_awaited_once_with(
            date(2025, 2, 10), date(2025, 2, 16), "CS", None, None, None, "CS0"
        )

    async def test_inverted_custom_range_is_a_service_error(self, service_instance):
        service, mock_db_client = service_instance

        with pytest.raises(ServiceError, match="date_from"):
            await service.absentee_report(TODAY, "custom", date(2025, 3, 1), date(2025, 2, 1))
        mock_db_client.get_absentee_report.assert_not_called()

    async def test_dashboard_uses_week_and_month_bounds(self, service_instance):
        service, mock_db_client = service_instance
        stats = DashboardStats(total_students=0, total_fields=0, today_absentees=0, weekly_absentees=0, monthly_absentees=0)
        mock_db_client.get_dashboard_stats.return_value = stats

        assert await service.dashboard_stats(TODAY) == stats
        mock_db_client.get_dashboard_stats.assert_awaited_once_with(
            TODAY, (date(2025, 2, 10), date(2025, 2, 16)), (date(2025, 2, 1), date(2025, 2, 28))
        )

    async def test_field_summary_database_error_is_wrapped(self, service_instance):
        service, mock_db_client = service_instance
        mock_db_client.get_field_attendance_summary.side_effect = Exception("boom")

        with pytest.raises(ServiceError):
            await service.field_attendance_summary(TODAY)

    async def test_student_absentee_hours_groups_and_sorts(self, service_instance):
        service, mock_db_client = service_instance
        mock_db_client.get_student_absence_rows.return_value = [
            absence_row("s1", "Alice"),
            absence_row("s2", "Bob", "Database Systems", date(2025, 2, 3), datetime(2025, 2, 3, 8, 0)),
            absence_row("s2", "Bob", "Networks", date(2025, 2, 4), datetime(2025, 2, 4, 13, 30)),
            absence_row("s3", "Carol", "Networks", date(2025, 2, 4), datetime(2025, 2, 4, 13, 30)),
        ]

        report = await service.student_absentee_hours(TODAY)

        assert [r.student_name for r in report] == ["Bob", "Carol", "Alice"]
        bob = report[0]
        assert bob.total_absent_hours == 2 * ABSENCE_HOURS_PER_SESSION
        assert [s.course for s in bob.absent_sessions] == ["Database Systems", "Networks"]
        assert bob.absent_sessions[1].time_slot == "13:30 - 15:30"
        assert bob.absent_sessions[1].duration == ABSENCE_HOURS_PER_SESSION
        assert report[2].total_absent_hours == 0
        assert report[2].absent_sessions == []
        mock_db_client.get_student_absence_rows.assert_awaited_once_with(date(2025, 2, 1), date(2025, 2, 28))
