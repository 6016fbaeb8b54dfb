# tests/modules/test_conflict_checker.py

from rollcall.backend.models.db_models import TimetableEntry
from rollcall.backend.modules.conflict_checker import check_timetable_conflict, find_room_conflict, find_field_conflict

EXISTING = [
    TimetableEntry(id="tt-1", day="Monday", time_slot="08:00 - 10:00", course="DB",
                   field="CS", level="Level 200", room="101", lecturer="Dr. Codd"),
]

def candidate(**overrides) -> TimetableEntry:
    values = dict(id="new", day="Monday", time_slot="08:00 - 10:00", course="DB",
                  field="CS", level="Level 200", room="101", lecturer="Dr. Codd")
    values.update(overrides)
    return TimetableEntry(**values)


def test_same_room_for_another_field_is_a_room_conflict():
    message = check_timetable_conflict(candidate(field="SE", course="Networks"), EXISTING)
    assert message == "Room conflict: 101 is already occupied at Monday 08:00 - 10:00 by DB (CS)"

def test_different_course_for_same_field_is_a_field_conflict():
    message = check_timetable_conflict(candidate(course="Algorithms", room="202"), EXISTING)
    assert message == (
        "Field conflict: CS already has a different class (DB) at Monday 08:00 - 10:00. "
        "Only common courses can share time slots."
    )

def test_room_conflict_is_reported_before_field_conflict():
    message = check_timetable_conflict(candidate(course="Algorithms"), EXISTING)
    assert message.startswith("Room conflict")

def test_editing_an_entry_does_not_conflict_with_itself():
    assert check_timetable_conflict(candidate(id="tt-1", lecturer="Dr. Date"), EXISTING, exclude_id="tt-1") is None

def test_same_course_for_same_field_in_another_room_is_allowed():
    assert check_timetable_conflict(candidate(room="202"), EXISTING) is None

def test_other_slots_never_conflict():
    assert check_timetable_conflict(candidate(time_slot="10:00 - 12:00"), EXISTING) is None
    assert check_timetable_conflict(candidate(day="Tuesday"), EXISTING) is None

def test_finders_return_the_conflicting_entry():
    assert find_room_conflict(candidate(field="SE"), EXISTING).id == "tt-1"
    assert find_field_conflict(candidate(course="Algorithms"), EXISTING).id == "tt-1"
    assert find_field_conflict(candidate(course="Algorithms"), EXISTING, exclude_id="tt-1") is None
