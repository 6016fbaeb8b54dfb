# tests/modules/test_notifications.py

from rollcall.backend.config.config import settings
from rollcall.backend.modules.notifications import build_parent_sms


def test_parent_sms_names_child_course_and_slot():
    message = build_parent_sms("Jane Doe", "Mr. Doe", "Computer Science", "Database Systems", "08:00 - 10:00")

    assert message.startswith("Hello Mr. Doe,")
    assert "your child Jane Doe from Computer Science was absent from Database Systems class today at 08:00 - 10:00." in message
    assert settings.SCHOOL_NAME in message
    assert message.endswith(settings.SMS_SIGNATURE)
