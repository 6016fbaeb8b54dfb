# rollcall/backend/modules/notifications.py

from ..config.config import settings


def build_parent_sms(student_name: str, parent_name: str, field_name: str, course_title: str, time_slot: str) -> str:
    """Text sent to a parent when their child is marked absent."""
    return (
        f"Hello {parent_name},\n\n"
        f"Greetings from {settings.SCHOOL_NAME}.\n\n"
        f"We would like to inform you that your child {student_name} from {field_name} "
        f"was absent from {course_title} class today at {time_slot}.\n\n"
        f"Please ensure regular attendance for better academic performance.\n\n"
        f"Best regards,\n"
        f"{settings.SMS_SIGNATURE}"
    )
