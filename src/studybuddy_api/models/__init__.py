"""ORM model registry: import all models so Alembic autogenerate discovers them."""

from studybuddy_api.models.audit_log import AdminAuditLog, AuditAction, TargetType
from studybuddy_api.models.characteristic_profile import CharacteristicProfile, QuizStatus
from studybuddy_api.models.course import Course, course_enrollments
from studybuddy_api.models.expert_profile import ExpertProfile
from studybuddy_api.models.study_group import StudyGroup, group_members
from studybuddy_api.models.user import Role, User

__all__ = [
    "AdminAuditLog",
    "AuditAction",
    "CharacteristicProfile",
    "Course",
    "ExpertProfile",
    "QuizStatus",
    "Role",
    "StudyGroup",
    "TargetType",
    "User",
    "course_enrollments",
    "group_members",
]
