import enum


class UserRole(str, enum.Enum):
    USER = "USER"
    APPROVER = "APPROVER"
    ADMIN = "ADMIN"


APPROVER_ROLES = (UserRole.APPROVER, UserRole.ADMIN)
