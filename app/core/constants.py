import enum


class Status(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class UpdateType(str, enum.Enum):
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class RoleName(str, enum.Enum):
    ADMINISTRATOR = "ADMINISTRATOR"
    EMPLOYEE = "EMPLOYEE"


def status_label(status: Status) -> str:
    """Render a status the way API responses show it."""
    return "Active" if status == Status.ACTIVE else "Inactive"
