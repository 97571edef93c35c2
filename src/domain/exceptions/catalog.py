"""Course and user lookup exceptions."""

from .base import DomainException


class CourseNotFoundException(DomainException):
    """Raised when a course cannot be found."""

    def __init__(self, course_id: str):
        super().__init__(
            message=f"Course not found: {course_id}",
            code="COURSE_NOT_FOUND",
        )
        self.course_id = course_id


class UserNotFoundException(DomainException):
    """Raised when a user cannot be found."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User not found: {user_id}",
            code="USER_NOT_FOUND",
        )
        self.user_id = user_id


class MissingUserIdentityException(DomainException):
    """Raised when a request carries no caller identity."""

    def __init__(self):
        super().__init__(
            message="Missing X-User-ID header",
            code="UNAUTHENTICATED",
        )


class EmiNotAvailableException(DomainException):
    """Raised when a course cannot be bought on installments."""

    def __init__(self, course_id: str, reason: str):
        super().__init__(
            message=reason,
            code="EMI_NOT_AVAILABLE",
        )
        self.course_id = course_id
        self.reason = reason
