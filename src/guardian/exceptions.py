"""Domain errors raised by the mission/progress/badge core.

All of them are local validation failures: they subclass ValueError so callers
that only care about "bad request" can keep catching ValueError.
"""

from __future__ import annotations


class GuardianError(ValueError):
    """Base class for core domain errors."""


class AssignmentNotFound(GuardianError):
    """The assignment does not exist or belongs to another user."""

    def __init__(self, assignment_id: str) -> None:
        super().__init__(f"Mission assignment {assignment_id} not found")
        self.assignment_id = assignment_id


class AlreadyCompleted(GuardianError):
    """Completion was requested for an assignment that is already completed."""

    def __init__(self, assignment_id: str) -> None:
        super().__init__("Mission already completed")
        self.assignment_id = assignment_id


class InvalidTransition(GuardianError):
    """The assignment is not in a state that allows the requested transition."""

    def __init__(self, assignment_id: str, current: str, target: str) -> None:
        super().__init__(f"Invalid transition: {current} -> {target}")
        self.assignment_id = assignment_id
        self.current = current
        self.target = target


class NoMissionsAvailable(GuardianError):
    """The active mission catalog is empty."""

    def __init__(self) -> None:
        super().__init__("No missions available")


class BadgeNotFound(GuardianError):
    def __init__(self, slug: str) -> None:
        super().__init__(f"Badge {slug} not found")
        self.slug = slug


class UserNotFound(GuardianError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class BadgeNotEarned(GuardianError):
    """Sharing was requested for a badge the user does not hold."""

    def __init__(self, slug: str) -> None:
        super().__init__("You have not earned this badge")
        self.slug = slug
