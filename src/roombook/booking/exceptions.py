#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from typing import Any, Sequence


class BookingError(Exception):
    pass


class ValidationError(BookingError):
    pass


class CapacityError(BookingError):
    def __init__(self, participants: int, capacity: int):
        self.participants = participants
        self.capacity = capacity
        super().__init__(
            f"{participants} participants exceed the room capacity ({capacity})"
        )


class ConflictError(BookingError):
    def __init__(self, message: str, conflicts: Sequence[Any] = ()):
        self.conflicts = list(conflicts)
        super().__init__(message)


class SearchError(BookingError):
    pass


class AuthorizationError(BookingError):
    pass
