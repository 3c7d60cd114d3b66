"""Error taxonomy shared by the services and the HTTP layer.

Every error carries a stable ``code`` so callers can tell the rejection
reasons apart without parsing messages.
"""


class EllaRisesError(Exception):
    code = "error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class Forbidden(EllaRisesError):
    code = "forbidden"


class NotFound(EllaRisesError):
    code = "not_found"


class Conflict(EllaRisesError):
    code = "conflict"


class InvalidTransition(Conflict):
    code = "invalid_transition"


class DeadlinePassed(EllaRisesError):
    code = "deadline_passed"


class CapacityExceeded(EllaRisesError):
    code = "capacity_exceeded"


class StoreUnavailable(EllaRisesError):
    code = "store_unavailable"


class InvalidSchedule(EllaRisesError, ValueError):
    code = "invalid_schedule"
