from dataclasses import dataclass

from ella_rises.config import settings
from ella_rises.errors import Forbidden


@dataclass(frozen=True)
class Caller:
    """Who is making a request: the participant email and the access level."""

    user_id: str
    level: str = "U"

    @property
    def is_manager(self) -> bool:
        return self.level == settings.MANAGER_LEVEL


def require_manager(caller: Caller, action: str) -> None:
    if not caller.is_manager:
        raise Forbidden(f"Only managers can {action}.")
