from contextlib import contextmanager
from typing import Optional

from packages.aia_core.errors import AIABaseError

class CommandBusyError(AIABaseError):
    def __init__(self, requested: str, holder: str):
        super().__init__(
            code="COMMAND_BUSY",
            message=f"'{requested}' rejected while '{holder}' is in progress",
            details={"requested": requested, "holder": holder}
        )

class CommandGuard:
    """
    Serializes state-changing commands of the Session Controller.
    Enforces FAIL-FAST policy: while a command is awaiting a collaborator,
    any other command is rejected immediately instead of queued.
    """
    def __init__(self):
        self._holder: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._holder is not None

    @property
    def holder(self) -> Optional[str]:
        return self._holder

    @contextmanager
    def acquire(self, command: str):
        if self._holder is not None:
            raise CommandBusyError(command, self._holder)
        self._holder = command
        try:
            yield
        finally:
            self._holder = None
