class SimulationError(Exception):
    reason = "simulation error"


class InvalidActionError(SimulationError):
    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = str(reason)
        self.detail = str(detail)
        super().__init__(f"{self.reason}: {self.detail}" if self.detail else self.reason)


class InsufficientFundsError(SimulationError):
    reason = "insufficient funds"

    def __init__(self, required: int, available: int) -> None:
        self.required = int(required)
        self.available = int(available)
        super().__init__(f"insufficient funds: requires ${self.required}, have ${self.available}")


class TickInProgressError(SimulationError):
    reason = "tick in progress"

    def __init__(self, session_id: str) -> None:
        self.session_id = str(session_id)
        super().__init__(f"a week is already being advanced for session {self.session_id}")


class UnknownSessionError(SimulationError):
    reason = "unknown session"

    def __init__(self, session_id: str) -> None:
        self.session_id = str(session_id)
        super().__init__(f"no simulation snapshot stored for session {self.session_id}")
