"""Timer errors"""


class TimerNotFoundError(LookupError):
    """No active timer has the requested id"""

    def __init__(self, timer_id: str):
        super().__init__(f"Timer {timer_id} not found")
        self.timer_id = timer_id


class InvalidTimerConfigError(ValueError):
    """Timer arguments were rejected before anything was registered"""


class DuplicateTimerError(InvalidTimerConfigError):
    """A timer with the same id is already running"""

    def __init__(self, timer_id: str):
        super().__init__(f"Timer {timer_id} is already running")
        self.timer_id = timer_id
