"""Error kinds raised by the tracking core."""


class TimeArcError(Exception):
    """Base class for all tracking errors"""


class AlreadyRunning(TimeArcError):
    """start() called while the stopwatch is running"""


class NotRunning(TimeArcError):
    """stop() called while the stopwatch is stopped"""


class EmptyTaskName(TimeArcError, ValueError):
    """Task name is empty or whitespace only"""


class LastTaskDeletion(TimeArcError):
    """Attempt to delete the only remaining task"""


class TaskNotFound(TimeArcError, KeyError):
    """No task with the given id"""


class LedgerWriteFailure(TimeArcError):
    """
    Storage failure while crediting seconds to the ledger.

    The original storage exception is available as __cause__.
    """

    def __init__(self, message: str, day=None, task_name: str = None, seconds: float = 0.0):
        super().__init__(message)
        self.day = day
        self.task_name = task_name
        self.seconds = seconds
