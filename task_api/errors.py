"""Domain errors raised by the task store and translated to HTTP responses."""


class TaskError(Exception):
    """Base class for errors reported to the client."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TaskValidationError(TaskError):
    """Malformed, missing or out-of-range input."""

    status_code = 400


class TaskNotFoundError(TaskError):
    """No task with the requested id."""

    status_code = 404

    def __init__(self, message: str = "Task not found") -> None:
        super().__init__(message)
