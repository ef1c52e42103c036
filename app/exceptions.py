class ImporterError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class HeaderMismatchError(ImporterError):
    """The first row of the sheet is not the expected column set."""

    def __init__(self, expected, found) -> None:
        self.expected = list(expected)
        self.found = list(found)
        super().__init__(
            f"Invalid headers. Expected: {', '.join(self.expected)}, "
            f"Found: {', '.join(str(label) for label in self.found)}"
        )


class EmptySheetError(ImporterError):
    def __init__(self) -> None:
        super().__init__("The uploaded file does not contain any data.")


class TaskNotFoundError(ImporterError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found.")


class ReportNotFoundError(ImporterError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Report for Task ID {task_id} not found.")


class InvalidTransitionError(ImporterError):
    def __init__(self, task_id: str, current, requested) -> None:
        self.task_id = task_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Task {task_id} cannot move from {current.value} to {requested.value}"
        )


class UploadRejectedError(ImporterError):
    """Upload is not a spreadsheet we accept."""
