from __future__ import annotations


class EriiError(Exception):
    """Base class for recoverable failures reported back to the user."""


class InvalidIndex(EriiError, IndexError):
    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(
            f"Task number {index + 1} is out of range. Current number of tasks: {size}."
        )


class InvalidPriority(EriiError, ValueError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"Invalid priority '{value}'. Please enter a valid priority value (SS, S, A, B, C, D)."
        )


class UnsupportedOperation(EriiError):
    def __init__(self, operation: str, kind: str) -> None:
        self.operation = operation
        self.kind = kind
        super().__init__(f"{kind} tasks do not support '{operation}'.")


class InvalidTask(EriiError, ValueError):
    pass


class ParseError(EriiError, ValueError):
    pass


class StorageError(EriiError):
    pass
