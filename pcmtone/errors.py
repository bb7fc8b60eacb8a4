from __future__ import annotations


class AudioSinkError(Exception):
    """A file or device operation failed.

    `operation` is one of "create", "encode", "decode", "open", "play".
    The underlying exception is available as `cause` and as `__cause__`.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause
