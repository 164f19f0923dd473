from __future__ import annotations


class QuillError(Exception):
    """Base exception class for all Quill-specific errors.

    This is the root of the Quill exception hierarchy. Callers that embed the
    expression engine (template renderers, the CLI) can catch this single type
    at their boundary while letting system exceptions propagate naturally.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            value = evaluate_source("<% 1 / 0 %>")
        except QuillError as e:
            logger.error("render_failed", error=e.message)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the QuillError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
