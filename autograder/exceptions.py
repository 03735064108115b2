"""
Error taxonomy for the execution and grade passback pipeline.

Every error carries a stable snake_case ``code`` and a caller-safe message.
Messages are composed locally; raw transport errors and credentials never
end up in them.
"""


class AutograderError(Exception):
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_caller_message(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(AutograderError):
    """Malformed or missing launch / request data. Never retried."""

    code = "validation_error"


class UnsupportedLanguageError(AutograderError):
    code = "unsupported_language"

    def __init__(self, language: str):
        super().__init__(f"Language '{language}' is not supported")
        self.language = language


class SubmissionError(AutograderError):
    """Execution engine unreachable or refused the submission."""

    code = "submission_error"


class ExecutionTimeoutError(AutograderError, TimeoutError):
    code = "timeout"


class GradePassbackError(AutograderError):
    """Platform rejected the grade or authentication failed."""

    code = "passback_error"
