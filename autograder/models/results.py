from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from autograder.exceptions import UnsupportedLanguageError


class Language(str, Enum):
    GO = "go"
    PYTHON = "python"
    JAVA = "java"
    NODEJS = "nodejs"
    CPP = "cpp"
    C = "c"

    @classmethod
    def parse(cls, value: object) -> "Language":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        for language in cls:
            if language.value == normalized:
                return language
        raise UnsupportedLanguageError(str(value))

    @property
    def engine_id(self) -> int:
        return LANGUAGE_IDS[self]


# Judge0 CE language ids
LANGUAGE_IDS = {
    Language.GO: 60,
    Language.PYTHON: 71,
    Language.JAVA: 62,
    Language.NODEJS: 63,
    Language.CPP: 54,
    Language.C: 50,
}


class VerdictStatus(str, Enum):
    ACCEPTED = "Accepted"
    WRONG_ANSWER = "WrongAnswer"
    COMPILE_ERROR = "CompileError"
    RUNTIME_ERROR = "RuntimeError"
    TIME_LIMIT_EXCEEDED = "TimeLimitExceeded"
    INTERNAL_ERROR = "InternalError"
    PENDING = "Pending"

    @property
    def is_terminal(self) -> bool:
        return self is not VerdictStatus.PENDING


@dataclass(frozen=True)
class LaunchContext:
    identity_token: str
    user_id: str
    context_id: str
    grade_target_ref: Optional[str] = None

    @property
    def gradeable(self) -> bool:
        return bool(self.grade_target_ref)


@dataclass(frozen=True)
class ExecutionRequest:
    source_code: str
    language: Language
    max_score: float
    context: LaunchContext


@dataclass(frozen=True)
class SubmissionHandle:
    token: str
    submitted_at: datetime


@dataclass
class ExecutionVerdict:
    status: VerdictStatus
    status_id: Optional[int] = None
    status_description: str = ""
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    exit_code: Optional[int] = None
    time_ms: Optional[float] = None
    memory_kb: Optional[int] = None


@dataclass
class ExecutionOutcome:
    success: bool
    verdict: Optional[ExecutionVerdict] = None
    score: Optional[float] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    accepted: bool = False
    # skipped, published, duplicate or failed
    passback_status: str = "skipped"
    passback_error: Optional[str] = None


@dataclass(frozen=True)
class GradePassbackRecord:
    grade_target_ref: str
    user_id: str
    score: float
    max_score: float
    submission_token: str
    published_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
