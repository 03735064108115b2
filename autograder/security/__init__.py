from autograder.security.source_validator import SourceValidator

__all__ = [
    "SourceValidator",
]
