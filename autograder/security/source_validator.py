from typing import List, Optional

from loguru import logger

from config import config


class SourceValidator:
    """Request-level checks on submitted source before it leaves the service."""

    def __init__(self, max_size_kb: Optional[int] = None):
        self.max_size_kb = max_size_kb if max_size_kb is not None else config.max_source_size_kb
        self.violations: List[dict] = []

    def validate(self, source_code: object) -> List[dict]:
        self.violations = []

        if not isinstance(source_code, str):
            self.violations.append({
                "type": "invalid_source",
                "message": "Source code must be a string",
            })
            return self.violations

        if not source_code.strip():
            self.violations.append({
                "type": "empty_source",
                "message": "Source code is empty",
            })

        if "\x00" in source_code:
            self.violations.append({
                "type": "null_byte",
                "message": "Source code contains NUL bytes",
            })

        try:
            encoded = source_code.encode("utf-8")
        except UnicodeEncodeError:
            self.violations.append({
                "type": "invalid_encoding",
                "message": "Source code is not valid UTF-8 text",
            })
            logger.info("source_validation_failed", violations_found=len(self.violations))
            return self.violations

        size_kb = len(encoded) / 1024
        if size_kb > self.max_size_kb:
            self.violations.append({
                "type": "source_too_large",
                "message": f"Source size {size_kb:.1f}KB exceeds {self.max_size_kb}KB",
            })

        if self.violations:
            logger.info(
                "source_validation_failed",
                size_kb=round(size_kb, 1),
                violations_found=len(self.violations),
            )

        return self.violations

    def is_valid(self, source_code: object) -> bool:
        violations = self.validate(source_code)
        return len(violations) == 0
