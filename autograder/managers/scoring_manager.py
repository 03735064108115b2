"""
Execution Scoring Manager.

Maps a terminal verdict to a numeric score in [0, max_score]. The default
policy is binary: Accepted earns max_score, every other verdict earns 0.
A partial-credit table (status -> fraction of max_score) can be supplied to
award credit for non-accepted verdicts.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from autograder.models.results import ExecutionVerdict, VerdictStatus


@dataclass(frozen=True)
class ScoringPolicy:
    """Fraction of max_score awarded per verdict status."""

    credit: Dict[VerdictStatus, float] = field(
        default_factory=lambda: {VerdictStatus.ACCEPTED: 1.0}
    )

    def fraction_for(self, status: VerdictStatus) -> float:
        if status is VerdictStatus.PENDING:
            return 0.0
        fraction = self.credit.get(status, 0.0)
        return min(max(fraction, 0.0), 1.0)


BINARY_POLICY = ScoringPolicy()


class ScoringManager:
    def __init__(self, policy: Optional[ScoringPolicy] = None):
        self.policy = policy or BINARY_POLICY

    def evaluate(self, verdict: ExecutionVerdict, max_score: float) -> float:
        if max_score <= 0:
            return 0.0
        score = max_score * self.policy.fraction_for(verdict.status)
        return min(max(score, 0.0), max_score)
