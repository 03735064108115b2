import pytest

from autograder.managers.scoring_manager import ScoringManager, ScoringPolicy
from autograder.models.results import ExecutionVerdict, VerdictStatus

TERMINAL = [s for s in VerdictStatus if s.is_terminal]


@pytest.fixture
def scoring():
    return ScoringManager()


def test_accepted_earns_max_score(scoring):
    assert scoring.evaluate(ExecutionVerdict(status=VerdictStatus.ACCEPTED), 100) == 100


@pytest.mark.parametrize("status", [s for s in TERMINAL if s is not VerdictStatus.ACCEPTED])
def test_other_verdicts_earn_zero(scoring, status):
    assert scoring.evaluate(ExecutionVerdict(status=status), 100) == 0


@pytest.mark.parametrize("status", list(VerdictStatus))
@pytest.mark.parametrize("max_score", [0.5, 1, 10, 100, 1e6])
def test_score_is_bounded_and_deterministic(scoring, status, max_score):
    verdict = ExecutionVerdict(status=status, stdout="out", exit_code=0)

    first = scoring.evaluate(verdict, max_score)
    second = scoring.evaluate(verdict, max_score)

    assert 0 <= first <= max_score
    assert first == second
    assert verdict == ExecutionVerdict(status=status, stdout="out", exit_code=0)


def test_partial_credit_policy():
    policy = ScoringPolicy(credit={
        VerdictStatus.ACCEPTED: 1.0,
        VerdictStatus.WRONG_ANSWER: 0.25,
    })
    scoring = ScoringManager(policy)

    assert scoring.evaluate(ExecutionVerdict(status=VerdictStatus.WRONG_ANSWER), 40) == 10
    assert scoring.evaluate(ExecutionVerdict(status=VerdictStatus.COMPILE_ERROR), 40) == 0


def test_policy_fractions_are_clamped():
    scoring = ScoringManager(ScoringPolicy(credit={
        VerdictStatus.ACCEPTED: 3.0,
        VerdictStatus.RUNTIME_ERROR: -1.0,
    }))

    assert scoring.evaluate(ExecutionVerdict(status=VerdictStatus.ACCEPTED), 50) == 50
    assert scoring.evaluate(ExecutionVerdict(status=VerdictStatus.RUNTIME_ERROR), 50) == 0


def test_pending_never_scores():
    scoring = ScoringManager(ScoringPolicy(credit={VerdictStatus.PENDING: 1.0}))

    assert scoring.evaluate(ExecutionVerdict(status=VerdictStatus.PENDING), 100) == 0
