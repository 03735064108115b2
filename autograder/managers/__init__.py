from autograder.managers.launch_manager import LaunchContextResolver
from autograder.managers.passback_manager import ClientCredentialsTokenProvider, PassbackManager
from autograder.managers.polling_manager import PollingManager
from autograder.managers.scoring_manager import ScoringManager, ScoringPolicy
from autograder.managers.submission_manager import SubmissionManager

__all__ = [
    "ClientCredentialsTokenProvider",
    "LaunchContextResolver",
    "PassbackManager",
    "PollingManager",
    "ScoringManager",
    "ScoringPolicy",
    "SubmissionManager",
]
