from autograder.repositories.passback_repository import PassbackRepository

__all__ = [
    "PassbackRepository",
]
