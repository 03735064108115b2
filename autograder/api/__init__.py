from autograder.api.main import app

__all__ = ["app"]
