"""
API Routers for the code execution service.

- Execution: /api/... - code execution, languages, passback lookup
- Launch: /lti/... - launch parameter resolution
"""

from autograder.api.routers.execute import router as execute_router
from autograder.api.routers.launch import router as launch_router


__all__ = [
    "execute_router",
    "launch_router",
]
