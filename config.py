from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./autograder.db"

    judge0_url: str = "http://localhost:2358"
    judge0_auth_token: Optional[str] = None

    execution_cpu_time_limit_seconds: float = 5.0
    execution_wall_time_limit_seconds: float = 10.0
    execution_memory_limit_kb: int = 128000
    execution_deadline_seconds: float = 30.0
    max_source_size_kb: int = 64

    submission_max_attempts: int = 3
    submission_backoff_seconds: float = 0.2

    poll_interval_seconds: float = 0.5
    poll_backoff_factor: float = 1.5
    poll_max_interval_seconds: float = 2.0
    poll_max_consecutive_failures: int = 3

    http_timeout_seconds: float = 10.0

    # LTI platform (gradebook) settings
    platform_token_url: str = "http://localhost:8888/mod/lti/token.php"
    lti_client_id: str = ""
    lti_client_secret: str = ""
    ags_scope: str = "https://purl.imsglobal.org/spec/lti-ags/scope/score"

    allowed_origins: str = "*"

    class Config:
        env_prefix = ""
        env_file = ".env"
        extra = "ignore"

    def get_database_url(self) -> str:
        return self.database_url

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse comma-separated origins into list"""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


config = Settings()
