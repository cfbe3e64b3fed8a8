"""Application configuration settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "LearnQuest"
    debug: bool = False

    # Learning sessions API
    api_url: str = "http://localhost:8000/api/v1"
    access_token: str | None = None
    child_profile_id: str | None = None
    request_timeout: float = 15.0  # seconds

    # Navigation targets
    home_path: str = "/child/home"
    session_path_template: str = "/child/session/{session_id}"

    # Sandbox backend
    database_url: str = "sqlite+aiosqlite:///./learnquest.db"
    starting_lives: int = 3
    max_stars: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def session_path(self, session_id: str) -> str:
        return self.session_path_template.format(session_id=session_id)


settings = Settings()
