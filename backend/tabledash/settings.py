from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    ROWS_PER_PAGE: int = 10
    MAX_UPLOAD_BYTES: int = 25 * 1024 * 1024

    # simulated latency of uploads and the mock database routes
    UPLOAD_DELAY_SECONDS: float = 0.3
    CONNECTION_TEST_DELAY_SECONDS: float = 1.0
    QUERY_DELAY_SECONDS: float = 1.5

    HISTORY_LIMIT: int = 50

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    @property
    def cors_list(self) -> list[str]:
        return [s.strip() for s in self.CORS_ORIGINS.split(",") if s.strip()]

settings = Settings()
