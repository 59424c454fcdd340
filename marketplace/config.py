from typing import Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "bookmarket"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # full SQLAlchemy URL, wins over the postgres_* parts when set
    database_dsn: Optional[str] = None

    # pool ceiling and bounded wait for a free slot (seconds)
    db_pool_size: int = 10
    db_max_overflow: int = 0
    db_pool_timeout: float = 5
    db_pool_recycle: int = 1800

    db_retry_attempts: int = 3
    db_retry_backoff: float = 1.0

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    env: str = "local"

    @property
    def database_url(self):
        if self.database_dsn:
            return self.database_dsn
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
