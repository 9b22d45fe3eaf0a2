from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./docversion.db"
    sql_echo: bool = False
    create_tables_on_startup: bool = True

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7

    log_level: str = "INFO"

    # Служебные ключи клиента, которые не участвуют в сравнении версий
    diff_ignored_keys: List[str] = Field(default_factory=lambda: ["$hashKey"])
    documents_max_page_size: int = 100

    # PostgreSQL variables for Docker
    postgres_user: str = ""
    postgres_password: str = ""
    postgres_db: str = ""

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
