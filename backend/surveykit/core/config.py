from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./surveykit.db"
    sql_echo: bool = False
    store_backend: str = "sql"  # sql | memory
    public_base_url: str = "http://localhost:8000"
    identity_header: str = "X-User-Id"  # set by the auth gateway
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    share_token_bytes: int = 18

settings = Settings()
