from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_NAME: str = "Group Ledger"
    API_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    DEFAULT_SPLIT_STRATEGY: str = "equal"
    MAX_GROUP_MEMBERS: int = 50

    class Config:
        env_file = ".env"

settings = Settings()
