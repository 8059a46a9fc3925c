from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings): #settings are read from environment variables (or a .env file) so deployments never edit code
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "development" #"production" turns on the Secure cookie flag

    DATABASE_URL: str = "sqlite:///database.db"
    UPLOAD_DIR: str = "uploads" #documents are stored under UPLOAD_DIR/documents/<intake id>/

    SESSION_SECRET: str = "fallback-secret-key-change-in-production"
    SESSION_SECRET_PREVIOUS: str = "" #set while rotating secrets, clear afterwards
    SESSION_MAX_AGE_DAYS: int = 7

    LEGACY_USER_COOKIE_ENABLED: bool = False

    BCRYPT_ROUNDS: int = 10

    LOG_LEVEL: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def session_secrets(self) -> list[str]: #current secret first, previous one only for verification
        secrets = [self.SESSION_SECRET]
        if self.SESSION_SECRET_PREVIOUS:
            secrets.append(self.SESSION_SECRET_PREVIOUS)
        return secrets

settings = Settings()

UPLOAD_DIR = settings.UPLOAD_DIR
