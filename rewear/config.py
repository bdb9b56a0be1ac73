import os

from pydantic_settings import BaseSettings


class NotificationSettings(BaseSettings):
    NOTIFICATION_HOST: str = "http://localhost:8080"
    NOTIFICATION_PATH: str = "/api/notifications"
    NOTIFICATION_TIMEOUT: float = 2.0


NOTIFICATION_SETTINGS = NotificationSettings()

STAGE: str = os.getenv("STAGE", "local")
TZ: str = os.getenv("TZ", "UTC")


class PersistentDB(BaseSettings):
    POSTGRES_SERVER: str = ""
    POSTGRES_USER: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = ""
    POSTGRES_PORT: str = ""
    POSTGRES_PROTOCOL: str = "postgresql+asyncpg"

    def get_uri(self):
        return "{}://{}:{}@{}:{}/{}".format(
            self.POSTGRES_PROTOCOL,
            self.POSTGRES_USER,
            self.POSTGRES_PASSWORD,
            self.POSTGRES_SERVER,
            self.POSTGRES_PORT,
            self.POSTGRES_DB,
        )


PERSISTENT_DB = PersistentDB()

# Integration tests run on an in-memory database unless a postgres test uri is given.
TEST_DB_URI: str = os.getenv("TEST_DB_URI", "sqlite+aiosqlite:///:memory:")
