import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load the appropriate .env file on module import
env = os.environ.get("ROWMAPPER_ENV", "development").lower()
env_file = f".env.{env}"
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    # Fall back to the default .env file
    load_dotenv()


@dataclass
class Config:
    environment: str
    database_url: str | None
    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            environment=env,
            database_url=os.environ.get("DATABASE_URL") or None,
            log_level=os.environ.get("ROWMAPPER_LOG_LEVEL", "INFO").upper(),
            log_format=os.environ.get("ROWMAPPER_LOG_FORMAT", "text").lower(),
        )


config = Config.from_env()
