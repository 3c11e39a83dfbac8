import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/links.db")
REDIS_URL: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

# sql | redis
BLOB_BACKEND: str = os.getenv("BLOB_BACKEND", "sql")
LINKS_KEY: str = os.getenv("LINKS_KEY", "shortenedUrls")
LOGS_KEY: str = os.getenv("LOGS_KEY", "urlShortenerLogs")

BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
DEFAULT_VALIDITY_MINUTES: int = int(os.getenv("DEFAULT_VALIDITY_MINUTES", "30"))
SHORT_CODE_LENGTH: int = int(os.getenv("SHORT_CODE_LENGTH", "6"))
CREATE_DELAY_SECONDS: float = float(os.getenv("CREATE_DELAY_SECONDS", "0"))

# unknown | sample
LOCATION_PROVIDER: str = os.getenv("LOCATION_PROVIDER", "unknown")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
MAX_LOG_ENTRIES: int = int(os.getenv("MAX_LOG_ENTRIES", "1000"))
