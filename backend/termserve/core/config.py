import os
from dotenv import load_dotenv

# Load .env from the backend directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(BASE_DIR, "..", ".."))

# Database: stored in backend/data/
DATABASE_PATH: str = os.getenv(
    "DATABASE_PATH",
    os.path.join(BACKEND_DIR, "data", "terminology.db"),
)

# Paging
EXPAND_DEFAULT_COUNT: int = int(os.getenv("EXPAND_DEFAULT_COUNT", "100"))
SEARCH_PAGE_SIZE: int = int(os.getenv("SEARCH_PAGE_SIZE", "10"))

# Only sources/collections with one of these access levels are visible
PUBLIC_ACCESS: tuple = tuple(
    a.strip() for a in os.getenv("PUBLIC_ACCESS", "View,Edit").split(",") if a.strip()
)

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
