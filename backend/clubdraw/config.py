import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_GROUP_SIZE = int(os.getenv("DEFAULT_GROUP_SIZE", "4"))
DEFAULT_SWISS_ROUNDS = int(os.getenv("DEFAULT_SWISS_ROUNDS", "3"))

CORS_ORIGINS: List[str] = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    CORS_ORIGINS.extend(o.strip() for o in _extra.split(",") if o.strip())
