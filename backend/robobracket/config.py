import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./robobracket.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    CORS_ORIGINS.extend(o.strip() for o in _extra.split(",") if o.strip())

# Qualifier (group stage) defaults used when a request omits them
DEFAULT_QUALIFIER_ROUNDS = int(os.getenv("DEFAULT_QUALIFIER_ROUNDS", "3"))
QUALIFIER_PAIRING_STRATEGY = os.getenv("QUALIFIER_PAIRING_STRATEGY", "rotating")
