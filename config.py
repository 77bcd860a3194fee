import os
from dotenv import load_dotenv

load_dotenv()

# --- DATABASE ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./school_results.db")

# --- LOGGING ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "")

# --- CORS (comma separated) ---
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# --- RESULT PROCESSING ---
RANKING_MAX_ATTEMPTS = int(os.getenv("RANKING_MAX_ATTEMPTS", "3"))

# Used when a subject has no exam schedule row for the class
DEFAULT_MAX_MARKS = float(os.getenv("DEFAULT_MAX_MARKS", "100"))
DEFAULT_PASS_MARKS = float(os.getenv("DEFAULT_PASS_MARKS", "33"))
