"""Application configuration via environment variables."""

import os
from dotenv import load_dotenv

load_dotenv()

# Layout oracle (any OpenAI-compatible chat completions endpoint)
LAYOUT_ORACLE_API_KEY = os.getenv("LAYOUT_ORACLE_API_KEY", "")
LAYOUT_ORACLE_MODEL = os.getenv("LAYOUT_ORACLE_MODEL", "gemini-1.5-flash")
LAYOUT_ORACLE_BASE_URL = os.getenv(
    "LAYOUT_ORACLE_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/"
)
LAYOUT_ORACLE_TIMEOUT = float(os.getenv("LAYOUT_ORACLE_TIMEOUT", "30"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
