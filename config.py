"""App-wide configuration and environment settings."""

import os
try:
    import streamlit as st
except ImportError:
    st = None
from dotenv import load_dotenv

load_dotenv()  # Load from .env file

def get_secret(key, default=None):
    """Try st.secrets first, then os.getenv."""
    if st is not None:
        try:
            # Accessing st.secrets might raise FileNotFoundError if no secrets.toml on local
            if key in st.secrets:
                return st.secrets[key]
        except (FileNotFoundError, AttributeError, KeyError):
            pass
    return os.getenv(key, default)

# Validator service
VALIDATOR_BACKEND = get_secret("VALIDATOR_BACKEND", "agent")  # agent | gemini
VALIDATOR_URL = get_secret("VALIDATOR_URL", "http://localhost:3000/api/agent")
VALIDATOR_AGENT_ID = get_secret("VALIDATOR_AGENT_ID", "68fd263d71c6b27d6c8eb80f")
VALIDATOR_TIMEOUT_SECONDS = float(get_secret("VALIDATOR_TIMEOUT_SECONDS", "120"))

# LLM (Google Gemini), used by the "gemini" validator backend
GOOGLE_API_KEY = get_secret("GOOGLE_API_KEY", "")
LLM_MODEL = get_secret("LLM_MODEL", "gemini-2.5-flash-lite")

# Documents step
MIN_DOCUMENTS_TO_ADVANCE = 2

# Sessions idle longer than this are dropped by the REST surface
SESSION_IDLE_SECONDS = float(os.getenv("SESSION_IDLE_SECONDS", "3600"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# LangSmith
LANGSMITH_TRACING = os.getenv("LANGSMITH_TRACING", "false").lower() in ("true", "1")
LANGSMITH_PROJECT = os.getenv("LANGSMITH_PROJECT", "pool-permit-wizard")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
