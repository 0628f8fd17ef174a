"""
Central configuration

Purpose: single source of truth for file paths, API keys, timeouts, model names, and default params.

Input: none at runtime (read constants / environment variables, optionally from a .env file).

Output: variables used by other modules (strings, numbers, dicts).

Example: REQUEST_TIMEOUT_SECONDS = 15.0 bounds every call to the text-generation service.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Text generation (Gemini generateContent)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "models/gemini-flash-latest")
GENERATION_CONFIG = {
    "temperature": 0.6,
    "topP": 0.9,
    "topK": 32,
    "maxOutputTokens": 512,
}
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "15"))
MAX_MODEL_ATTEMPTS = 2  # initial call + one retry, timeouts only

# Pharmacological knowledge (RxNav, NIH)
RXNAV_BASE = os.getenv("RXNAV_BASE", "https://rxnav.nlm.nih.gov/REST")
KNOWLEDGE_TIMEOUT_SECONDS = float(os.getenv("KNOWLEDGE_TIMEOUT_SECONDS", "10"))
MAX_INDICATIONS = 5
MAX_CONTRAINDICATIONS = 4

# Advisory shape
MAX_LIST_ITEMS = 4

# Reference data
MEDICINES_PATH = os.getenv("MEDICINES_PATH", "data/medicines.json")

# Logging / audit
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
AUDIT_LOG_DIR = os.getenv("AUDIT_LOG_DIR") or None
