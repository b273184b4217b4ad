# sitesmith/utils/config.py
import os

from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.environ.get("APP_ENV", "development")
IS_DEVELOPMENT = APP_ENV == "development"

# Logging / debug directory
LOG_DIR = os.environ.get("AI_BACKEND_LOG_DIR", "./ai_backend_logs")

# Generation result cache (cost-saving aid, off outside development unless forced)
CACHE_DIR = os.environ.get("AI_CACHE_DIR", "./.cache")
CACHE_ENABLED = os.environ.get("AI_CACHE_ENABLED", "1" if IS_DEVELOPMENT else "0").lower() in ("1", "true", "yes")
CACHE_NAMESPACE = "generate-code"

# Model access
GEMINI_API_KEY_ENV = "GOOGLE_API_KEY_GEMINI"
MODEL_NAME = os.environ.get("AI_MODEL_NAME", "gemini-2.5-flash-lite")
LLM_RETRIES = int(os.environ.get("AI_RETRY_COUNT", 2))
TIMEOUT = int(os.environ.get("AI_TIMEOUT", 180))

# Lower temperature keeps the JSON envelope more consistent
AGENT_TEMPERATURES = {
    "codegen": float(os.environ.get("AI_CODEGEN_TEMPERATURE", 0.5)),
    "file": float(os.environ.get("AI_FILE_TEMPERATURE", 0.2)),
    "competitors": float(os.environ.get("AI_COMPETITORS_TEMPERATURE", 0.5)),
}
