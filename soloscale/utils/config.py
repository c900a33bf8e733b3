"""Load and validate environment variables. Uses python-dotenv.

This module is intentionally thin and side-effect free except for loading `.env`.
Callers should use the accessor functions below rather than reading `os.environ`
directly, to keep environment handling consistent.
"""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
import os


def _project_root() -> Path:
    """Resolve project root (the directory holding app.py)."""
    return Path(__file__).resolve().parent.parent.parent


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Does not override variables already exported in the environment.
    """
    root = _project_root()
    env_path = root / ".env"
    load_dotenv(env_path, override=False)


def get_required(key: str) -> str:
    """
    Get required env var. Raises if missing or empty.

    Raises:
        ValueError: If key is missing or empty after trimming.
    """
    load_config()
    val = os.getenv(key, "").strip()
    if not val:
        raise ValueError(
            f"Missing required environment variable: {key}. "
            "Set it in .env or export it."
        )
    return val


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_int(key: str, default: int) -> int:
    """Get optional env var as int; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_optional_float(key: str, default: float) -> float:
    """Get optional env var as float; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# --- LLM provider (triage) ---

_PROVIDERS = {
    "gemini": {
        "url": "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions",
        "key_env": "GEMINI_API_KEY",
        "model_env": "GEMINI_MODEL",
        "model": "gemini-2.5-flash",
    },
    "groq": {
        "url": "https://api.groq.com/openai/v1/chat/completions",
        "key_env": "GROQ_API_KEY",
        "model_env": "GROQ_MODEL",
        "model": "llama-3.3-70b-versatile",
    },
    "grok": {
        "url": "https://api.x.ai/v1/chat/completions",
        "key_env": "GROK_API_KEY",
        "model_env": "GROK_MODEL",
        "model": "grok-4-1-fast",
    },
}


def llm_provider() -> str:
    """Optional: LLM provider used for triage. Default gemini; groq and grok also supported."""
    provider = get_optional("LLM_PROVIDER", "gemini").lower().strip()
    return provider if provider in _PROVIDERS else "gemini"


def llm_base_url() -> str:
    """Chat completions URL for the active LLM provider."""
    return get_optional("LLM_BASE_URL", _PROVIDERS[llm_provider()]["url"])


def llm_api_key() -> str:
    """Required (for AI triage): API key for the active LLM provider."""
    return get_required(_PROVIDERS[llm_provider()]["key_env"])


def llm_model() -> str:
    """Model name for the active LLM provider."""
    provider = _PROVIDERS[llm_provider()]
    return get_optional(provider["model_env"], provider["model"])


def llm_max_tokens() -> int:
    """Optional: max tokens for the triage response. Default 512."""
    return get_optional_int("LLM_MAX_TOKENS", 512)


def llm_timeout_seconds() -> int:
    """Optional: HTTP timeout for the triage request. Default 30."""
    return get_optional_int("LLM_TIMEOUT_SECONDS", 30)


def llm_max_retries() -> int:
    """Optional: retries after the first failed request. Default 2 (3 attempts in all), never below 0."""
    return max(0, get_optional_int("LLM_MAX_RETRIES", 2))


def triage_min_confidence() -> float:
    """Optional: suggestions below this confidence are shown as hints only. Default 0.5."""
    return min(1.0, max(0.0, get_optional_float("TRIAGE_MIN_CONFIDENCE", 0.5)))


# --- Storefront ---

def firm_name() -> str:
    """Optional: display name of the firm. Default SoloScale Legal."""
    return get_optional("FIRM_NAME", "SoloScale Legal")


def staff_passcode() -> str:
    """Optional: passcode for the mock staff sign-in. Default 'staff'."""
    return get_optional("STAFF_PASSCODE", "staff")


def conflict_blacklist() -> list[str]:
    """Optional: comma-separated prior-party names. Default evil corp, bad guy, fraud llc."""
    raw = get_optional("CONFLICT_BLACKLIST", "")
    if not raw:
        return ["evil corp", "bad guy", "fraud llc"]
    return [part.strip() for part in raw.split(",") if part.strip()]


def max_upload_mb() -> int:
    """Optional: upload size cap in megabytes. Default 10."""
    return get_optional_int("MAX_UPLOAD_MB", 10)


def log_file() -> Optional[Path]:
    """Optional: log file path. None logs to stderr only."""
    val = get_optional("LOG_FILE", "")
    return Path(val) if val else None
