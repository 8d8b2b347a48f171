"""Settings for the Gemini proxy, read from environment variables."""
import os

GEMINI_API_BASE = 'https://generativelanguage.googleapis.com/v1beta'

# Tried in order until one returns text
DEFAULT_MODELS = [
    'gemini-2.0-flash-lite',
    'gemini-flash-lite-latest',
]

GEMINI_SERVICE_NAME = 'gemini'
DEFAULT_KEYS_TABLE = 'api_keys'


def get_default_models() -> list[str]:
    """Candidate list, overridable with a comma-separated GEMINI_MODELS."""
    raw = os.environ.get('GEMINI_MODELS', '')
    models = [m.strip() for m in raw.split(',') if m.strip()]
    return models or list(DEFAULT_MODELS)


def get_api_base() -> str:
    return os.environ.get('GEMINI_API_BASE', GEMINI_API_BASE).rstrip('/')


def get_timeout() -> float | None:
    raw = os.environ.get('GEMINI_TIMEOUT')
    if not raw:
        return None
    return float(raw)


def get_keys_table() -> str:
    return os.environ.get('SUPABASE_KEYS_TABLE', DEFAULT_KEYS_TABLE)
