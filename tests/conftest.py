"""Shared fakes for the relay tests. No test touches the network."""
import pytest

from api.gemini_client import BadStatus, EmptyResponse, Transport
from api.key_source import MissingConfig


class StaticKeySource:
    def __init__(self, key='test-key'):
        self.key = key
        self.calls = 0

    def fetch_key(self):
        self.calls += 1
        return self.key


class BrokenKeySource:
    def fetch_key(self):
        raise MissingConfig('Missing GEMINI_API_KEY environment variable.')


class FakeClient:
    """Scripted upstream: maps model name to text or an exception to raise."""

    def __init__(self, outcomes=None):
        self.outcomes = outcomes or {}
        self.calls = []

    def generate(self, api_key, model, prompt):
        self.calls.append((api_key, model, prompt))
        outcome = self.outcomes.get(model, BadStatus(404, 'model not found'))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def key_source():
    return StaticKeySource()


@pytest.fixture
def failures():
    return {
        'bad-status': BadStatus(429, 'RESOURCE_EXHAUSTED'),
        'empty': EmptyResponse('no text'),
        'transport': Transport('connection reset'),
    }


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('KEY_SOURCE', 'GEMINI_API_KEY', 'GEMINI_MODELS', 'GEMINI_API_BASE',
                 'GEMINI_TIMEOUT', 'SUPABASE_URL', 'SUPABASE_SERVICE_KEY',
                 'SUPABASE_KEYS_TABLE'):
        monkeypatch.delenv(name, raising=False)
