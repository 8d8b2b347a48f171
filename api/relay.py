"""Prompt relay: validates a request, resolves the API key and tries each
candidate model in order until one returns text.

The relay is independent of the web framework. Callers pass the HTTP method
and the decoded JSON body and get back a RelayResponse to write out.
"""
import logging
from dataclasses import dataclass, field

from api.config import get_default_models
from api.gemini_client import GeminiClient, UpstreamError
from api.key_source import KeySourceError, get_key_source

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Credentials': 'true',
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET,OPTIONS,PATCH,DELETE,POST,PUT',
    'Access-Control-Allow-Headers': (
        'X-CSRF-Token, X-Requested-With, Accept, Accept-Version, '
        'Content-Length, Content-MD5, Content-Type, Date, X-Api-Version'
    ),
}

ALL_MODELS_FAILED = 'All Gemini models failed to respond'


class ValidationError(Exception):
    pass


class AllCandidatesExhausted(Exception):
    pass


@dataclass
class Success:
    text: str
    model_used: str


@dataclass
class Failure:
    http_status: int
    error_message: str


@dataclass
class RelayResponse:
    status: int
    body: dict | None = None
    headers: dict = field(default_factory=lambda: dict(CORS_HEADERS))

    @classmethod
    def from_result(cls, result):
        if isinstance(result, Success):
            return cls(200, {'success': True, 'text': result.text,
                             'model': result.model_used})
        return cls(result.http_status, {'success': False,
                                        'error': result.error_message})


def parse_request(body) -> tuple[str, list[str] | None]:
    """Return (prompt, models) or raise ValidationError.

    A falsy models value counts as absent; any other non-list is rejected.
    """
    if not isinstance(body, dict):
        raise ValidationError('Invalid prompt')
    prompt = body.get('prompt')
    if not prompt or not isinstance(prompt, str):
        raise ValidationError('Invalid prompt')
    models = body.get('models')
    if isinstance(models, list):
        if not all(isinstance(m, str) for m in models):
            raise ValidationError('Invalid models')
        return prompt, models
    if models:
        raise ValidationError('Invalid models')
    return prompt, None


class PromptRelay:
    """Orchestrates one request. Holds no state between requests.

    key_source is any object with a fetch_key() method; when omitted the
    source configured by KEY_SOURCE is built on first use. Without a client,
    a GeminiClient is opened for each POST and closed afterwards.
    """

    def __init__(self, key_source=None, client: GeminiClient | None = None,
                 default_models: list[str] | None = None):
        self.key_source = key_source
        self.client = client
        self.default_models = default_models

    def handle(self, method: str, body=None) -> RelayResponse:
        method = (method or '').upper()
        if method == 'OPTIONS':
            return RelayResponse(200)
        if method != 'POST':
            return RelayResponse.from_result(Failure(405, 'Method not allowed'))

        try:
            return RelayResponse.from_result(self.run(body))
        except Exception as e:
            logger.exception('Gemini proxy error')
            return RelayResponse.from_result(
                Failure(500, f'Internal server error: {e}'))

    def run(self, body):
        """Validate, resolve the key and try candidates. Returns a result."""
        try:
            prompt, models = parse_request(body)
        except ValidationError as e:
            return Failure(400, str(e))

        try:
            api_key = self.resolve_key()
        except KeySourceError as e:
            logger.error('API key unavailable: %s', e)
            return Failure(500, str(e))

        if models is None:
            if self.default_models is not None:
                models = self.default_models
            else:
                models = get_default_models()

        try:
            if self.client is not None:
                return self.try_candidates(self.client, api_key, prompt, models)
            with GeminiClient() as client:
                return self.try_candidates(client, api_key, prompt, models)
        except AllCandidatesExhausted:
            logger.error('All models failed: %s', models)
            return Failure(503, ALL_MODELS_FAILED)

    def resolve_key(self) -> str:
        if self.key_source is None:
            self.key_source = get_key_source()
        return self.key_source.fetch_key()

    def try_candidates(self, client, api_key: str, prompt: str, models: list[str]) -> Success:
        for model in models:
            logger.info('Attempting model: %s', model)
            try:
                text = client.generate(api_key, model, prompt)
            except UpstreamError as e:
                logger.warning('Model %s failed: %s', model, e)
                continue
            logger.info('Model %s succeeded', model)
            return Success(text, model)
        raise AllCandidatesExhausted()
