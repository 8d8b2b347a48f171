"""HTTP client for the Gemini generateContent endpoint."""
import logging

import requests

from api.config import get_api_base, get_timeout

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """A single model attempt failed; the caller may try the next model."""


class BadStatus(UpstreamError):
    def __init__(self, status: int, body: str):
        super().__init__(f'HTTP {status}: {body}')
        self.status = status
        self.body = body


class EmptyResponse(UpstreamError):
    pass


class Transport(UpstreamError):
    pass


def extract_text(data) -> str:
    """Join the text parts of the first candidate and strip whitespace.

    Any unexpected shape yields an empty string.
    """
    if not isinstance(data, dict):
        return ''
    candidates = data.get('candidates')
    if not isinstance(candidates, list) or not candidates:
        return ''
    first = candidates[0]
    if not isinstance(first, dict):
        return ''
    content = first.get('content')
    if not isinstance(content, dict):
        return ''
    parts = content.get('parts')
    if not isinstance(parts, list):
        return ''
    return ''.join(
        p['text'] for p in parts
        if isinstance(p, dict) and isinstance(p.get('text'), str)
    ).strip()


class GeminiClient:
    def __init__(self, session: requests.Session | None = None,
                 api_base: str | None = None, timeout: float | None = None):
        self.session = session or requests.Session()
        self.api_base = api_base or get_api_base()
        self.timeout = timeout if timeout is not None else get_timeout()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self.session.close()

    def model_url(self, model: str) -> str:
        return f'{self.api_base}/models/{model}:generateContent'

    def generate(self, api_key: str, model: str, prompt: str) -> str:
        """Send one prompt to one model and return its non-empty text.

        Raises BadStatus for non-2xx replies, EmptyResponse when the reply
        carries no text, and Transport for network or decoding failures.
        """
        payload = {
            'contents': [
                {
                    'role': 'user',
                    'parts': [{'text': prompt}]
                }
            ]
        }
        try:
            response = self.session.post(
                self.model_url(model),
                params={'key': api_key},
                headers={'Content-Type': 'application/json'},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            # requests messages carry the URL, and with it the key
            raise Transport(f'{type(e).__name__} calling model {model}') from None

        if not response.ok:
            raise BadStatus(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise Transport(f'Malformed response body: {e}') from e

        text = extract_text(data)
        if not text:
            raise EmptyResponse(f'Model {model} returned no text')
        return text
