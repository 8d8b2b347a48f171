"""API endpoint to list available Gemini models."""
from http.server import BaseHTTPRequestHandler
import logging

import google.generativeai as genai

from api.gemini_proxy import write_response
from api.key_source import KeySourceError, get_key_source
from api.relay import Failure, RelayResponse

logger = logging.getLogger(__name__)


def list_models(api_key: str) -> list[dict]:
    """Models that support generateContent, usable as relay candidates."""
    genai.configure(api_key=api_key)
    models = []
    for m in genai.list_models():
        if 'generateContent' in m.supported_generation_methods:
            models.append({
                'name': m.name.replace('models/', ''),
                'full_name': m.name,
                'display_name': m.display_name,
                'description': m.description
            })
    return models


def handle_models(method: str, key_source=None) -> RelayResponse:
    method = (method or '').upper()
    if method == 'OPTIONS':
        return RelayResponse(200)
    if method != 'GET':
        return RelayResponse.from_result(Failure(405, 'Method not allowed'))

    try:
        source = key_source or get_key_source()
        api_key = source.fetch_key()
    except KeySourceError as e:
        logger.error('API key unavailable: %s', e)
        return RelayResponse.from_result(Failure(500, str(e)))

    try:
        models = list_models(api_key)
    except Exception as e:
        logger.exception('Listing models failed')
        return RelayResponse.from_result(Failure(500, f'Internal server error: {e}'))
    return RelayResponse(200, {'success': True, 'models': models})


class handler(BaseHTTPRequestHandler):
    def respond(self):
        write_response(self, handle_models(self.command))

    def do_GET(self):
        self.respond()

    def do_OPTIONS(self):
        self.respond()

    def do_POST(self):
        self.respond()

    def do_PUT(self):
        self.respond()

    def do_PATCH(self):
        self.respond()

    def do_DELETE(self):
        self.respond()

    def do_HEAD(self):
        self.respond()
