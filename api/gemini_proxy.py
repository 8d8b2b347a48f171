"""Gemini proxy API endpoint: relays a prompt to the first working model."""
from http.server import BaseHTTPRequestHandler
import json
import logging

from api.relay import PromptRelay, RelayResponse

logger = logging.getLogger(__name__)


def build_relay() -> PromptRelay:
    return PromptRelay()


def read_json_body(handler) -> dict | None:
    """Decode the request body, or None when it is absent or not JSON."""
    content_length = int(handler.headers.get('Content-Length', 0) or 0)
    if content_length <= 0:
        return None
    raw = handler.rfile.read(content_length)
    try:
        return json.loads(raw.decode())
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.warning('Request body is not valid JSON')
        return None


def write_response(handler, response: RelayResponse):
    handler.send_response(response.status)
    for name, value in response.headers.items():
        handler.send_header(name, value)
    if response.body is None:
        handler.send_header('Content-Length', '0')
        handler.end_headers()
        return
    payload = json.dumps(response.body).encode()
    handler.send_header('Content-Type', 'application/json')
    handler.send_header('Content-Length', str(len(payload)))
    handler.end_headers()
    if handler.command != 'HEAD':
        handler.wfile.write(payload)


class handler(BaseHTTPRequestHandler):
    def relay(self, with_body: bool = False):
        body = read_json_body(self) if with_body else None
        write_response(self, build_relay().handle(self.command, body))

    def do_OPTIONS(self):
        self.relay()

    def do_POST(self):
        self.relay(with_body=True)

    def do_GET(self):
        self.relay()

    def do_PUT(self):
        self.relay()

    def do_PATCH(self):
        self.relay()

    def do_DELETE(self):
        self.relay()

    def do_HEAD(self):
        self.relay()
