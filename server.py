from flask import Flask, request, jsonify, Response
from dotenv import load_dotenv
import logging
import os

from api.models import handle_models
from api.relay import PromptRelay, RelayResponse

load_dotenv()
logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

app = Flask(__name__)

ALL_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']


def build_relay() -> PromptRelay:
    return PromptRelay()


def to_flask(response: RelayResponse):
    if response.body is None:
        return Response(status=response.status, headers=response.headers)
    return jsonify(response.body), response.status, response.headers


@app.route('/')
def index():
    return jsonify({'status': 'ok', 'service': 'gemini-proxy'})


@app.route('/api/gemini-proxy', methods=ALL_METHODS)
@app.route('/api/gemini_proxy', methods=ALL_METHODS)
def gemini_proxy():
    body = request.get_json(silent=True) if request.method == 'POST' else None
    return to_flask(build_relay().handle(request.method, body))


@app.route('/api/models', methods=ALL_METHODS)
def models():
    """List available models for the configured key."""
    return to_flask(handle_models(request.method))


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    print("🚀 Starting Gemini proxy server...")
    print(f"📍 POST prompts to http://localhost:{port}/api/gemini-proxy")
    app.run(port=port, debug=True)
