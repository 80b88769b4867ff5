"""
TIAC HTTP server
Exposes Setup and KeyGen as JSON endpoints; holds no state between requests.
"""

import logging

from flask import Flask, request, jsonify

from tiac.boundary import perform_setup, perform_keygen
from tiac.keygen import default_threshold
from service.config import config

logger = logging.getLogger(__name__)

app = Flask(__name__)


def _respond(outcome):
    """Serialize an outcome, release it, and pick the HTTP status."""
    with outcome:
        body = outcome.to_dict()
    if outcome.success:
        status = 200
    elif outcome.error_kind is not None and outcome.error_kind.is_caller_error:
        status = 400
    else:
        status = 500
    return jsonify(body), status


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@app.route('/health', methods=['GET'])
def health():
    """Health check"""
    return jsonify({'status': 'ok'})


@app.route('/setup', methods=['POST'])
def setup():
    """Run Setup; body: {"security_level": int}"""
    data = _json_body()
    security_level = data.get('security_level', config.security_level)
    return _respond(perform_setup(security_level))


@app.route('/keygen', methods=['POST'])
def keygen():
    """Run KeyGen; body: {"params": {...}, "threshold": int | null, "num_authorities": int}"""
    data = _json_body()
    num_authorities = data.get('num_authorities')
    threshold = data.get('threshold')
    if threshold is None and isinstance(num_authorities, int) and not isinstance(num_authorities, bool):
        threshold = default_threshold(num_authorities)
        logger.info("no threshold given, using %d for %d authorities", threshold, num_authorities)
    return _respond(perform_keygen(data.get('params'), threshold, num_authorities))


def main():
    """Start the TIAC server"""
    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    logger.info("Starting TIAC server on %s:%s", config.host, config.port)
    app.run(host=config.host, port=config.port, debug=False)


if __name__ == '__main__':
    main()
