"""
routes/content.py - Content mix API

GET /               - mixed content list (?count=<n>&offset=<n>, both required)
GET /api/content    - same endpoint under the API prefix
"""

import logging
import re

from flask import Blueprint, current_app, jsonify, request

from services.mixer import ConfigurationError, InvalidParameterError

logger = logging.getLogger(__name__)

content_bp = Blueprint('content', __name__)

# ASCII digits with an optional sign; int() alone also takes '1_0' and non-ASCII digits
_NUMBER = re.compile(r'[+-]?[0-9]+')


def _window_param(name: str) -> int:
    """Read a required non-negative integer query parameter."""
    raw = request.args.get(name, '').strip()
    if not raw:
        raise InvalidParameterError(name, f"Please provide the '{name}' query parameter.")
    if not _NUMBER.fullmatch(raw):
        raise InvalidParameterError(name, f"Please provide the '{name}' query parameter as number.")
    value = int(raw)
    if value < 0:
        raise InvalidParameterError(
            name, f"Please provide the '{name}' query parameter as a non-negative number."
        )
    return value


@content_bp.route('/', methods=['GET'])
@content_bp.route('/api/content', methods=['GET'])
def get_content():
    try:
        count = _window_param('count')
        offset = _window_param('offset')
        items = current_app.content_mixer.mix(count, offset, user_key=request.remote_addr or '')
    except InvalidParameterError as e:
        return jsonify({'error': str(e)}), 400
    except ConfigurationError as e:
        # TODO: stop echoing the diagnostic once the readiness probe gates traffic
        logger.error('Content mix misconfigured: %s', e)
        return jsonify({'error': f'Something went wrong. Sorry! {e}'}), 500

    return jsonify([item.to_dict() for item in items])
