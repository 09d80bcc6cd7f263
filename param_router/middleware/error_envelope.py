"""
Failure response for parameter verification.

Diagnostics mode (see config.is_diagnostics_enabled):
{
    "error": "Required parameters are missing",
    "params": {
        "var1": {"type": "number", "error": "not set"}
    }
}

Any other mode returns the same status with an empty body.
"""

from typing import Any, Dict

from flask import Response, jsonify

from ..config import Config, is_diagnostics_enabled


def make_failure_response(errors: Dict[str, Dict[str, Any]]) -> Response:
    """
    Build the default 422 response for a failed verification.

    Args:
        errors: Serialized error map (param name -> error info)

    Returns:
        Flask response with status 422
    """
    if is_diagnostics_enabled():
        response = jsonify({
            "error": Config.FAILURE_MESSAGE,
            "params": errors,
        })
        response.status_code = Config.FAILURE_STATUS
    else:
        response = Response(status=Config.FAILURE_STATUS)
    return response
