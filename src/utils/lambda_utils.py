from typing import Dict, Any
import base64
import binascii
import json
from decimal import Decimal
import uuid
from datetime import date

class DecimalEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            # Always return as string to preserve precision and ensure consistent type
            return str(obj)
        if isinstance(obj, uuid.UUID):
            return str(obj)
        if isinstance(obj, date):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        return super(DecimalEncoder, self).default(obj)

def create_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    """Create a standardized API response."""
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Content-Type,Authorization",
            "Access-Control-Allow-Methods": "GET,POST,OPTIONS"
        },
        "body": json.dumps(body, cls=DecimalEncoder)
    }


def handle_error(status_code: int, message: str) -> Dict[str, Any]:
    """Create a standardized error response."""
    return create_response(status_code, {"message": message})


def parse_json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decode the JSON request body.

    API Gateway base64-encodes bodies it considers binary; those are decoded first.
    Raises ValueError if the body is not a JSON object.
    """
    raw = event.get('body') or '{}'
    if event.get('isBase64Encoded'):
        try:
            raw = base64.b64decode(raw).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError):
            raise ValueError("Request body is not valid base64-encoded UTF-8")
    try:
        body = json.loads(raw)
    except json.JSONDecodeError:
        raise ValueError("Invalid JSON in request body")
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


# extract parameters from an already decoded json payload
def optional_body_parameter(body: Dict[str, Any], parameter_name: str) -> Any:
    """Extract a parameter from a decoded request body."""
    return body.get(parameter_name)

def mandatory_body_parameter(body: Dict[str, Any], parameter_name: str) -> Any:
    """Extract a mandatory parameter from a decoded request body."""
    parameter_value = optional_body_parameter(body, parameter_name)
    if parameter_value is None or parameter_value == '':
        raise KeyError(f"Body parameter {parameter_name} is required")
    return parameter_value
