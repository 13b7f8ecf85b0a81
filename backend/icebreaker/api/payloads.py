import re

from flask import request

from icebreaker.errors import ValidationError


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def as_int(data: dict, key: str, required: bool = True):
    """Read an integer field, accepting numeric strings from form-style clients."""
    value = data.get(key)
    if value is None or value == '':
        if required:
            raise ValidationError(f'{key} is required')
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{key} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, str) and re.fullmatch(r'-?[0-9]+', value.strip()):
        return int(value.strip())
    raise ValidationError(f'{key} must be an integer')


def as_text(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{key} is required')
    return value
