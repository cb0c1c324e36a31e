"""API Gateway (Lambda Proxy) response builders shared by all handlers.

CORS headers are attached when the deployment configures an allowed origin.
"""

import json
from typing import Any

from paylink.types import HttpHeaders, LambdaResponse


def cors_headers(allow_origin: str | None) -> HttpHeaders:
    if not allow_origin:
        return {}
    return {
        'Access-Control-Allow-Origin': allow_origin,
        'Access-Control-Allow-Headers': 'Content-Type,x-api-key',
        'Access-Control-Allow-Methods': 'OPTIONS,POST,GET',
    }


def json_response(status_code: int, body: dict[str, Any], *, allow_origin: str | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **cors_headers(allow_origin)},
        'body': json.dumps(body, default=str),
    }


def text_response(status_code: int, text: str, *, allow_origin: str | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'text/plain; charset=utf-8', **cors_headers(allow_origin)},
        'body': text,
    }


def response_400(message: str | None = None, error_code: str | None = None, **kwargs) -> LambdaResponse:
    body = {'ok': False, 'error': message or 'Bad Request'}
    if error_code:
        body['errorCode'] = error_code
    return json_response(400, body, **kwargs)


def response_401(message: str | None = None, error_code: str | None = None, **kwargs) -> LambdaResponse:
    body = {'ok': False, 'error': message or 'Unauthorized'}
    if error_code:
        body['errorCode'] = error_code
    return json_response(401, body, **kwargs)


def response_404(message: str | None = None, **kwargs) -> LambdaResponse:
    return text_response(404, message or 'Not Found', **kwargs)


def response_500(message: str | None = None, error_code: str | None = None, **kwargs) -> LambdaResponse:
    base = 'Internal Server Error'
    body = {'ok': False, 'error': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return json_response(500, body, **kwargs)


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {
            'Location': location,
            'Cache-Control': 'no-store',
        },
        'body': '',
    }


def response_204(**kwargs) -> LambdaResponse:
    """Empty response, used to answer CORS preflight requests"""
    response = text_response(204, '', **kwargs)
    del response['headers']['Content-Type']
    return response
