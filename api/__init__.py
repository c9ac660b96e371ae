"""API modules for HTTP interface."""

from api.base import (
    APIError,
    APIMeta,
    APIErrorResponse,
    error_response,
    ErrorCodes,
)
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
