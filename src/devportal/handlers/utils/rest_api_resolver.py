"""
REST API resolver factory for the portal handlers.

Every API Gateway facing Lambda builds its resolver here so that CORS and
error handling behave the same across functions.
"""

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, CORSConfig

from devportal.handlers.models.env_vars import get_api_env_vars
from devportal.handlers.utils.errors import register_exception_handlers

# Token headers travel in both directions
TOKEN_HEADERS = ['Access-Token', 'Refresh-Token', 'access-token', 'refresh-token']

ALLOWED_HEADERS = [
    'Content-Type',
    'X-Amz-Date',
    'Authorization',
    'X-Api-Key',
    'X-Amz-Security-Token',
    *TOKEN_HEADERS,
]


def create_cors_config() -> CORSConfig:
    """Build CORS settings from the ALLOWED_ORIGINS environment variable."""
    origins = get_api_env_vars().allowed_origins or ['*']
    return CORSConfig(
        allow_origin=origins[0],
        extra_origins=origins[1:],
        allow_headers=ALLOWED_HEADERS,
        expose_headers=TOKEN_HEADERS,
        max_age=3600,
        allow_credentials=True,
    )


def create_resolver() -> APIGatewayRestResolver:
    """Create an API Gateway REST resolver with CORS and error handlers attached."""
    app = APIGatewayRestResolver(cors=create_cors_config())
    register_exception_handlers(app)
    return app
