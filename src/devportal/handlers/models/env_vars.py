"""
Environment variable models for type-safe configuration.

Each Lambda function only receives the variables it needs, so the settings are
split into one model per concern. Models are parsed (and cached) on first use
through aws-lambda-env-modeler rather than at import time.
"""

from typing import Annotated, List

from aws_lambda_env_modeler import BaseModel as BaseEnvModel, get_environment_variables
from pydantic import Field


class ApiEnvVars(BaseEnvModel):
    """Settings shared by every API Gateway facing handler."""

    ALLOWED_ORIGINS: Annotated[str, Field(
        default='http://localhost:5173',
        description='Comma separated list of origins allowed by CORS'
    )] = 'http://localhost:5173'

    MAX_RECORDS_LIMIT: Annotated[int, Field(
        default=5000,
        description='Maximum total record count a get_all request may aggregate',
        ge=1
    )] = 5000

    UPSTREAM_TIMEOUT_SECONDS: Annotated[float, Field(
        default=30.0,
        description='Timeout applied to every upstream HTTP call',
        gt=0,
        le=900
    )] = 30.0

    ACCOUNT_API_BASE_URL: Annotated[str, Field(
        default='https://account-service-api-public.polestar-production.com/v1',
        description='Account service (sign in, token refresh)'
    )] = 'https://account-service-api-public.polestar-production.com/v1'

    VESSEL_API_BASE_URL: Annotated[str, Field(
        default='https://asset-info-api.polestar-production.com/vessel-insights/v1',
        description='Vessel characteristics service'
    )] = 'https://asset-info-api.polestar-production.com/vessel-insights/v1'

    ZONE_SERVICE_BASE_URL: Annotated[str, Field(
        default='https://zone-service-api.polestar-production.com',
        description='Zone service hosting zone/port and voyage insights'
    )] = 'https://zone-service-api.polestar-production.com'

    GAP_REPORTING_BASE_URL: Annotated[str, Field(
        default='https://gap-reporting-api-public.polestar-production.com',
        description='AIS reporting gaps service'
    )] = 'https://gap-reporting-api-public.polestar-production.com'

    AIS_SPOOFING_BASE_URL: Annotated[str, Field(
        default='https://ais-spoofing-api-public.polestar-production.com',
        description='Positional discrepancy service'
    )] = 'https://ais-spoofing-api-public.polestar-production.com'

    PSC_INSPECTION_BASE_URL: Annotated[str, Field(
        default='https://psc-insp-service-api-public.polestar-production.com',
        description='Port state control inspection service'
    )] = 'https://psc-insp-service-api-public.polestar-production.com'

    NOTIFICATION_API_BASE_URL: Annotated[str, Field(
        default='https://event-notification-service-api.polestar-production.com/notifications/v1',
        description='Notification subscription service'
    )] = 'https://event-notification-service-api.polestar-production.com/notifications/v1'

    PTE_BASE_URL: Annotated[str, Field(
        default='https://api.polestar-production.com/purpletrac/v1',
        description='PurpleTrac API (vessel search and compliance screening)'
    )] = 'https://api.polestar-production.com/purpletrac/v1'

    @property
    def allowed_origins(self) -> List[str]:
        """Allowed origins, in configured order."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(',') if origin.strip()]


class NotificationsEnvVars(BaseEnvModel):
    """Settings for the webhook notifications store."""

    NOTIFICATIONS_TABLE: Annotated[str, Field(
        description='DynamoDB table holding webhook notifications',
        min_length=1
    )]

    NOTIFICATION_TTL_HOURS: Annotated[int, Field(
        default=24,
        description='Hours a stored notification lives before TTL removes it',
        ge=1
    )] = 24


class ScreeningEnvVars(BaseEnvModel):
    """Settings for automated compliance screening."""

    PTE_USERNAME: Annotated[str, Field(
        description='PurpleTrac account user name',
        min_length=1
    )]

    PTE_API_KEY: Annotated[str, Field(
        description='PurpleTrac API key',
        min_length=1
    )]

    SCREENING_INITIAL_DELAY_SECONDS: Annotated[float, Field(
        default=5.0,
        description='Wait before the first status poll',
        ge=0
    )] = 5.0

    SCREENING_POLL_INTERVAL_SECONDS: Annotated[float, Field(
        default=5.0,
        description='Wait between two status polls',
        gt=0
    )] = 5.0

    SCREENING_TIMEOUT_SECONDS: Annotated[float, Field(
        default=300.0,
        description='Polling budget before the verdict is forced to ERROR',
        gt=0,
        le=900
    )] = 300.0


class GeodataEnvVars(BaseEnvModel):
    """Settings for the zone and port reference catalog."""

    BUCKET_NAME: Annotated[str, Field(
        description='S3 bucket holding the zone and port CSV',
        min_length=1
    )]

    ZONES_CSV_KEY: Annotated[str, Field(
        default='data/zones-ports.csv',
        description='Object key of the zone and port CSV'
    )] = 'data/zones-ports.csv'


class VesselSearchEnvVars(BaseEnvModel):
    """Settings for vessel name search."""

    POLESTAR_SECRET_ARN: Annotated[str, Field(
        description='Secrets Manager secret with PurpleTrac username and api_key',
        min_length=1
    )]

    SECRET_MAX_AGE_SECONDS: Annotated[int, Field(
        default=300,
        description='How long the PurpleTrac credentials are cached',
        ge=0
    )] = 300


class StreamEnvVars(BaseEnvModel):
    """Settings for the notification stream fan-out."""

    APPSYNC_API_ENDPOINT: Annotated[str, Field(
        description='AppSync GraphQL endpoint',
        min_length=1
    )]

    APPSYNC_API_KEY: Annotated[str, Field(
        description='AppSync API key',
        min_length=1
    )]


def get_api_env_vars() -> ApiEnvVars:
    """Get typed settings shared by the API handlers."""
    return get_environment_variables(model=ApiEnvVars)


def get_notifications_env_vars() -> NotificationsEnvVars:
    return get_environment_variables(model=NotificationsEnvVars)


def get_screening_env_vars() -> ScreeningEnvVars:
    return get_environment_variables(model=ScreeningEnvVars)


def get_geodata_env_vars() -> GeodataEnvVars:
    return get_environment_variables(model=GeodataEnvVars)


def get_vessel_search_env_vars() -> VesselSearchEnvVars:
    return get_environment_variables(model=VesselSearchEnvVars)


def get_stream_env_vars() -> StreamEnvVars:
    return get_environment_variables(model=StreamEnvVars)
