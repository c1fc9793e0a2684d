"""
Vessel name search against the PurpleTrac ship register.
"""

from typing import Any, Dict, List

from aws_lambda_powertools.utilities import parameters

from devportal.handlers.models.env_vars import get_api_env_vars, get_vessel_search_env_vars
from devportal.handlers.utils.observability import logger, tracer
from devportal.logic.purpletrac import PurpleTracClient, PurpleTracCredentials
from devportal.logic.upstream import get_upstream_client


def get_credentials() -> PurpleTracCredentials:
    """Read PurpleTrac credentials from Secrets Manager (cached by Powertools)."""
    settings = get_vessel_search_env_vars()
    secret = parameters.get_secret(
        settings.POLESTAR_SECRET_ARN,
        transform='json',
        max_age=settings.SECRET_MAX_AGE_SECONDS,
    )
    return PurpleTracCredentials.model_validate(secret)


@tracer.capture_method(capture_response=False)
def search_vessels(keyword: str) -> List[Dict[str, Any]]:
    client = PurpleTracClient(
        upstream=get_upstream_client(),
        base_url=get_api_env_vars().PTE_BASE_URL,
        credentials=get_credentials(),
    )
    vessels = client.search_ships(keyword)
    logger.info('Vessel search finished', extra={'keyword': keyword, 'vessel_count': len(vessels)})
    return vessels
