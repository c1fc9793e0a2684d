"""
PurpleTrac API client.

PurpleTrac authenticates with ``username`` / ``api_key`` query parameters
rather than a bearer token. The same API serves compliance screening
(registration + transaction status) and the ship register used by vessel
name search.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from devportal.handlers.utils.observability import logger, tracer
from devportal.logic.upstream import UpstreamClient
from devportal.models.screening import ScreeningJob, SubmissionResult

SCREENING_CUSTOM_REFERENCE = 'AUTO_SCREENING_PROTOTYPE'
SHIP_SEARCH_PAGE_SIZE = 500


class PurpleTracCredentials(BaseModel):
    username: str
    api_key: str


class PurpleTracClient:
    """Calls to the PurpleTrac v1 API."""

    def __init__(self, upstream: UpstreamClient, base_url: str, credentials: PurpleTracCredentials) -> None:
        self.upstream = upstream
        self.base_url = base_url.rstrip('/')
        self.credentials = credentials

    def _auth_params(self) -> Dict[str, str]:
        return {'username': self.credentials.username, 'api_key': self.credentials.api_key}

    @tracer.capture_method
    def register_screening(self, registered_name: str) -> SubmissionResult:
        """Submit a screening job for a vessel."""
        response = self.upstream.post(
            f'{self.base_url}/registration',
            params=self._auth_params(),
            json={
                'registered_name': registered_name,
                'custom_reference': SCREENING_CUSTOM_REFERENCE,
            },
        )
        submission = SubmissionResult.model_validate(response.data)
        logger.info('Screening job submitted', extra={'transaction_id': submission.transaction_id})
        return submission

    @tracer.capture_method
    def get_transaction(self, transaction_id: str) -> Optional[ScreeningJob]:
        """Fetch the status of a screening job; None while the upstream has nothing to report."""
        response = self.upstream.get(
            f'{self.base_url}/transaction',
            params={'id': transaction_id, **self._auth_params()},
        )
        objects = response.data.get('objects') if isinstance(response.data, dict) else None
        if not isinstance(objects, list) or not objects or not isinstance(objects[0], dict):
            return None
        return ScreeningJob.model_validate(objects[0])

    @tracer.capture_method
    def search_ships(self, name_prefix: str) -> List[Dict[str, Any]]:
        """Find ships whose name starts with the given prefix (case-insensitive)."""
        response = self.upstream.get(
            f'{self.base_url}/sisship',
            params={
                'limit': SHIP_SEARCH_PAGE_SIZE,
                'offset': 0,
                'ship_name__istartswith': name_prefix,
                **self._auth_params(),
            },
        )
        if not isinstance(response.data, dict):
            return []
        return response.data.get('objects') or []
