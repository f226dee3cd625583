"""
Whop API client.
Lists payments, memberships and affiliates for a company.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..utils.exceptions import ConfigurationError, WhopAPIError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://api.whop.com/api/v2'
DEFAULT_PAGE_SIZE = 100


class WhopClient:
    """
    Client for the Whop REST API.

    Every ``list_*`` method follows pagination and returns the raw records
    untouched; normalization happens later. Supports both pagination styles
    Whop has shipped:
    - page numbers: ``{"data": [...], "pagination": {"current_page", "total_pages"}}``
    - cursors: ``{"data": [...], "page_info": {"has_next_page", "end_cursor"}}``
    A bare JSON list is treated as a single page.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_pages: int = 50,
        page_size: int = DEFAULT_PAGE_SIZE,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize Whop client.

        Args:
            api_key: Company API key (sent as a bearer token)
            base_url: API root, without trailing slash
            timeout: Per-request timeout in seconds
            max_pages: Stop following pagination after this many pages
            page_size: Records requested per page
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        if not api_key:
            raise ConfigurationError('Whop API key is required')

        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_pages = max_pages
        self.page_size = page_size
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            headers={
                'Authorization': f'Bearer {self.api_key}',
                'Content-Type': 'application/json',
            },
            timeout=self.timeout,
            transport=self._transport,
        )

    def _get(self, client: httpx.Client, path: str, params: Dict[str, Any]) -> Any:
        """Execute one GET and decode the JSON body."""
        try:
            response = client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise WhopAPIError(
                f'Whop API error: {status} {e.response.reason_phrase}',
                status=status,
                original_error=e,
            )
        except httpx.HTTPError as e:
            raise WhopAPIError(f'Whop API request failed: {e}', original_error=e)

        try:
            return response.json()
        except ValueError as e:
            raise WhopAPIError(f'Whop API returned invalid JSON for {path}', original_error=e)

    def _list(self, path: str, company_id: str) -> List[Dict[str, Any]]:
        """Fetch every page of a collection."""
        params: Dict[str, Any] = {'company_id': company_id, 'per': self.page_size}
        records: List[Dict[str, Any]] = []
        page = 1

        with self._client() as client:
            while True:
                payload = self._get(client, path, params)

                if isinstance(payload, list):
                    records.extend(payload)
                    break
                if not isinstance(payload, dict):
                    raise WhopAPIError(f'Unexpected {path} payload type: {type(payload).__name__}')

                data = payload.get('data') or []
                if not isinstance(data, list):
                    raise WhopAPIError(f'Unexpected {path} data type: {type(data).__name__}')
                records.extend(data)

                next_params = self._next_page_params(payload, page)
                if next_params is None:
                    break
                if page >= self.max_pages:
                    logger.warning('Stopped paginating %s for %s after %d pages', path, company_id, page)
                    break

                params = {**params, **next_params}
                page += 1

        logger.debug('Fetched %d %s records for %s', len(records), path, company_id)
        return records

    @staticmethod
    def _next_page_params(payload: Dict[str, Any], page: int) -> Optional[Dict[str, Any]]:
        page_info = payload.get('page_info') or {}
        if not isinstance(page_info, dict):
            raise WhopAPIError(f'Unexpected pagination block: {type(page_info).__name__}')
        if page_info.get('has_next_page') and page_info.get('end_cursor'):
            return {'after': page_info['end_cursor']}

        pagination = payload.get('pagination') or {}
        if not isinstance(pagination, dict):
            raise WhopAPIError(f'Unexpected pagination block: {type(pagination).__name__}')
        next_page = pagination.get('next_page')
        if next_page:
            return {'page': next_page}

        total_pages = pagination.get('total_pages')
        current_page = pagination.get('current_page', page)
        if not (total_pages and current_page):
            return None
        try:
            current, total = int(current_page), int(total_pages)
        except (TypeError, ValueError) as e:
            raise WhopAPIError(f'Unexpected pagination values: {current_page!r} of {total_pages!r}') from e
        if current < total:
            return {'page': current + 1}

        return None

    def list_payments(self, company_id: str) -> List[Dict[str, Any]]:
        """List all payments for a company."""
        return self._list('payments', company_id)

    def list_memberships(self, company_id: str) -> List[Dict[str, Any]]:
        """List all memberships for a company."""
        return self._list('memberships', company_id)

    def list_affiliates(self, company_id: str) -> List[Dict[str, Any]]:
        """
        List affiliates for a company.

        Not every API version exposes this resource; a 404 means attribution
        has to come from payments alone and yields an empty list.
        """
        try:
            return self._list('affiliates', company_id)
        except WhopAPIError as e:
            if e.status == 404:
                logger.info('No affiliates resource available, using payment attribution only')
                return []
            raise


def get_whop_client(config: Dict[str, Any], transport: Optional[httpx.BaseTransport] = None) -> WhopClient:
    """
    Build a client from Flask config.

    Raises:
        ConfigurationError: If WHOP_API_KEY is not set
    """
    api_key = config.get('WHOP_API_KEY')
    if not api_key:
        raise ConfigurationError('WHOP_API_KEY is not configured')

    return WhopClient(
        api_key,
        base_url=config.get('WHOP_API_BASE_URL', DEFAULT_BASE_URL),
        timeout=float(config.get('WHOP_API_TIMEOUT', 30)),
        max_pages=int(config.get('WHOP_MAX_PAGES', 50)),
        transport=transport,
    )
