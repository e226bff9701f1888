"""
HTTP client for the ads-management backend.

Performs one request per call, attaches the account credentials as headers
and normalizes the backend's response envelopes into plain identifiers.
"""

import logging
from typing import Dict, List, Optional, Any

import requests

from models.data_models import Credentials
from business_logic.error_handler import (
    ValidationError, SessionExpired, RemoteRejection, MalformedResponse,
    TransientNetworkError, is_session_expired, extract_error_message,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def extract_resource_id(body: Any) -> str:
    """
    Pull the created resource id out of a success response.

    Accepted shapes, in order of precedence:
    ``{"success": true, "data": {"id": ...}}``, ``{"data": {"id": ...}}``
    and ``{"id": ...}``.

    Raises:
        RemoteRejection: if the envelope reports ``success: false``
        MalformedResponse: if no identifier can be found
    """
    if not isinstance(body, dict):
        raise MalformedResponse(f"Expected a JSON object, got {type(body).__name__}")

    data = body.get('data')

    if 'success' in body:
        if body['success'] is False:
            raise RemoteRejection(extract_error_message(body))
        if isinstance(data, dict) and data.get('id'):
            return str(data['id'])

    if isinstance(data, dict) and data.get('id'):
        return str(data['id'])

    if body.get('id'):
        return str(body['id'])

    raise MalformedResponse(f"No resource id in response keys {sorted(body.keys())}")


class AdsClient:
    """
    Thin client over the ads-management backend.

    Every request carries the same credential header pair; no request is
    retried automatically.
    """

    ACCOUNT_HEADER = "act_ad_account_id"
    TOKEN_HEADER = "fb_token"

    def __init__(self, base_url: str, timeout: int = 30, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            base_url: Backend API root, e.g. https://host/api/v1
            timeout: Per-request timeout in seconds
            session: Optional requests session (injected in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, credentials: Optional[Credentials]) -> Dict[str, str]:
        if credentials is None or not credentials.is_complete():
            raise ValidationError("Please connect your Facebook account first", field="credentials")

        return {
            "Content-Type": "application/json",
            self.ACCOUNT_HEADER: credentials.ad_account_id,
            self.TOKEN_HEADER: credentials.access_token,
        }

    def _request(self, method: str, path: str, credentials: Optional[Credentials],
                 payload: Optional[Dict[str, Any]] = None,
                 params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send one request and return the decoded body of a 2xx response.

        Raises:
            SessionExpired, RemoteRejection, TransientNetworkError
        """
        headers = self._headers(credentials)
        url = f"{self.base_url}/{path.lstrip('/')}"
        log_tag = f"[{method} /{path.lstrip('/')}]"

        try:
            response = self.session.request(
                method, url, headers=headers, json=payload, params=params, timeout=self.timeout
            )
        except requests.Timeout as e:
            logger.error(f"{log_tag} Request timeout")
            raise TransientNetworkError(f"Request timed out: {str(e)}") from e
        except requests.RequestException as e:
            logger.error(f"{log_tag} Request failed: {str(e)}")
            raise TransientNetworkError(f"Connection failed: {str(e)}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            if is_session_expired(response.status_code, body):
                logger.warning(f"{log_tag} Access token expired")
                raise SessionExpired("Facebook access token has expired")

            platform_error = {}
            if isinstance(body, dict):
                platform_error = body.get('fb') or body.get('error')
                if not isinstance(platform_error, dict):
                    platform_error = {}

            message = extract_error_message(body)
            logger.error(f"{log_tag} Rejected with status {response.status_code}: {message}")
            raise RemoteRejection(
                message,
                status_code=response.status_code,
                error_code=platform_error.get('code'),
                error_subcode=platform_error.get('error_subcode')
            )

        return body

    def create(self, endpoint: str, payload: Dict[str, Any], credentials: Optional[Credentials]) -> str:
        """
        Create one remote resource and return its identifier.

        Args:
            endpoint: Path relative to the API root, e.g. click-to-call/adsets
            payload: JSON body
            credentials: Ad account credentials

        Returns:
            The new resource id
        """
        body = self._request("POST", endpoint, credentials, payload=payload)
        resource_id = extract_resource_id(body)
        logger.info(f"Created resource {resource_id} via /{endpoint.lstrip('/')}")
        return resource_id

    def list_pages(self, credentials: Optional[Credentials]) -> List[Dict[str, Any]]:
        """Facebook pages the account can advertise for."""
        body = self._request("GET", "ads/pages", credentials)
        if isinstance(body, dict):
            pages = body.get('data') or body.get('pages') or []
            if isinstance(pages, dict):
                pages = pages.get('data', [])
            return list(pages)
        return []

    def list_adsets(self, campaign_id: str, credentials: Optional[Credentials],
                    limit: int = 25) -> List[Dict[str, Any]]:
        """Ad sets of a campaign, at most ``limit`` items."""
        body = self._request(
            "GET", "adsets/all", credentials, params={'campaignId': campaign_id, 'limit': limit}
        )
        if not isinstance(body, dict):
            return []

        adsets = body.get('adsets') or body.get('data') or []
        if isinstance(adsets, dict):
            adsets = adsets.get('data', [])
        return list(adsets)[:limit]

    def fetch_adset_insights(self, adset_id: str, credentials: Optional[Credentials]) -> Optional[Dict[str, Any]]:
        """Insight metrics of one ad set, or None when the platform has none."""
        body = self._request("GET", f"adsets/{adset_id}/insights", credentials)
        if not isinstance(body, dict):
            return None

        data = body.get('data', body.get('insights'))
        if isinstance(data, dict):
            data = data.get('data', [data])
        if isinstance(data, list):
            return data[0] if data else None
        return None

    def set_adset_status(self, adset_id: str, active: bool, credentials: Optional[Credentials]) -> Any:
        """Activate or pause an existing ad set."""
        action = "activate" if active else "pause"
        logger.info(f"Requesting {action} for ad set {adset_id}")
        return self._request("POST", f"adsets/{adset_id}/{action}", credentials)
