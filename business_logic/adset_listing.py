"""
Post-creation ad set listing.

Lists the ad sets of a campaign, fetches their insights in parallel and
formats the result for display.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import pandas as pd

from models.data_models import AdSetSummary
from config.settings import AppConfig, CredentialStore
from data.ads_client import AdsClient
from .error_handler import error_handler, CampaignBuilderError, SessionExpired

logger = logging.getLogger(__name__)


DISPLAY_COLUMNS = [
    'Ad Set ID', 'Name', 'Status', 'Daily Budget', 'Optimization Goal',
    'Billing Event', 'Impressions', 'Clicks', 'Spend',
]


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class AdSetListing:
    """Fetches and formats the ad sets of one campaign."""

    def __init__(self, client: AdsClient, credential_store: CredentialStore,
                 config: Optional[AppConfig] = None):
        self.client = client
        self.credential_store = credential_store
        self.config = config or AppConfig()

    def load(self, campaign_id: str) -> List[AdSetSummary]:
        """
        List a campaign's ad sets with their insights.

        Args:
            campaign_id: Campaign whose ad sets are listed

        Returns:
            One AdSetSummary per ad set, insights None where unavailable

        Raises:
            CampaignBuilderError: If the ad sets cannot be listed; an expired
                session also disconnects the credential store
        """
        credentials = self.credential_store.get()
        page_size = self.config.listing_page_size
        try:
            raw_adsets = self.client.list_adsets(campaign_id, credentials, limit=page_size)
        except SessionExpired as e:
            error_info = error_handler.classify_error(e, "ad set listing")
            error_handler.log_error(error_info, "Ad set listing")
            self.credential_store.invalidate()
            raise

        if not raw_adsets:
            logger.info(f"No ad sets found for campaign {campaign_id}")
            return []

        summaries = [self._summarize(item) for item in raw_adsets]
        workers = max(1, min(len(summaries), page_size, self.config.insights_max_workers))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            insights = list(executor.map(
                lambda summary: self._fetch_insights(summary.adset_id, credentials), summaries
            ))

        for summary, insight in zip(summaries, insights):
            summary.insights = insight

        logger.info(
            f"Loaded {len(summaries)} ad sets for campaign {campaign_id} "
            f"({sum(1 for i in insights if i is not None)} with insights)"
        )
        return summaries

    def _fetch_insights(self, adset_id: str, credentials) -> Optional[Dict[str, Any]]:
        # A failed fetch only blanks this row
        try:
            return self.client.fetch_adset_insights(adset_id, credentials)
        except SessionExpired as e:
            logger.warning(f"Session expired while fetching insights for ad set {adset_id}: {e.message}")
            self.credential_store.invalidate()
            return None
        except CampaignBuilderError as e:
            logger.warning(f"Insights unavailable for ad set {adset_id}: {e.message}")
            return None

    def _summarize(self, item: Dict[str, Any]) -> AdSetSummary:
        budget = _to_float(item.get('daily_budget'))
        if budget is not None:
            budget = budget / self.config.budget_minor_unit_factor

        return AdSetSummary(
            adset_id=str(item.get('id', '')),
            name=item.get('name', ''),
            status=str(item.get('status') or item.get('effective_status') or '').lower(),
            daily_budget=budget,
            optimization_goal=item.get('optimization_goal', ''),
            billing_event=item.get('billing_event', '')
        )

    def to_dataframe(self, summaries: List[AdSetSummary]) -> pd.DataFrame:
        """Format summaries as a display table."""
        rows = []
        for summary in summaries:
            insights = summary.insights or {}
            rows.append({
                'Ad Set ID': summary.adset_id,
                'Name': summary.name,
                'Status': summary.status,
                'Daily Budget': summary.daily_budget,
                'Optimization Goal': summary.optimization_goal,
                'Billing Event': summary.billing_event,
                'Impressions': _to_float(insights.get('impressions')),
                'Clicks': _to_float(insights.get('clicks')),
                'Spend': _to_float(insights.get('spend')),
            })
        return pd.DataFrame(rows, columns=DISPLAY_COLUMNS)

    def set_status(self, adset_id: str, active: bool) -> Dict[str, Any]:
        """
        Activate or pause one ad set.

        Returns:
            Dictionary with success flag, message and optional notification
        """
        action = "activated" if active else "paused"
        try:
            self.client.set_adset_status(adset_id, active, self.credential_store.get())
        except CampaignBuilderError as e:
            error_info = error_handler.classify_error(e, "ad set status change")
            error_handler.log_error(error_info, "Ad set listing")
            if error_info.aborts_workflow:
                self.credential_store.invalidate()
            return {
                'success': False,
                'message': error_info.user_message,
                'notification': error_handler.create_user_notification(error_info)
            }

        logger.info(f"Ad set {adset_id} {action}")
        return {'success': True, 'message': f"Ad set {action}", 'notification': None}
