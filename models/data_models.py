"""
Core data models for the Ad Campaign Builder application.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Any


class CampaignType(Enum):
    """Campaign kind chosen once at the start of a workflow."""
    WHATSAPP = "whatsapp"
    CALL = "call"
    LINK = "link"
    LEAD_FORM = "lead_form"


class Objective(Enum):
    """Top-level business goal of a campaign."""
    AWARENESS = "OUTCOME_AWARENESS"
    TRAFFIC = "OUTCOME_TRAFFIC"
    ENGAGEMENT = "OUTCOME_ENGAGEMENT"
    LEADS = "OUTCOME_LEADS"
    SALES = "OUTCOME_SALES"
    APP_PROMOTION = "OUTCOME_APP_PROMOTION"


class OptimizationGoal(Enum):
    """Metric an ad set is tuned to maximize."""
    AD_RECALL_LIFT = "AD_RECALL_LIFT"
    REACH = "REACH"
    IMPRESSIONS = "IMPRESSIONS"
    THRUPLAY = "THRUPLAY"
    TWO_SECOND_CONTINUOUS_VIDEO_VIEWS = "TWO_SECOND_CONTINUOUS_VIDEO_VIEWS"
    LINK_CLICKS = "LINK_CLICKS"
    LANDING_PAGE_VIEWS = "LANDING_PAGE_VIEWS"
    QUALITY_CALL = "QUALITY_CALL"
    CONVERSATIONS = "CONVERSATIONS"
    VISIT_INSTAGRAM_PROFILE = "VISIT_INSTAGRAM_PROFILE"
    POST_ENGAGEMENT = "POST_ENGAGEMENT"
    PAGE_LIKES = "PAGE_LIKES"
    EVENT_RESPONSES = "EVENT_RESPONSES"
    REMINDERS_SET = "REMINDERS_SET"
    LEAD_GENERATION = "LEAD_GENERATION"
    QUALITY_LEAD = "QUALITY_LEAD"
    OFFSITE_CONVERSIONS = "OFFSITE_CONVERSIONS"
    VALUE = "VALUE"
    APP_INSTALLS = "APP_INSTALLS"
    APP_INSTALLS_AND_OFFSITE_CONVERSIONS = "APP_INSTALLS_AND_OFFSITE_CONVERSIONS"


class DestinationType(Enum):
    """Where a click or tap on the ad leads."""
    WEBSITE = "WEBSITE"
    WHATSAPP = "WHATSAPP"
    MESSAGING_APPS = "MESSAGING_APPS"
    PHONE_CALL = "PHONE_CALL"
    INSTAGRAM_PROFILE = "INSTAGRAM_PROFILE"
    FACEBOOK_PAGE = "FACEBOOK_PAGE"
    ON_AD = "ON_AD"
    INSTANT_FORM = "INSTANT_FORM"
    CALLS = "CALLS"
    APP_STORE = "APP_STORE"
    APP_DEEP_LINK = "APP_DEEP_LINK"
    APP = "APP"
    LEAD_FORM = "LEAD_FORM"


class CTAType(Enum):
    """Call-to-action button shown on the rendered ad."""
    LEARN_MORE = "LEARN_MORE"
    SHOP_NOW = "SHOP_NOW"
    SIGN_UP = "SIGN_UP"
    SUBSCRIBE = "SUBSCRIBE"
    CONTACT_US = "CONTACT_US"
    APPLY_NOW = "APPLY_NOW"
    BOOK_NOW = "BOOK_NOW"
    BOOK_TRAVEL = "BOOK_TRAVEL"
    DOWNLOAD = "DOWNLOAD"
    GET_OFFER = "GET_OFFER"
    GET_QUOTE = "GET_QUOTE"
    ORDER_NOW = "ORDER_NOW"
    WATCH_MORE = "WATCH_MORE"
    SEND_MESSAGE = "SEND_MESSAGE"
    WHATSAPP_MESSAGE = "WHATSAPP_MESSAGE"
    CALL_NOW = "CALL_NOW"
    INSTALL_MOBILE_APP = "INSTALL_MOBILE_APP"
    USE_APP = "USE_APP"
    LIKE_PAGE = "LIKE_PAGE"
    GET_DIRECTIONS = "GET_DIRECTIONS"
    VISIT_PROFILE = "VISIT_PROFILE"


class BidStrategy(Enum):
    """Bidding strategy of an ad set."""
    LOWEST_COST_NO_CAP = "LOWEST_COST_WITHOUT_CAP"
    LOWEST_COST_WITH_CAP = "LOWEST_COST_WITH_BID_CAP"
    COST_CAP = "COST_CAP"
    LOWEST_COST_MIN_ROAS = "LOWEST_COST_WITH_MIN_ROAS"


class WorkflowStep(IntEnum):
    """Linear steps of the creation workflow."""
    SELECT_TYPE = 0
    CAMPAIGN = 1
    ADSET = 2
    CREATIVE = 3
    AD = 4
    COMPLETE = 5


@dataclass
class Credentials:
    """Ad account identifier and access token sent with every request."""
    ad_account_id: str
    access_token: str

    def is_complete(self) -> bool:
        return bool(self.ad_account_id and self.access_token)


@dataclass
class CustomLocation:
    """Radius targeting around a point."""
    latitude: float
    longitude: float
    radius_km: float = 5
    label: str = ""
    address: str = ""
    distance_unit: str = "kilometer"


@dataclass
class TargetingSpec:
    """Audience definition attached to an ad set."""
    age_min: int = 18
    age_max: int = 45
    genders: List[int] = field(default_factory=list)
    custom_locations: List[CustomLocation] = field(default_factory=list)
    countries: List[str] = field(default_factory=list)
    publisher_platforms: List[str] = field(default_factory=lambda: ["facebook", "instagram"])
    facebook_positions: List[str] = field(default_factory=list)
    instagram_positions: List[str] = field(default_factory=list)
    device_platforms: List[str] = field(default_factory=list)
    interests: List[str] = field(default_factory=list)
    work_positions: List[str] = field(default_factory=list)
    work_employers: List[str] = field(default_factory=list)


@dataclass
class BidConstraints:
    """Conditional values required by some bid strategies."""
    bid_amount: Optional[float] = None
    roas_average_floor: Optional[float] = None


@dataclass
class CampaignForm:
    """Values entered on the campaign step."""
    name: str = ""
    objective: Optional[Objective] = None


@dataclass
class AdSetForm:
    """Values entered on the ad set step."""
    name: str = ""
    daily_budget: Any = ""
    optimization_goal: Optional[OptimizationGoal] = None
    destination_type: Optional[DestinationType] = None
    billing_event: str = "IMPRESSIONS"
    bid_strategy: BidStrategy = BidStrategy.LOWEST_COST_NO_CAP
    bid_constraints: BidConstraints = field(default_factory=BidConstraints)
    page_id: str = ""
    pixel_id: str = ""
    custom_event_type: str = ""
    targeting: TargetingSpec = field(default_factory=TargetingSpec)


@dataclass
class CreativeForm:
    """Values entered on the creative step."""
    name: str = ""
    page_id: str = ""
    picture_url: str = ""
    business_page_url: str = ""
    link_url: str = ""
    phone_number: str = ""
    primary_text: str = ""
    headline: str = ""
    description: str = ""
    call_to_action: Optional[CTAType] = None


@dataclass
class AdForm:
    """Values entered on the ad step."""
    name: str = ""
    status: str = "PAUSED"


@dataclass
class LeadFormQuestion:
    """A single question of an instant lead form."""
    type: str
    label: str = ""
    field_type: str = ""
    options: List[str] = field(default_factory=list)


@dataclass
class LeadFormDefinition:
    """Instant form collected before a lead ad is created."""
    name: str
    page_id: str
    privacy_policy_url: str
    questions: List[LeadFormQuestion]
    follow_up_action_url: str = ""
    locale: str = "en_US"


@dataclass
class WorkflowState:
    """
    Single owner of a creation session.

    Identifiers are written once by their creation call and never changed
    afterwards; the state is discarded, not remotely deleted, on abandon.
    """
    step: WorkflowStep = WorkflowStep.SELECT_TYPE
    campaign_type: Optional[CampaignType] = None
    campaign_id: Optional[str] = None
    adset_id: Optional[str] = None
    creative_id: Optional[str] = None
    ad_id: Optional[str] = None
    leadgen_form_id: Optional[str] = None
    campaign_form: CampaignForm = field(default_factory=CampaignForm)
    adset_form: AdSetForm = field(default_factory=AdSetForm)
    creative_form: CreativeForm = field(default_factory=CreativeForm)
    ad_form: AdForm = field(default_factory=AdForm)

    def created_ids(self) -> Dict[str, str]:
        """Identifiers produced so far, keyed by resource name."""
        ids = {
            'campaign_id': self.campaign_id,
            'adset_id': self.adset_id,
            'creative_id': self.creative_id,
            'ad_id': self.ad_id,
        }
        return {key: value for key, value in ids.items() if value}


@dataclass
class AdSetSummary:
    """Row of the post-creation ad set listing."""
    adset_id: str
    name: str
    status: str
    daily_budget: Optional[float]
    optimization_goal: str
    billing_event: str
    insights: Optional[Dict[str, Any]] = None
