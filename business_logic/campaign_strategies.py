"""
Campaign-type strategies.

Each campaign kind fixes its objective, destination and (usually) its
optimization goal, names its backend endpoints and shapes the payload of
every creation step.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from models.data_models import (
    CampaignType, Objective, OptimizationGoal, DestinationType, BidStrategy,
    WorkflowState, WorkflowStep, LeadFormDefinition,
)

logger = logging.getLogger(__name__)


STATUS_PAUSED = "PAUSED"

# Goals that need the promoted page / pixel in the ad set's promoted_object
PAGE_PROMOTED_GOALS = frozenset({OptimizationGoal.LEAD_GENERATION, OptimizationGoal.QUALITY_LEAD})
PIXEL_PROMOTED_GOALS = frozenset({OptimizationGoal.OFFSITE_CONVERSIONS, OptimizationGoal.VALUE})


def to_minor_units(amount: Any, factor: int = 100) -> str:
    """Convert a major-unit amount (e.g. rupees) to the minor-unit string the backend expects."""
    return str(int(round(float(amount) * factor)))


class CampaignStrategy:
    """
    Base strategy shared by all campaign kinds.

    Subclasses override the class attributes; payload builders only read the
    workflow state and never mutate it.
    """

    campaign_type: CampaignType = None
    endpoint_prefix: str = ""
    fixed_objective: Objective = None
    fixed_destination_type: Optional[DestinationType] = None
    fixed_optimization_goal: Optional[OptimizationGoal] = None
    has_dedicated_creative_stage: bool = False
    requires_lead_form: bool = False

    required_campaign_fields: Tuple[Tuple[str, str], ...] = (("name", "campaign name"),)
    required_adset_fields: Tuple[Tuple[str, str], ...] = (
        ("name", "ad set name"),
        ("daily_budget", "daily budget"),
    )
    required_creative_fields: Tuple[Tuple[str, str], ...] = (
        ("name", "ad creative name"),
        ("page_id", "Page ID"),
        ("picture_url", "Picture URL"),
        ("business_page_url", "Business Page URL"),
    )
    required_ad_fields: Tuple[Tuple[str, str], ...] = ()

    # Endpoints

    @property
    def campaign_endpoint(self) -> str:
        return f"{self.endpoint_prefix}/campaigns"

    @property
    def adset_endpoint(self) -> str:
        return f"{self.endpoint_prefix}/adsets"

    @property
    def creative_endpoint(self) -> str:
        return f"{self.endpoint_prefix}/adcreatives"

    @property
    def ad_endpoint(self) -> str:
        return f"{self.endpoint_prefix}/ads"

    def endpoint_for(self, step: WorkflowStep) -> str:
        endpoints = {
            WorkflowStep.CAMPAIGN: self.campaign_endpoint,
            WorkflowStep.ADSET: self.adset_endpoint,
            WorkflowStep.CREATIVE: self.creative_endpoint,
            WorkflowStep.AD: self.ad_endpoint,
        }
        if step not in endpoints:
            raise ValueError(f"Step {step.name} has no creation endpoint")
        return endpoints[step]

    # Rules

    def required_fields_for(self, step: WorkflowStep) -> Tuple[Tuple[str, str], ...]:
        return {
            WorkflowStep.CAMPAIGN: self.required_campaign_fields,
            WorkflowStep.ADSET: self.required_adset_fields,
            WorkflowStep.CREATIVE: self.required_creative_fields,
            WorkflowStep.AD: self.required_ad_fields,
        }.get(step, ())

    def prerequisite_ids(self, step: WorkflowStep) -> Tuple[str, ...]:
        """Identifiers that must already exist before ``step`` may run."""
        chain = ("campaign_id", "adset_id", "creative_id")
        needed = {
            WorkflowStep.CAMPAIGN: (),
            WorkflowStep.ADSET: chain[:1],
            WorkflowStep.CREATIVE: chain[:2],
            WorkflowStep.AD: chain,
        }.get(step, ())
        if step == WorkflowStep.AD and self.requires_lead_form:
            needed = needed + ("leadgen_form_id",)
        return needed

    def effective_goal(self, state: WorkflowState) -> Optional[OptimizationGoal]:
        return self.fixed_optimization_goal or state.adset_form.optimization_goal

    def effective_destination(self, state: WorkflowState) -> Optional[DestinationType]:
        return self.fixed_destination_type or state.adset_form.destination_type

    # Payloads

    def build_campaign_payload(self, state: WorkflowState) -> Dict[str, Any]:
        return {
            'name': state.campaign_form.name.strip(),
            'objective': self.fixed_objective.value,
            'special_ad_categories': ["NONE"],
            'status': STATUS_PAUSED,
        }

    def build_adset_payload(self, state: WorkflowState, targeting: Dict[str, Any],
                            budget_factor: int = 100) -> Dict[str, Any]:
        """
        Ad set payload embedding an already-validated targeting dict.

        Ad sets are always created paused; activation happens later, outside
        the creation workflow.
        """
        form = state.adset_form
        goal = self.effective_goal(state)
        destination = self.effective_destination(state)

        payload = {
            'name': form.name.strip(),
            'campaign_id': state.campaign_id,
            'daily_budget': to_minor_units(form.daily_budget, budget_factor),
            'destination_type': destination.value if destination else None,
            'optimization_goal': goal.value if goal else None,
            'billing_event': form.billing_event,
            'targeting': targeting,
            'status': STATUS_PAUSED,
        }
        if form.page_id.strip():
            payload['page_id'] = form.page_id.strip()
        return payload

    def build_creative_payload(self, state: WorkflowState) -> Dict[str, Any]:
        form = state.creative_form
        payload = {
            'name': form.name.strip(),
            'page_id': form.page_id.strip(),
            'picture_url': form.picture_url.strip(),
            'business_page_url': form.business_page_url.strip(),
            'message': form.primary_text,
            'headline': form.headline,
            'description': form.description,
        }
        if form.call_to_action is not None:
            payload['call_to_action_type'] = form.call_to_action.value
        return payload

    def build_ad_payload(self, state: WorkflowState) -> Dict[str, Any]:
        payload = {
            'adset_id': state.adset_id,
            'creative_id': state.creative_id,
            'status': state.ad_form.status or STATUS_PAUSED,
        }
        if state.ad_form.name.strip():
            payload['name'] = state.ad_form.name.strip()
        return payload

    def build_payload(self, step: WorkflowStep, state: WorkflowState,
                      targeting: Optional[Dict[str, Any]] = None,
                      budget_factor: int = 100) -> Dict[str, Any]:
        if step == WorkflowStep.CAMPAIGN:
            return self.build_campaign_payload(state)
        if step == WorkflowStep.ADSET:
            return self.build_adset_payload(state, targeting, budget_factor)
        if step == WorkflowStep.CREATIVE:
            return self.build_creative_payload(state)
        if step == WorkflowStep.AD:
            return self.build_ad_payload(state)
        raise ValueError(f"Step {step.name} has no payload")


class WhatsAppStrategy(CampaignStrategy):
    """Click-to-WhatsApp: conversations started from the ad."""

    campaign_type = CampaignType.WHATSAPP
    endpoint_prefix = "click-to-whatsapp"
    fixed_objective = Objective.ENGAGEMENT
    fixed_destination_type = DestinationType.WHATSAPP
    fixed_optimization_goal = OptimizationGoal.CONVERSATIONS


class CallStrategy(CampaignStrategy):
    """Click-to-call with its own creative stage carrying the phone number."""

    campaign_type = CampaignType.CALL
    endpoint_prefix = "click-to-call"
    fixed_objective = Objective.TRAFFIC
    fixed_destination_type = DestinationType.PHONE_CALL
    fixed_optimization_goal = OptimizationGoal.QUALITY_CALL
    has_dedicated_creative_stage = True

    HEADLINE_MAX_LENGTH = 27

    required_creative_fields = (
        ("name", "ad creative name"),
        ("page_id", "Page ID"),
        ("picture_url", "Picture URL"),
        ("business_page_url", "Business Page URL"),
        ("phone_number", "Phone Number"),
        ("primary_text", "Primary Text"),
        ("headline", "Headline"),
    )

    def build_creative_payload(self, state: WorkflowState) -> Dict[str, Any]:
        form = state.creative_form
        return {
            'name': form.name.strip(),
            'page_id': form.page_id.strip(),
            'picture_url': form.picture_url.strip(),
            'business_page_url': form.business_page_url.strip(),
            'phone_number': form.phone_number.strip(),
            'primary_text': form.primary_text,
            'headline': form.headline,
            'description': form.description or "",
        }


class LinkStrategy(CampaignStrategy):
    """Click-to-website traffic campaign."""

    campaign_type = CampaignType.LINK
    endpoint_prefix = "click-to-link"
    fixed_objective = Objective.TRAFFIC
    fixed_destination_type = DestinationType.WEBSITE
    fixed_optimization_goal = OptimizationGoal.LINK_CLICKS

    required_creative_fields = (
        ("name", "ad creative name"),
        ("page_id", "Page ID"),
        ("picture_url", "Picture URL"),
        ("link_url", "Link URL"),
    )

    def build_creative_payload(self, state: WorkflowState) -> Dict[str, Any]:
        payload = super().build_creative_payload(state)
        payload.pop('business_page_url')
        payload['link_url'] = state.creative_form.link_url.strip()
        return payload


class LeadFormStrategy(CampaignStrategy):
    """
    Lead generation through an instant form.

    The ad set form is the full generic one: the goal is chosen from the
    Leads set and a bid strategy may be set. The lead form itself is created
    before the ad and its id travels in the ad payload.
    """

    campaign_type = CampaignType.LEAD_FORM
    endpoint_prefix = "click-to-lead-form"
    fixed_objective = Objective.LEADS
    fixed_destination_type = DestinationType.LEAD_FORM
    fixed_optimization_goal = None
    requires_lead_form = True

    required_adset_fields = (
        ("name", "ad set name"),
        ("daily_budget", "daily budget"),
        ("optimization_goal", "optimization goal"),
    )
    required_ad_fields = (("name", "ad name"),)

    @property
    def lead_form_endpoint(self) -> str:
        return f"{self.endpoint_prefix}/leadforms"

    def build_adset_payload(self, state: WorkflowState, targeting: Dict[str, Any],
                            budget_factor: int = 100) -> Dict[str, Any]:
        payload = super().build_adset_payload(state, targeting, budget_factor)
        form = state.adset_form
        goal = self.effective_goal(state)

        payload['bid_strategy'] = form.bid_strategy.value
        constraints = form.bid_constraints
        if form.bid_strategy in (BidStrategy.LOWEST_COST_WITH_CAP, BidStrategy.COST_CAP):
            payload['bid_amount'] = to_minor_units(constraints.bid_amount, budget_factor)
        elif form.bid_strategy == BidStrategy.LOWEST_COST_MIN_ROAS:
            # Platform expects the ROAS floor scaled by 10000
            payload['bid_constraints'] = {
                'roas_average_floor': int(round(float(constraints.roas_average_floor) * 10000))
            }

        promoted_object = {}
        if goal in PAGE_PROMOTED_GOALS:
            promoted_object['page_id'] = form.page_id.strip()
        if goal in PIXEL_PROMOTED_GOALS:
            promoted_object['pixel_id'] = form.pixel_id.strip()
            promoted_object['custom_event_type'] = form.custom_event_type.strip() or "LEAD"
        if promoted_object:
            payload['promoted_object'] = promoted_object

        return payload

    def build_ad_payload(self, state: WorkflowState) -> Dict[str, Any]:
        payload = super().build_ad_payload(state)
        payload['leadgen_form_id'] = state.leadgen_form_id
        return payload

    def build_lead_form_payload(self, definition: LeadFormDefinition) -> Dict[str, Any]:
        questions = []
        for question in definition.questions:
            entry = {'type': question.type}
            if question.type == "CUSTOM":
                if question.label:
                    entry['label'] = question.label
                if question.field_type:
                    entry['field_type'] = question.field_type
                options = [opt for opt in question.options if opt and opt.strip()]
                if question.field_type == "MULTIPLE_CHOICE" and options:
                    entry['options'] = options
            questions.append(entry)

        return {
            'page_id': definition.page_id,
            'name': definition.name,
            'privacy_policy_url': definition.privacy_policy_url,
            'follow_up_action_url': definition.follow_up_action_url or "",
            'locale': definition.locale,
            'questions': questions,
        }


_STRATEGIES = {
    CampaignType.WHATSAPP: WhatsAppStrategy(),
    CampaignType.CALL: CallStrategy(),
    CampaignType.LINK: LinkStrategy(),
    CampaignType.LEAD_FORM: LeadFormStrategy(),
}


def get_strategy(campaign_type: CampaignType) -> CampaignStrategy:
    """Return the strategy for a campaign type."""
    try:
        return _STRATEGIES[campaign_type]
    except KeyError:
        raise ValueError(f"Unsupported campaign type: {campaign_type}")
