"""
Tests for the campaign-type strategies and their payloads.
"""

import pytest

from models.data_models import (
    CampaignType, Objective, OptimizationGoal, DestinationType, BidStrategy, BidConstraints,
    WorkflowState, WorkflowStep, CTAType, LeadFormDefinition, LeadFormQuestion,
)
from business_logic.campaign_strategies import (
    get_strategy, to_minor_units, WhatsAppStrategy, CallStrategy, LinkStrategy, LeadFormStrategy,
)


@pytest.fixture
def state():
    """Workflow state with campaign and ad set already created."""
    state = WorkflowState(step=WorkflowStep.ADSET, campaign_id="c1", adset_id="as1", creative_id="cr1")
    state.campaign_form.name = " Promo "
    state.adset_form.name = "Promo Set"
    state.adset_form.daily_budget = "300"
    state.creative_form.name = "Promo Creative"
    state.creative_form.page_id = "page1"
    state.creative_form.picture_url = "https://img.example.com/a.png"
    state.creative_form.business_page_url = "https://facebook.com/promo"
    state.creative_form.link_url = "https://example.com"
    state.creative_form.phone_number = "+919876543210"
    state.creative_form.primary_text = "Call us"
    state.creative_form.headline = "Open today"
    return state


TARGETING = {'geo_locations': {'custom_locations': []}, 'age_min': 18, 'age_max': 45}


class TestStrategyRegistry:

    @pytest.mark.parametrize("campaign_type, cls", [
        (CampaignType.WHATSAPP, WhatsAppStrategy),
        (CampaignType.CALL, CallStrategy),
        (CampaignType.LINK, LinkStrategy),
        (CampaignType.LEAD_FORM, LeadFormStrategy),
    ])
    def test_get_strategy(self, campaign_type, cls):
        assert isinstance(get_strategy(campaign_type), cls)

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            get_strategy("carousel")

    def test_fixed_values(self):
        whatsapp = get_strategy(CampaignType.WHATSAPP)
        assert whatsapp.fixed_objective == Objective.ENGAGEMENT
        assert whatsapp.fixed_destination_type == DestinationType.WHATSAPP
        assert whatsapp.fixed_optimization_goal == OptimizationGoal.CONVERSATIONS

        call = get_strategy(CampaignType.CALL)
        assert call.fixed_objective == Objective.TRAFFIC
        assert call.fixed_optimization_goal == OptimizationGoal.QUALITY_CALL
        assert call.has_dedicated_creative_stage

        lead = get_strategy(CampaignType.LEAD_FORM)
        assert lead.fixed_destination_type == DestinationType.LEAD_FORM
        assert lead.fixed_optimization_goal is None

    def test_endpoints(self):
        call = get_strategy(CampaignType.CALL)
        assert call.campaign_endpoint == "click-to-call/campaigns"
        assert call.adset_endpoint == "click-to-call/adsets"
        assert call.creative_endpoint == "click-to-call/adcreatives"
        assert call.ad_endpoint == "click-to-call/ads"
        assert get_strategy(CampaignType.LEAD_FORM).lead_form_endpoint == "click-to-lead-form/leadforms"
        assert get_strategy(CampaignType.LINK).endpoint_for(WorkflowStep.AD) == "click-to-link/ads"

    def test_prerequisite_ids(self):
        assert get_strategy(CampaignType.CALL).prerequisite_ids(WorkflowStep.AD) == (
            "campaign_id", "adset_id", "creative_id"
        )
        assert "leadgen_form_id" in get_strategy(CampaignType.LEAD_FORM).prerequisite_ids(WorkflowStep.AD)
        assert get_strategy(CampaignType.LINK).prerequisite_ids(WorkflowStep.CAMPAIGN) == ()


class TestPayloads:

    def test_minor_units(self):
        assert to_minor_units("300") == "30000"
        assert to_minor_units(225.5) == "22550"

    def test_campaign_payload_is_paused(self, state):
        payload = get_strategy(CampaignType.LINK).build_campaign_payload(state)
        assert payload == {
            'name': "Promo",
            'objective': "OUTCOME_TRAFFIC",
            'special_ad_categories': ["NONE"],
            'status': "PAUSED",
        }

    def test_whatsapp_adset_payload(self, state):
        payload = get_strategy(CampaignType.WHATSAPP).build_adset_payload(state, TARGETING)
        assert payload['optimization_goal'] == "CONVERSATIONS"
        assert payload['destination_type'] == "WHATSAPP"
        assert payload['campaign_id'] == "c1"
        assert payload['daily_budget'] == "30000"
        assert payload['billing_event'] == "IMPRESSIONS"
        assert payload['targeting'] is TARGETING
        assert payload['status'] == "PAUSED"

    def test_call_creative_payload(self, state):
        payload = get_strategy(CampaignType.CALL).build_creative_payload(state)
        assert payload['phone_number'] == "+919876543210"
        assert payload['business_page_url'] == "https://facebook.com/promo"
        assert payload['headline'] == "Open today"
        assert payload['description'] == ""

    def test_link_creative_uses_link_url(self, state):
        state.creative_form.call_to_action = CTAType.LEARN_MORE
        payload = get_strategy(CampaignType.LINK).build_creative_payload(state)
        assert payload['link_url'] == "https://example.com"
        assert 'business_page_url' not in payload
        assert payload['call_to_action_type'] == "LEARN_MORE"

    def test_ad_payload(self, state):
        payload = get_strategy(CampaignType.WHATSAPP).build_ad_payload(state)
        assert payload == {'adset_id': "as1", 'creative_id': "cr1", 'status': "PAUSED"}

    def test_lead_form_adset_payload(self, state):
        state.adset_form.optimization_goal = OptimizationGoal.LEAD_GENERATION
        state.adset_form.bid_strategy = BidStrategy.COST_CAP
        state.adset_form.bid_constraints = BidConstraints(bid_amount=50)
        state.adset_form.page_id = "page1"

        payload = get_strategy(CampaignType.LEAD_FORM).build_adset_payload(state, TARGETING)

        assert payload['destination_type'] == "LEAD_FORM"
        assert payload['optimization_goal'] == "LEAD_GENERATION"
        assert payload['bid_strategy'] == "COST_CAP"
        assert payload['bid_amount'] == "5000"
        assert payload['promoted_object'] == {'page_id': "page1"}

    def test_lead_form_min_roas(self, state):
        state.adset_form.optimization_goal = OptimizationGoal.OFFSITE_CONVERSIONS
        state.adset_form.bid_strategy = BidStrategy.LOWEST_COST_MIN_ROAS
        state.adset_form.bid_constraints = BidConstraints(roas_average_floor=1.5)
        state.adset_form.pixel_id = "px1"

        payload = get_strategy(CampaignType.LEAD_FORM).build_adset_payload(state, TARGETING)

        assert payload['bid_constraints'] == {'roas_average_floor': 15000}
        assert payload['promoted_object'] == {'pixel_id': "px1", 'custom_event_type': "LEAD"}

    def test_lead_ad_payload_carries_form_id(self, state):
        state.leadgen_form_id = "lf1"
        state.ad_form.name = "Lead Ad"
        payload = get_strategy(CampaignType.LEAD_FORM).build_ad_payload(state)
        assert payload['leadgen_form_id'] == "lf1"
        assert payload['name'] == "Lead Ad"

    def test_lead_form_payload(self):
        definition = LeadFormDefinition(
            name="Signup", page_id="page1", privacy_policy_url="https://example.com/privacy",
            questions=[
                LeadFormQuestion(type="FULL_NAME"),
                LeadFormQuestion(type="CUSTOM", label="Budget?", field_type="MULTIPLE_CHOICE",
                                 options=["Low", " ", "High"]),
            ]
        )
        payload = get_strategy(CampaignType.LEAD_FORM).build_lead_form_payload(definition)
        assert payload['questions'][0] == {'type': "FULL_NAME"}
        assert payload['questions'][1]['options'] == ["Low", "High"]
        assert payload['locale'] == "en_US"

    def test_build_payload_rejects_complete_step(self, state):
        with pytest.raises(ValueError):
            get_strategy(CampaignType.CALL).build_payload(WorkflowStep.COMPLETE, state)
