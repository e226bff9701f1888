"""
Tests for the goal/destination/CTA resolver.
"""

import pytest

from models.data_models import Objective, OptimizationGoal, DestinationType, CTAType
from business_logic.cta_resolver import (
    resolve, resolve_goal, resolve_destination, resolve_ctas, PHONE_CALL_CTAS,
)
from data import constraint_tables as tables


class TestResolveGoal:
    """Test cases for optimization goal reset."""

    def test_keeps_allowed_goal(self):
        allowed, goal = resolve_goal(Objective.TRAFFIC, OptimizationGoal.LANDING_PAGE_VIEWS)
        assert goal == OptimizationGoal.LANDING_PAGE_VIEWS
        assert allowed == tables.OBJECTIVE_TO_GOALS[Objective.TRAFFIC]

    def test_resets_disallowed_goal_to_first(self):
        _, goal = resolve_goal(Objective.AWARENESS, OptimizationGoal.LEAD_GENERATION)
        assert goal == tables.OBJECTIVE_TO_GOALS[Objective.AWARENESS][0]

    def test_missing_goal_selects_first(self):
        _, goal = resolve_goal(Objective.LEADS, None)
        assert goal == OptimizationGoal.LEAD_GENERATION


class TestResolveDestination:
    """Test cases for objective destination rules."""

    def test_leads_forces_lead_form(self):
        allowed, destination = resolve_destination(Objective.LEADS, DestinationType.WEBSITE)
        assert allowed == (DestinationType.LEAD_FORM,)
        assert destination == DestinationType.LEAD_FORM

    def test_awareness_has_no_destination(self):
        allowed, destination = resolve_destination(Objective.AWARENESS, DestinationType.WEBSITE)
        assert allowed == ()
        assert destination is None

    def test_engagement_narrows_destinations(self):
        allowed, destination = resolve_destination(Objective.ENGAGEMENT, DestinationType.APP_STORE)
        assert DestinationType.WHATSAPP in allowed
        assert destination is None

    def test_other_objectives_keep_destination(self):
        _, destination = resolve_destination(Objective.SALES, DestinationType.APP_STORE)
        assert destination == DestinationType.APP_STORE


class TestResolveCtas:
    """Test cases for CTA filtering."""

    @pytest.mark.parametrize("goal", list(OptimizationGoal) + [None])
    def test_phone_call_always_selects_call_now(self, goal):
        resolution = resolve(Objective.TRAFFIC, goal, DestinationType.PHONE_CALL)
        assert resolution.auto_selected_cta == CTAType.CALL_NOW
        assert resolution.selected_cta == CTAType.CALL_NOW
        assert resolution.allowed_ctas[0] == CTAType.CALL_NOW
        assert resolution.is_auto_selected

    def test_phone_call_ctas(self):
        allowed, auto = resolve_ctas(OptimizationGoal.LINK_CLICKS, DestinationType.PHONE_CALL)
        assert allowed == PHONE_CALL_CTAS
        assert auto == CTAType.CALL_NOW

    def test_whatsapp_auto_selects_message(self):
        resolution = resolve(Objective.ENGAGEMENT, OptimizationGoal.CONVERSATIONS, DestinationType.WHATSAPP)
        assert resolution.selected_cta == CTAType.WHATSAPP_MESSAGE
        assert resolution.hint

    def test_website_auto_selects_learn_more(self):
        resolution = resolve(Objective.TRAFFIC, OptimizationGoal.LINK_CLICKS, DestinationType.WEBSITE,
                             current_cta=CTAType.SHOP_NOW)
        assert resolution.selected_cta == CTAType.LEARN_MORE

    def test_goal_filtering_without_destination(self):
        allowed, auto = resolve_ctas(OptimizationGoal.PAGE_LIKES, None)
        assert allowed == (CTAType.LIKE_PAGE,)
        assert auto is None

    def test_destination_intersection_keeps_goal_order(self):
        allowed, _ = resolve_ctas(OptimizationGoal.LEAD_GENERATION, DestinationType.LEAD_FORM)
        goal_ctas = tables.GOAL_TO_CTAS[OptimizationGoal.LEAD_GENERATION]
        destination_ctas = tables.DESTINATION_TO_CTAS[DestinationType.LEAD_FORM]
        assert allowed == tuple(c for c in goal_ctas if c in destination_ctas)

    def test_empty_intersection_falls_back_to_goal_list(self):
        allowed, _ = resolve_ctas(OptimizationGoal.PAGE_LIKES, DestinationType.APP_STORE)
        assert allowed == tables.GOAL_TO_CTAS[OptimizationGoal.PAGE_LIKES]


class TestResolve:
    """Test cases for the combined resolution."""

    def test_current_cta_kept_when_allowed(self):
        resolution = resolve(Objective.LEADS, OptimizationGoal.LEAD_GENERATION, None,
                             current_cta=CTAType.SIGN_UP)
        assert resolution.selected_cta == CTAType.SIGN_UP
        assert not resolution.is_auto_selected
        assert resolution.auto_selected_cta is None

    def test_disallowed_cta_replaced_by_first(self):
        resolution = resolve(Objective.ENGAGEMENT, OptimizationGoal.PAGE_LIKES, None,
                             current_cta=CTAType.CALL_NOW)
        assert resolution.selected_cta == CTAType.LIKE_PAGE

    def test_objective_change_resets_goal_and_ctas(self):
        resolution = resolve(Objective.AWARENESS, OptimizationGoal.QUALITY_CALL, DestinationType.PHONE_CALL)
        assert resolution.optimization_goal == OptimizationGoal.AD_RECALL_LIFT
        assert resolution.destination_type is None
        assert resolution.selected_cta in tables.GOAL_TO_CTAS[OptimizationGoal.AD_RECALL_LIFT]
