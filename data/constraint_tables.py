"""
Static constraint tables for objectives, optimization goals and call-to-actions.

Tables are ordered: the first entry of a row is the value a selection falls
back to when the current one becomes illegal. A key missing from a table means
"no restriction" and every enum value is allowed.
"""

from typing import Dict, Optional, Tuple

from models.data_models import Objective, OptimizationGoal, DestinationType, CTAType

G = OptimizationGoal
C = CTAType


OBJECTIVE_TO_GOALS: Dict[Objective, Tuple[OptimizationGoal, ...]] = {
    Objective.AWARENESS: (
        G.AD_RECALL_LIFT, G.REACH, G.IMPRESSIONS, G.THRUPLAY,
    ),
    Objective.TRAFFIC: (
        G.LINK_CLICKS, G.LANDING_PAGE_VIEWS, G.QUALITY_CALL, G.CONVERSATIONS,
        G.VISIT_INSTAGRAM_PROFILE, G.REACH, G.IMPRESSIONS,
    ),
    Objective.ENGAGEMENT: (
        G.CONVERSATIONS, G.POST_ENGAGEMENT, G.PAGE_LIKES, G.EVENT_RESPONSES,
        G.THRUPLAY, G.TWO_SECOND_CONTINUOUS_VIDEO_VIEWS, G.LINK_CLICKS,
        G.QUALITY_CALL, G.REMINDERS_SET, G.IMPRESSIONS, G.REACH,
    ),
    Objective.LEADS: (
        G.LEAD_GENERATION, G.QUALITY_LEAD, G.OFFSITE_CONVERSIONS, G.CONVERSATIONS,
        G.QUALITY_CALL, G.LINK_CLICKS, G.LANDING_PAGE_VIEWS,
    ),
    Objective.SALES: (
        G.OFFSITE_CONVERSIONS, G.VALUE, G.LINK_CLICKS, G.LANDING_PAGE_VIEWS,
        G.CONVERSATIONS, G.IMPRESSIONS, G.REACH,
    ),
    Objective.APP_PROMOTION: (
        G.APP_INSTALLS, G.APP_INSTALLS_AND_OFFSITE_CONVERSIONS,
        G.OFFSITE_CONVERSIONS, G.VALUE, G.LINK_CLICKS,
    ),
}


_WEB_CTAS = (
    C.LEARN_MORE, C.SHOP_NOW, C.SIGN_UP, C.SUBSCRIBE, C.CONTACT_US, C.APPLY_NOW,
    C.BOOK_NOW, C.GET_OFFER, C.GET_QUOTE, C.ORDER_NOW, C.DOWNLOAD,
)
_AWARENESS_CTAS = (C.LEARN_MORE, C.SHOP_NOW, C.WATCH_MORE, C.CONTACT_US, C.SIGN_UP)
_MESSAGING_CTAS = (C.SEND_MESSAGE, C.WHATSAPP_MESSAGE, C.LEARN_MORE, C.SHOP_NOW)
_LEAD_CTAS = (
    C.SIGN_UP, C.LEARN_MORE, C.APPLY_NOW, C.GET_QUOTE, C.SUBSCRIBE, C.BOOK_NOW,
    C.DOWNLOAD, C.GET_OFFER,
)
_APP_CTAS = (C.INSTALL_MOBILE_APP, C.USE_APP, C.DOWNLOAD, C.LEARN_MORE, C.SHOP_NOW)

GOAL_TO_CTAS: Dict[OptimizationGoal, Tuple[CTAType, ...]] = {
    G.AD_RECALL_LIFT: _AWARENESS_CTAS,
    G.REACH: _AWARENESS_CTAS,
    G.IMPRESSIONS: _AWARENESS_CTAS,
    G.THRUPLAY: (C.WATCH_MORE, C.LEARN_MORE, C.SHOP_NOW),
    G.TWO_SECOND_CONTINUOUS_VIDEO_VIEWS: (C.WATCH_MORE, C.LEARN_MORE),
    G.LINK_CLICKS: _WEB_CTAS,
    G.LANDING_PAGE_VIEWS: _WEB_CTAS,
    G.QUALITY_CALL: (C.CALL_NOW, C.CONTACT_US, C.LEARN_MORE),
    G.CONVERSATIONS: _MESSAGING_CTAS,
    G.VISIT_INSTAGRAM_PROFILE: (C.VISIT_PROFILE, C.LEARN_MORE),
    G.POST_ENGAGEMENT: (C.LEARN_MORE, C.LIKE_PAGE, C.SEND_MESSAGE, C.SHOP_NOW),
    G.PAGE_LIKES: (C.LIKE_PAGE,),
    G.EVENT_RESPONSES: (C.LEARN_MORE, C.BOOK_NOW, C.GET_DIRECTIONS),
    G.REMINDERS_SET: (C.LEARN_MORE, C.SIGN_UP),
    G.LEAD_GENERATION: _LEAD_CTAS,
    G.QUALITY_LEAD: _LEAD_CTAS,
    G.OFFSITE_CONVERSIONS: _WEB_CTAS,
    G.VALUE: (C.SHOP_NOW, C.ORDER_NOW, C.BOOK_NOW, C.GET_OFFER, C.LEARN_MORE),
    G.APP_INSTALLS: _APP_CTAS,
    G.APP_INSTALLS_AND_OFFSITE_CONVERSIONS: _APP_CTAS,
}


# PHONE_CALL, WHATSAPP and WEBSITE are handled by the resolver before this table.
DESTINATION_TO_CTAS: Dict[DestinationType, Tuple[CTAType, ...]] = {
    DestinationType.MESSAGING_APPS: (C.SEND_MESSAGE, C.WHATSAPP_MESSAGE, C.LEARN_MORE, C.SHOP_NOW),
    DestinationType.INSTAGRAM_PROFILE: (C.VISIT_PROFILE, C.LEARN_MORE),
    DestinationType.FACEBOOK_PAGE: (C.LIKE_PAGE, C.LEARN_MORE, C.SEND_MESSAGE),
    DestinationType.ON_AD: (C.LEARN_MORE, C.SIGN_UP, C.APPLY_NOW, C.GET_QUOTE),
    DestinationType.INSTANT_FORM: _LEAD_CTAS,
    DestinationType.LEAD_FORM: _LEAD_CTAS,
    DestinationType.CALLS: (C.CALL_NOW, C.CONTACT_US),
    DestinationType.APP_STORE: (C.INSTALL_MOBILE_APP, C.DOWNLOAD, C.USE_APP),
    DestinationType.APP_DEEP_LINK: (C.USE_APP, C.SHOP_NOW, C.LEARN_MORE),
    DestinationType.APP: _APP_CTAS,
}


# Destinations the user may pick for an objective; absent means all.
OBJECTIVE_TO_DESTINATIONS: Dict[Objective, Tuple[DestinationType, ...]] = {
    Objective.ENGAGEMENT: (DestinationType.WEBSITE, DestinationType.PHONE_CALL, DestinationType.WHATSAPP),
    Objective.LEADS: (DestinationType.LEAD_FORM,),
    Objective.AWARENESS: (),
}


# Bid strategy COST_CAP cannot be combined with these goals.
COST_CAP_INCOMPATIBLE_GOALS = frozenset({
    G.CONVERSATIONS, G.POST_ENGAGEMENT, G.PAGE_LIKES, G.EVENT_RESPONSES, G.THRUPLAY,
})


def allowed_goals(objective: Optional[Objective]) -> Tuple[OptimizationGoal, ...]:
    """Legal optimization goals for an objective."""
    if objective is None or objective not in OBJECTIVE_TO_GOALS:
        return tuple(OptimizationGoal)
    return OBJECTIVE_TO_GOALS[objective]


def allowed_ctas_for_goal(goal: Optional[OptimizationGoal]) -> Tuple[CTAType, ...]:
    """Legal call-to-actions for an optimization goal."""
    if goal is None or goal not in GOAL_TO_CTAS:
        return tuple(CTAType)
    return GOAL_TO_CTAS[goal]


def allowed_ctas_for_destination(destination: Optional[DestinationType]) -> Tuple[CTAType, ...]:
    """CTA restriction contributed by a destination type."""
    if destination is None or destination not in DESTINATION_TO_CTAS:
        return tuple(CTAType)
    return DESTINATION_TO_CTAS[destination]


def has_destination_mapping(destination: Optional[DestinationType]) -> bool:
    return destination is not None and destination in DESTINATION_TO_CTAS
