"""
Resolver for optimization goals, destinations and call-to-actions.

All objective/goal/destination/CTA rules are applied here and nowhere else;
callers re-run ``resolve`` whenever one of its inputs changes.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from models.data_models import Objective, OptimizationGoal, DestinationType, CTAType
from data import constraint_tables as tables

logger = logging.getLogger(__name__)


PHONE_CALL_CTAS = (CTAType.CALL_NOW, CTAType.WHATSAPP_MESSAGE, CTAType.LEARN_MORE)

_AUTO_SELECT_HINTS = {
    DestinationType.PHONE_CALL: "Call Now is required when people are sent to a phone call.",
    DestinationType.WHATSAPP: "Send WhatsApp Message was selected to match the WhatsApp destination.",
    DestinationType.WEBSITE: "Learn More was selected to match the website destination.",
}


@dataclass
class Resolution:
    """Outcome of one resolver run."""
    allowed_goals: Tuple[OptimizationGoal, ...]
    optimization_goal: Optional[OptimizationGoal]
    allowed_destinations: Tuple[DestinationType, ...]
    destination_type: Optional[DestinationType]
    allowed_ctas: Tuple[CTAType, ...]
    selected_cta: Optional[CTAType]
    auto_selected_cta: Optional[CTAType] = None
    is_auto_selected: bool = False
    hint: str = ""


def resolve_goal(objective: Optional[Objective],
                 goal: Optional[OptimizationGoal]) -> Tuple[Tuple[OptimizationGoal, ...], Optional[OptimizationGoal]]:
    """Allowed goals for the objective and the goal after reset."""
    allowed = tables.allowed_goals(objective)
    if goal not in allowed:
        goal = allowed[0] if allowed else None
    return allowed, goal


def resolve_destination(objective: Optional[Objective],
                        destination: Optional[DestinationType]) -> Tuple[Tuple[DestinationType, ...], Optional[DestinationType]]:
    """
    Apply the objective's destination rules.

    Leads forces the lead form, Awareness has no destination, Engagement
    narrows the choice; other objectives leave the destination free.
    """
    if objective == Objective.LEADS:
        return (DestinationType.LEAD_FORM,), DestinationType.LEAD_FORM

    if objective == Objective.AWARENESS:
        return (), None

    allowed = tables.OBJECTIVE_TO_DESTINATIONS.get(objective, tuple(DestinationType))
    if destination is not None and destination not in allowed:
        logger.info(f"Destination {destination.value} not allowed for {objective}; cleared")
        destination = None
    return allowed, destination


def resolve_ctas(goal: Optional[OptimizationGoal],
                 destination: Optional[DestinationType]) -> Tuple[Tuple[CTAType, ...], Optional[CTAType]]:
    """
    Allowed CTAs and the CTA to auto-select, if any.

    Destination rules take precedence over goal-based filtering.
    """
    if destination == DestinationType.PHONE_CALL:
        return PHONE_CALL_CTAS, CTAType.CALL_NOW

    if destination == DestinationType.WHATSAPP:
        return tuple(CTAType), CTAType.WHATSAPP_MESSAGE

    if destination == DestinationType.WEBSITE:
        return tuple(CTAType), CTAType.LEARN_MORE

    allowed = tables.allowed_ctas_for_goal(goal)
    if tables.has_destination_mapping(destination) and goal in tables.GOAL_TO_CTAS:
        destination_ctas = tables.allowed_ctas_for_destination(destination)
        narrowed = tuple(cta for cta in allowed if cta in destination_ctas)
        # An empty intersection would leave nothing selectable; keep the goal list.
        if narrowed:
            allowed = narrowed

    return allowed, None


def resolve(objective: Optional[Objective],
            optimization_goal: Optional[OptimizationGoal],
            destination_type: Optional[DestinationType],
            current_cta: Optional[CTAType] = None) -> Resolution:
    """
    Derive every dependent selection from objective, goal and destination.

    Args:
        objective: Campaign objective (None when not chosen yet)
        optimization_goal: Currently selected goal
        destination_type: Currently selected destination
        current_cta: Currently selected call-to-action

    Returns:
        Resolution with allowed sets and the resulting selections
    """
    allowed_goals, goal = resolve_goal(objective, optimization_goal)
    allowed_destinations, destination = resolve_destination(objective, destination_type)
    allowed_ctas, auto_cta = resolve_ctas(goal, destination)

    if auto_cta is not None:
        if destination == DestinationType.PHONE_CALL:
            # Always first and always selected for phone calls
            allowed_ctas = (auto_cta,) + tuple(c for c in allowed_ctas if c != auto_cta)
        return Resolution(
            allowed_goals=allowed_goals,
            optimization_goal=goal,
            allowed_destinations=allowed_destinations,
            destination_type=destination,
            allowed_ctas=allowed_ctas,
            selected_cta=auto_cta,
            auto_selected_cta=auto_cta,
            is_auto_selected=True,
            hint=_AUTO_SELECT_HINTS[destination]
        )

    selected = current_cta
    if selected not in allowed_ctas:
        selected = allowed_ctas[0] if allowed_ctas else None

    return Resolution(
        allowed_goals=allowed_goals,
        optimization_goal=goal,
        allowed_destinations=allowed_destinations,
        destination_type=destination,
        allowed_ctas=allowed_ctas,
        selected_cta=selected,
        auto_selected_cta=None,
        is_auto_selected=False
    )
