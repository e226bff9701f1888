"""
Step validation for the campaign creation workflow.

This module checks the form of the active step before any request is sent:
required fields per campaign type, budget floor, bid strategy rules,
promoted object requirements and the identifiers of earlier steps.
"""

import logging
import math
import re
from typing import List, Optional, Any
from dataclasses import dataclass
from enum import Enum

from models.data_models import (
    WorkflowState, WorkflowStep, BidStrategy, BidConstraints, OptimizationGoal,
)
from data import constraint_tables as tables
from .campaign_strategies import (
    CampaignStrategy, CallStrategy, PAGE_PROMOTED_GOALS, PIXEL_PROMOTED_GOALS,
)
from .targeting_builder import TargetingBuilder
from .error_handler import ValidationError

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9 \-]{6,18}$")
URL_FIELDS = ("picture_url", "business_page_url", "link_url")

_ID_LABELS = {
    'campaign_id': "campaign",
    'adset_id': "ad set",
    'creative_id': "ad creative",
    'leadgen_form_id': "lead form",
}


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationIssue:
    """Represents a validation issue found on a step form."""
    severity: ValidationSeverity
    message: str
    field: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of validating one workflow step."""
    is_valid: bool
    issues: List[ValidationIssue]
    total_errors: int
    total_warnings: int

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == ValidationSeverity.ERROR]

    def raise_if_invalid(self):
        """Raise ValidationError carrying every error message."""
        if self.is_valid:
            return
        messages = [issue.message for issue in self.errors]
        raise ValidationError(messages[0], issues=messages, field=self.errors[0].field)


class StepValidator:
    """
    Validates workflow step forms against campaign-type rules.

    Every check is local; nothing here talks to the backend.
    """

    def __init__(self, min_daily_budget: int = 225):
        """
        Initialize the step validator.

        Args:
            min_daily_budget: Lowest daily budget accepted, in currency units
        """
        self.min_daily_budget = min_daily_budget
        self.headline_max_length = CallStrategy.HEADLINE_MAX_LENGTH

    def validate_step(self, step: WorkflowStep, strategy: CampaignStrategy,
                      state: WorkflowState) -> ValidationResult:
        """
        Validate the form of ``step``.

        Args:
            step: Step about to be submitted
            strategy: Strategy of the session's campaign type
            state: Current workflow state

        Returns:
            ValidationResult listing every issue found
        """
        issues = self.validate_prerequisites(step, strategy, state)
        issues.extend(self._validate_required_fields(step, strategy, state))

        if step == WorkflowStep.ADSET:
            issues.extend(self._validate_adset(strategy, state))
        elif step == WorkflowStep.CREATIVE:
            issues.extend(self._validate_creative(strategy, state))

        result = self._create_validation_result(issues)
        if not result.is_valid:
            logger.info(f"{step.name} validation failed with {result.total_errors} error(s)")
        return result

    def validate_prerequisites(self, step: WorkflowStep, strategy: CampaignStrategy,
                               state: WorkflowState) -> List[ValidationIssue]:
        """Every identifier from earlier steps must be present."""
        issues = []
        for id_field in strategy.prerequisite_ids(step):
            if not getattr(state, id_field):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    message=f"Please create the {_ID_LABELS[id_field]} first",
                    field=id_field
                ))
        return issues

    def _validate_required_fields(self, step: WorkflowStep, strategy: CampaignStrategy,
                                  state: WorkflowState) -> List[ValidationIssue]:
        form = self._form_for(step, state)
        if form is None:
            return []

        issues = []
        for field_name, label in strategy.required_fields_for(step):
            if self._is_blank(getattr(form, field_name, None)):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    message=f"Please enter the {label}",
                    field=field_name
                ))
        return issues

    def _validate_adset(self, strategy: CampaignStrategy, state: WorkflowState) -> List[ValidationIssue]:
        form = state.adset_form
        issues = []

        issues.extend(self.validate_budget(form.daily_budget))

        goal = strategy.effective_goal(state)
        allowed = tables.allowed_goals(strategy.fixed_objective)
        if goal is not None and goal not in allowed:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message=f"Optimization goal {goal.value} is not available for the "
                        f"{strategy.fixed_objective.value} objective",
                field="optimization_goal"
            ))

        issues.extend(self.validate_bid_strategy(form.bid_strategy, goal, form.bid_constraints))

        if goal in PAGE_PROMOTED_GOALS and self._is_blank(form.page_id):
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message="A Facebook Page is required for lead generation goals",
                field="page_id"
            ))
        if goal in PIXEL_PROMOTED_GOALS and self._is_blank(form.pixel_id):
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message="A pixel is required for conversion and value goals",
                field="pixel_id"
            ))

        for message in TargetingBuilder(form.targeting).validate():
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message=message,
                field="targeting"
            ))

        return issues

    def validate_budget(self, daily_budget: Any) -> List[ValidationIssue]:
        """Daily budget must be numeric and at least the configured floor."""
        if self._is_blank(daily_budget):
            return []  # reported by the required-field check

        try:
            amount = float(daily_budget)
        except (TypeError, ValueError):
            amount = None

        if amount is None or not math.isfinite(amount):
            return [ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message="Daily budget must be a number",
                field="daily_budget"
            )]

        if amount < self.min_daily_budget:
            return [ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message=f"Daily budget must be at least {self.min_daily_budget}",
                field="daily_budget"
            )]
        return []

    def validate_bid_strategy(self, bid_strategy: BidStrategy,
                              goal: Optional[OptimizationGoal],
                              constraints: Optional[BidConstraints] = None) -> List[ValidationIssue]:
        """
        Check a bid strategy against the goal and its conditional values.

        Bid cap and cost cap need a positive bid amount; minimum ROAS needs a
        positive ROAS floor. Cost cap is refused for some goals.
        """
        constraints = constraints or BidConstraints()
        issues = []

        if bid_strategy == BidStrategy.COST_CAP and goal in tables.COST_CAP_INCOMPATIBLE_GOALS:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message=f"Cost cap bid strategy is not available for the {goal.value} optimization goal",
                field="bid_strategy"
            ))

        if bid_strategy in (BidStrategy.LOWEST_COST_WITH_CAP, BidStrategy.COST_CAP):
            if not self._is_positive(constraints.bid_amount):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    message="Please enter a bid amount greater than 0",
                    field="bid_amount"
                ))
        elif bid_strategy == BidStrategy.LOWEST_COST_MIN_ROAS:
            if not self._is_positive(constraints.roas_average_floor):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    message="Please enter a minimum ROAS greater than 0",
                    field="roas_average_floor"
                ))

        return issues

    def _validate_creative(self, strategy: CampaignStrategy, state: WorkflowState) -> List[ValidationIssue]:
        form = state.creative_form
        issues = []

        required = {name for name, _ in strategy.required_creative_fields}
        for field_name in URL_FIELDS:
            value = getattr(form, field_name)
            if field_name in required and not self._is_blank(value):
                if not value.strip().startswith(("http://", "https://")):
                    issues.append(ValidationIssue(
                        severity=ValidationSeverity.ERROR,
                        message=f"{field_name.replace('_', ' ').capitalize()} must start with http:// or https://",
                        field=field_name
                    ))

        if strategy.has_dedicated_creative_stage:
            if len(form.headline) > self.headline_max_length:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    message=f"Headline must be at most {self.headline_max_length} characters",
                    field="headline"
                ))
            if not self._is_blank(form.phone_number) and not PHONE_PATTERN.match(form.phone_number.strip()):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    message="Please enter a valid phone number, e.g. +919876543210",
                    field="phone_number"
                ))
            if self._is_blank(form.description):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    message="A short description usually improves call ads",
                    field="description"
                ))

        return issues

    @staticmethod
    def _form_for(step: WorkflowStep, state: WorkflowState):
        return {
            WorkflowStep.CAMPAIGN: state.campaign_form,
            WorkflowStep.ADSET: state.adset_form,
            WorkflowStep.CREATIVE: state.creative_form,
            WorkflowStep.AD: state.ad_form,
        }.get(step)

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        return False

    @staticmethod
    def _is_positive(value: Any) -> bool:
        try:
            if value is None:
                return False
            amount = float(value)
            return math.isfinite(amount) and amount > 0
        except (TypeError, ValueError):
            return False

    def _create_validation_result(self, issues: List[ValidationIssue]) -> ValidationResult:
        total_errors = sum(1 for issue in issues if issue.severity == ValidationSeverity.ERROR)
        total_warnings = sum(1 for issue in issues if issue.severity == ValidationSeverity.WARNING)
        return ValidationResult(
            is_valid=total_errors == 0,
            issues=issues,
            total_errors=total_errors,
            total_warnings=total_warnings
        )
