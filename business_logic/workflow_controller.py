"""
Campaign Workflow Controller - Orchestrates the campaign creation workflow.

This module owns the WorkflowState of one session and moves it through
campaign, ad set, creative and ad creation, one blocking request per step.
"""

import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field

from models.data_models import (
    CampaignType, WorkflowState, WorkflowStep, LeadFormDefinition,
)
from config.settings import AppConfig, CredentialStore
from data.ads_client import AdsClient
from .campaign_strategies import CampaignStrategy, LeadFormStrategy, get_strategy
from .cta_resolver import Resolution, resolve
from .step_validator import StepValidator
from .targeting_builder import TargetingBuilder
from .error_handler import (
    error_handler, CampaignBuilderError, SessionExpired, ValidationError,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


CREATION_STEPS = (WorkflowStep.CAMPAIGN, WorkflowStep.ADSET, WorkflowStep.CREATIVE, WorkflowStep.AD)

STEP_ID_FIELDS = {
    WorkflowStep.CAMPAIGN: 'campaign_id',
    WorkflowStep.ADSET: 'adset_id',
    WorkflowStep.CREATIVE: 'creative_id',
    WorkflowStep.AD: 'ad_id',
}

STEP_LABELS = {
    WorkflowStep.CAMPAIGN: "Campaign",
    WorkflowStep.ADSET: "Ad set",
    WorkflowStep.CREATIVE: "Ad creative",
    WorkflowStep.AD: "Ad",
}


@dataclass
class StepOutcome:
    """Result of a workflow transition, ready for the UI."""
    success: bool
    step: WorkflowStep
    message: str
    resource_id: Optional[str] = None
    notification: Optional[Dict[str, Any]] = None
    aborted: bool = False
    orphaned_ids: Dict[str, str] = field(default_factory=dict)


class CampaignWorkflowController:
    """
    Main controller for the campaign creation workflow.

    The state is mutated only through the named transitions below; a failed
    step leaves the step index and every identifier unchanged.
    """

    def __init__(self, client: AdsClient, credential_store: CredentialStore,
                 config: Optional[AppConfig] = None,
                 validator: Optional[StepValidator] = None):
        """
        Initialize the workflow controller.

        Args:
            client: Backend client used for creation calls
            credential_store: Holder of the connected ad account
            config: Application configuration (defaults when omitted)
            validator: Optional StepValidator instance
        """
        self.client = client
        self.credential_store = credential_store
        self.config = config or AppConfig()
        self.validator = validator or StepValidator(self.config.min_daily_budget)
        self.state = WorkflowState()
        self._pages: Dict[str, List[Dict[str, str]]] = {}

        logger.info("CampaignWorkflowController initialized")

    @property
    def strategy(self) -> Optional[CampaignStrategy]:
        if self.state.campaign_type is None:
            return None
        return get_strategy(self.state.campaign_type)

    def select_type(self, campaign_type: CampaignType) -> WorkflowState:
        """
        Start a fresh session for ``campaign_type``.

        The strategy's fixed objective, destination and goal are written into
        the forms straight away.
        """
        if self.state.step != WorkflowStep.SELECT_TYPE:
            raise ValueError("Campaign type can only be chosen at the start of the workflow")

        strategy = get_strategy(campaign_type)
        state = WorkflowState(step=WorkflowStep.CAMPAIGN, campaign_type=campaign_type)
        state.campaign_form.objective = strategy.fixed_objective
        state.adset_form.destination_type = strategy.fixed_destination_type
        state.adset_form.optimization_goal = strategy.fixed_optimization_goal
        self.state = state
        self.resolve()

        logger.info(f"Started {campaign_type.value} campaign workflow")
        return self.state

    def update_form(self, step: WorkflowStep, **values) -> Any:
        """
        Write entered values into the form of ``step``.

        Values survive Back transitions. Changes to the goal or destination
        re-run the resolver.
        """
        forms = {
            WorkflowStep.CAMPAIGN: self.state.campaign_form,
            WorkflowStep.ADSET: self.state.adset_form,
            WorkflowStep.CREATIVE: self.state.creative_form,
            WorkflowStep.AD: self.state.ad_form,
        }
        if step not in forms:
            raise ValueError(f"Step {step.name} has no form")

        form = forms[step]
        for name, value in values.items():
            if not hasattr(form, name):
                raise ValueError(f"Unknown field '{name}' for {step.name} form")
            setattr(form, name, value)

        if {'objective', 'optimization_goal', 'destination_type'} & set(values):
            self.resolve()
        return form

    def resolve(self) -> Optional[Resolution]:
        """Run the CTA/goal resolver and apply its selections to the forms."""
        strategy = self.strategy
        if strategy is None:
            return None

        adset_form = self.state.adset_form
        creative_form = self.state.creative_form

        # Fixed values always win over anything entered
        self.state.campaign_form.objective = strategy.fixed_objective
        resolution = resolve(
            strategy.fixed_objective,
            strategy.effective_goal(self.state),
            strategy.effective_destination(self.state),
            creative_form.call_to_action
        )

        adset_form.optimization_goal = strategy.fixed_optimization_goal or resolution.optimization_goal
        adset_form.destination_type = strategy.fixed_destination_type or resolution.destination_type
        creative_form.call_to_action = resolution.selected_cta
        return resolution

    def available_pages(self, refresh: bool = False) -> List[Dict[str, str]]:
        """
        Facebook pages of the connected ad account as id/name pairs.

        Results are cached per ad account. A failed fetch returns an empty
        list so the caller can fall back to manual entry; an expired session
        still disconnects the account and discards the workflow.
        """
        credentials = self.credential_store.get()
        if credentials is None:
            return []

        account_id = credentials.ad_account_id
        if account_id in self._pages and not refresh:
            return self._pages[account_id]

        context = "page listing"
        try:
            raw_pages = self.client.list_pages(credentials)
        except SessionExpired as e:
            self._abort_on_expiry(self.state.step, e, context)
            return []
        except CampaignBuilderError as e:
            error_info = error_handler.classify_error(e, context)
            error_handler.log_error(error_info, context)
            return []

        pages = []
        for page in raw_pages:
            if not isinstance(page, dict) or not page.get('id'):
                continue
            page_id = str(page['id'])
            pages.append({'id': page_id, 'name': page.get('name') or page_id})

        self._pages[account_id] = pages
        logger.info(f"Loaded {len(pages)} pages for ad account {account_id}")
        return pages

    def targeting(self) -> TargetingBuilder:
        """Builder bound to the ad set form's targeting spec."""
        return TargetingBuilder(self.state.adset_form.targeting)

    def advance(self) -> StepOutcome:
        """
        Submit the active step and move to the next one.

        Returns:
            StepOutcome describing the created resource or the failure
        """
        step = self.state.step
        if step not in CREATION_STEPS:
            return StepOutcome(False, step, "There is nothing to submit at this step")

        strategy = self.strategy
        id_field = STEP_ID_FIELDS[step]
        existing_id = getattr(self.state, id_field)
        if existing_id:
            # Already created before a Back transition
            self.state.step = WorkflowStep(step + 1)
            logger.info(f"{step.name} already created as {existing_id}; moving forward")
            return StepOutcome(True, step, f"{STEP_LABELS[step]} already created", resource_id=existing_id)

        context = f"{step.name.lower()} creation"
        try:
            if step == WorkflowStep.ADSET:
                self.resolve()
            self.validator.validate_step(step, strategy, self.state).raise_if_invalid()

            targeting = None
            if step == WorkflowStep.ADSET:
                targeting = self.targeting().build()

            payload = strategy.build_payload(
                step, self.state, targeting, self.config.budget_minor_unit_factor
            )
            resource_id = self.client.create(
                strategy.endpoint_for(step), payload, self.credential_store.get()
            )
        except SessionExpired as e:
            return self._abort_on_expiry(step, e, context)
        except CampaignBuilderError as e:
            return self._failed_outcome(step, e, context)

        setattr(self.state, id_field, resource_id)
        self.state.step = WorkflowStep(step + 1)
        logger.info(f"{STEP_LABELS[step]} created with id {resource_id}; now at {self.state.step.name}")

        return StepOutcome(
            True, step, f"{STEP_LABELS[step]} created successfully (ID: {resource_id})",
            resource_id=resource_id
        )

    def create_lead_form(self, definition: LeadFormDefinition) -> StepOutcome:
        """
        Create the instant form used by the lead ad.

        Only valid for lead form campaigns; the returned id is embedded in
        the ad payload.
        """
        step = self.state.step
        strategy = self.strategy
        if not isinstance(strategy, LeadFormStrategy):
            raise ValueError("Lead forms are only created for lead form campaigns")

        if self.state.leadgen_form_id:
            return StepOutcome(True, step, "Lead form already created", resource_id=self.state.leadgen_form_id)

        context = "lead form creation"
        try:
            issues = []
            if not definition.name.strip():
                issues.append("Please enter the form name")
            if not definition.page_id.strip():
                issues.append("Please select a Facebook Page for the form")
            if not definition.privacy_policy_url.strip().startswith(("http://", "https://")):
                issues.append("Please enter a valid privacy policy URL")
            if not definition.questions:
                issues.append("Please add at least one question")
            if issues:
                raise ValidationError(issues[0], issues=issues, field="lead_form")

            resource_id = self.client.create(
                strategy.lead_form_endpoint,
                strategy.build_lead_form_payload(definition),
                self.credential_store.get()
            )
        except SessionExpired as e:
            return self._abort_on_expiry(step, e, context)
        except CampaignBuilderError as e:
            return self._failed_outcome(step, e, context)

        self.state.leadgen_form_id = resource_id
        logger.info(f"Lead form created with id {resource_id}")
        return StepOutcome(True, step, f"Lead form created successfully (ID: {resource_id})", resource_id=resource_id)

    def back(self) -> StepOutcome:
        """
        Move one step back without deleting anything remotely.

        Going back from the campaign step discards the session.
        """
        step = self.state.step
        if step == WorkflowStep.SELECT_TYPE:
            return StepOutcome(False, step, "Already at the first step")

        if step == WorkflowStep.CAMPAIGN:
            orphans = self.abandon()
            return StepOutcome(True, step, "Campaign type selection reopened", orphaned_ids=orphans)

        self.state.step = WorkflowStep(step - 1)
        logger.info(f"Moved back from {step.name} to {self.state.step.name}")
        return StepOutcome(True, step, f"Back to {self.state.step.name.replace('_', ' ').title()}")

    def abandon(self) -> Dict[str, str]:
        """
        Discard the session client side.

        Created resources stay on the platform in PAUSED state.

        Returns:
            Identifiers left behind remotely
        """
        orphans = self.state.created_ids()
        if self.state.leadgen_form_id:
            orphans['leadgen_form_id'] = self.state.leadgen_form_id

        if orphans:
            logger.warning(f"Abandoning workflow; paused resources left on the platform: {orphans}")
        else:
            logger.info("Abandoning workflow with no remote resources")

        self.state = WorkflowState()
        return orphans

    def restart(self) -> Dict[str, str]:
        """Start over after completion or on user request."""
        return self.abandon()

    def is_complete(self) -> bool:
        return self.state.step == WorkflowStep.COMPLETE

    def _abort_on_expiry(self, step: WorkflowStep, error: SessionExpired, context: str) -> StepOutcome:
        error_info = error_handler.classify_error(error, context)
        error_handler.log_error(error_info, context)
        self.credential_store.invalidate()
        orphans = self.abandon()
        return StepOutcome(
            False, step, error_info.user_message,
            notification=error_handler.create_user_notification(error_info),
            aborted=True,
            orphaned_ids=orphans
        )

    def _failed_outcome(self, step: WorkflowStep, error: CampaignBuilderError, context: str) -> StepOutcome:
        error_info = error_handler.classify_error(error, context)
        error_handler.log_error(error_info, context)
        return StepOutcome(
            False, step, error_info.user_message,
            notification=error_handler.create_user_notification(error_info)
        )
