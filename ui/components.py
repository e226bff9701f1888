"""
UI components for the Ad Campaign Builder application.
"""

import streamlit as st
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar
from enum import Enum
import logging
import pandas as pd

from models.data_models import (
    CampaignType, WorkflowStep, CustomLocation, BidStrategy, BidConstraints,
    LeadFormDefinition, LeadFormQuestion,
)
from business_logic.workflow_controller import CampaignWorkflowController, StepOutcome
from business_logic.error_handler import CampaignBuilderError
from business_logic.targeting_builder import (
    FACEBOOK_POSITIONS, INSTAGRAM_POSITIONS, PUBLISHER_PLATFORMS, DEVICE_PLATFORMS, GENDERS,
    MIN_RADIUS_KM, MAX_RADIUS_KM,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


CAMPAIGN_TYPE_LABELS = {
    CampaignType.WHATSAPP: "💬 Click to WhatsApp",
    CampaignType.CALL: "📞 Click to Call",
    CampaignType.LINK: "🔗 Click to Website",
    CampaignType.LEAD_FORM: "📝 Lead Form",
}

STEP_TITLES = {
    WorkflowStep.CAMPAIGN: "1️⃣ Campaign",
    WorkflowStep.ADSET: "2️⃣ Ad Set",
    WorkflowStep.CREATIVE: "3️⃣ Ad Creative",
    WorkflowStep.AD: "4️⃣ Ad",
}

LEAD_QUESTION_TYPES = ["FULL_NAME", "EMAIL", "PHONE", "CITY", "CUSTOM"]


def enum_label(member: Optional[Enum]) -> str:
    """Human label for an enum member, e.g. LEAD_GENERATION -> Lead Generation."""
    if member is None:
        return "-"
    return str(member.value).replace("_", " ").title()


class CustomSelect(Generic[T]):
    """
    Select box over a typed option list.

    The caller gets back the option object itself, never its label, and an
    optional callback fires only when the selection changes.
    """

    def __init__(self, label: str, options: Sequence[T],
                 format_func: Callable[[T], str] = str,
                 key: Optional[str] = None, help: Optional[str] = None,
                 disabled: bool = False):
        self.label = label
        self.options = list(options)
        self.format_func = format_func
        self.key = key
        self.help = help
        self.disabled = disabled

    def index_of(self, current: Optional[T]) -> int:
        return self.options.index(current) if current in self.options else 0

    def render(self, current: Optional[T] = None,
               on_change: Optional[Callable[[T], None]] = None) -> Optional[T]:
        """
        Render the select box.

        Args:
            current: Currently selected option
            on_change: Called with the new option when the selection changes

        Returns:
            The selected option, or None when there is nothing to choose
        """
        if not self.options:
            st.info(f"No options available for {self.label}")
            return None

        selected = st.selectbox(
            self.label,
            options=self.options,
            index=self.index_of(current),
            format_func=self.format_func,
            key=self.key,
            help=self.help,
            disabled=self.disabled
        )

        if on_change is not None and selected != current:
            on_change(selected)
        return selected


class PagePicker:
    """
    Facebook Page select fed by the connected account.

    Falls back to a text input when no pages can be loaded.
    """

    def __init__(self, controller: CampaignWorkflowController, label: str, key: str,
                 help: Optional[str] = None):
        self.controller = controller
        self.label = label
        self.key = key
        self.help = help

    def render(self, current: str) -> str:
        pages = self.controller.available_pages()
        if not self.controller.credential_store.is_connected():
            st.rerun()

        if not pages:
            return st.text_input(self.label, value=current, key=self.key, help=self.help)

        names = {page['id']: page['name'] for page in pages}
        options = list(names)
        if current and current not in names:
            options.insert(0, current)
            names[current] = current

        selected = CustomSelect(
            self.label, options, format_func=lambda page_id: f"{names[page_id]} ({page_id})",
            key=self.key, help=self.help
        ).render(current or None)
        return selected or ""


def display_outcome(outcome: Optional[StepOutcome]):
    """Show the result of the last workflow transition."""
    if outcome is None:
        return

    if outcome.success:
        st.success(f"✅ {outcome.message}")
        return

    notification = outcome.notification or {}
    title = notification.get('title', 'Error')
    if notification.get('type') == 'warning':
        st.warning(f"⚠️ **{title}**: {outcome.message}")
    else:
        st.error(f"❌ **{title}**: {outcome.message}")

    if notification.get('details'):
        for detail in notification['details'].split("; "):
            st.write(f"• {detail}")
    if notification.get('action'):
        st.info(f"💡 {notification['action']}")
    if outcome.orphaned_ids:
        st.caption(f"Paused resources left in Ads Manager: {outcome.orphaned_ids}")


class CampaignTypeSelector:
    """First screen: choose the kind of campaign to build."""

    def __init__(self, controller: CampaignWorkflowController):
        self.controller = controller

    def render(self) -> Optional[CampaignType]:
        st.subheader("🎯 Choose a Campaign Type")
        cols = st.columns(len(CAMPAIGN_TYPE_LABELS))

        for col, (campaign_type, label) in zip(cols, CAMPAIGN_TYPE_LABELS.items()):
            with col:
                if st.button(label, key=f"type_{campaign_type.value}", use_container_width=True):
                    self.controller.select_type(campaign_type)
                    return campaign_type
        return None


class CampaignStepForm:
    """Campaign name; the objective is fixed by the campaign type."""

    def __init__(self, controller: CampaignWorkflowController):
        self.controller = controller

    def render(self) -> bool:
        state = self.controller.state
        st.subheader(STEP_TITLES[WorkflowStep.CAMPAIGN])

        name = st.text_input(
            "Campaign Name *",
            value=state.campaign_form.name,
            placeholder="e.g. Diwali Promo",
            disabled=bool(state.campaign_id)
        )
        self.controller.update_form(WorkflowStep.CAMPAIGN, name=name)
        st.text_input("Objective", value=enum_label(state.campaign_form.objective), disabled=True)
        st.caption("Campaigns are created paused and can be activated later from Ads Manager.")

        return st.button("Create Campaign", type="primary")


class TargetingEditor:
    """Audience section of the ad set step."""

    def __init__(self, controller: CampaignWorkflowController):
        self.controller = controller

    def render(self):
        builder = self.controller.targeting()
        spec = builder.spec

        st.markdown("**👥 Audience**")
        col1, col2 = st.columns(2)
        with col1:
            builder.set_age_min(st.text_input("Min Age", value=str(spec.age_min)))
        with col2:
            builder.set_age_max(st.text_input("Max Age", value=str(spec.age_max)))

        gender_cols = st.columns(len(GENDERS))
        for col, (code, label) in zip(gender_cols, GENDERS.items()):
            with col:
                checked = st.checkbox(label, value=code in spec.genders, key=f"gender_{code}")
                if checked != (code in spec.genders):
                    builder.toggle_gender(code)

        st.markdown("**📍 Custom Locations**")
        with st.expander("Add a location", expanded=not spec.custom_locations):
            col1, col2, col3 = st.columns(3)
            with col1:
                latitude = st.number_input("Latitude", min_value=-90.0, max_value=90.0,
                                           value=12.9716, format="%.6f")
            with col2:
                longitude = st.number_input("Longitude", min_value=-180.0, max_value=180.0,
                                            value=77.5946, format="%.6f")
            with col3:
                radius = st.text_input(f"Radius km ({MIN_RADIUS_KM}-{MAX_RADIUS_KM})", value="5")
            label = st.text_input("Label", placeholder="e.g. Indiranagar store")

            if st.button("➕ Add Location"):
                added = builder.add_location(CustomLocation(
                    latitude=latitude, longitude=longitude, radius_km=radius, label=label
                ))
                if not added:
                    st.warning("⚠️ This location has already been added.")

        for index, location in enumerate(list(spec.custom_locations)):
            col1, col2, col3 = st.columns([3, 1, 1])
            with col1:
                st.write(f"{location.label or 'Location'} ({location.latitude:.4f}, {location.longitude:.4f})")
            with col2:
                new_radius = st.text_input("Radius", value=str(location.radius_km), key=f"radius_{index}")
                builder.update_radius(index, new_radius)
            with col3:
                if st.button("🗑️", key=f"remove_location_{index}"):
                    builder.remove_location(index)
                    st.rerun()

        st.markdown("**📱 Placements**")
        self._render_toggles("Platforms", PUBLISHER_PLATFORMS, spec.publisher_platforms,
                             builder.toggle_publisher_platform, "platform")
        if "facebook" in spec.publisher_platforms:
            self._render_toggles("Facebook positions", FACEBOOK_POSITIONS, spec.facebook_positions,
                                 builder.toggle_facebook_position, "fb_pos")
        if "instagram" in spec.publisher_platforms:
            self._render_toggles("Instagram positions", INSTAGRAM_POSITIONS, spec.instagram_positions,
                                 builder.toggle_instagram_position, "ig_pos")
        self._render_toggles("Devices", DEVICE_PLATFORMS, spec.device_platforms,
                             builder.toggle_device_platform, "device")

    def _render_toggles(self, title: str, options: Sequence[str], selected: List[str],
                        toggle: Callable[[str], Any], key_prefix: str):
        st.caption(title)
        cols = st.columns(len(options))
        for col, option in zip(cols, options):
            with col:
                checked = st.checkbox(option.replace("_", " ").title(), value=option in selected,
                                      key=f"{key_prefix}_{option}")
                if checked != (option in selected):
                    if toggle(option) is False:
                        st.warning("⚠️ At least one platform must stay selected.")


class AdSetStepForm:
    """Budget, goal, bidding and targeting."""

    def __init__(self, controller: CampaignWorkflowController):
        self.controller = controller
        self.targeting_editor = TargetingEditor(controller)

    def render(self) -> bool:
        controller = self.controller
        state = controller.state
        form = state.adset_form
        strategy = controller.strategy
        resolution = controller.resolve()

        st.subheader(STEP_TITLES[WorkflowStep.ADSET])
        name = st.text_input("Ad Set Name *", value=form.name)
        budget = st.text_input(
            f"Daily Budget ({controller.config.default_currency}) *",
            value=str(form.daily_budget),
            help=f"Minimum {controller.config.min_daily_budget}"
        )
        controller.update_form(WorkflowStep.ADSET, name=name, daily_budget=budget)

        if strategy.fixed_optimization_goal is None:
            CustomSelect(
                "Optimization Goal *", resolution.allowed_goals, format_func=enum_label, key="adset_goal"
            ).render(
                form.optimization_goal,
                on_change=lambda goal: controller.update_form(WorkflowStep.ADSET, optimization_goal=goal)
            )
        else:
            st.text_input("Optimization Goal", value=enum_label(form.optimization_goal), disabled=True)
        st.text_input("Destination", value=enum_label(form.destination_type), disabled=True)

        if strategy.requires_lead_form:
            self._render_bidding()
            page_id = PagePicker(controller, "Facebook Page", key="adset_page",
                                 help="Required for lead generation goals").render(form.page_id)
            pixel_id = st.text_input("Pixel ID", value=form.pixel_id,
                                     help="Required for conversion and value goals")
            controller.update_form(WorkflowStep.ADSET, page_id=page_id, pixel_id=pixel_id)

        self.targeting_editor.render()
        return st.button("Create Ad Set", type="primary")

    def _render_bidding(self):
        controller = self.controller
        form = controller.state.adset_form

        bid_strategy = CustomSelect(
            "Bid Strategy", list(BidStrategy), format_func=enum_label, key="bid_strategy"
        ).render(form.bid_strategy)
        constraints = BidConstraints()
        if bid_strategy in (BidStrategy.LOWEST_COST_WITH_CAP, BidStrategy.COST_CAP):
            constraints.bid_amount = st.number_input(
                "Bid Amount *", min_value=0.0, value=float(form.bid_constraints.bid_amount or 0.0)
            )
        elif bid_strategy == BidStrategy.LOWEST_COST_MIN_ROAS:
            constraints.roas_average_floor = st.number_input(
                "Minimum ROAS *", min_value=0.0, value=float(form.bid_constraints.roas_average_floor or 0.0)
            )
        controller.update_form(WorkflowStep.ADSET, bid_strategy=bid_strategy, bid_constraints=constraints)


class CreativeStepForm:
    """Creative fields; the Call type adds phone number and ad copy."""

    def __init__(self, controller: CampaignWorkflowController):
        self.controller = controller

    def render(self) -> bool:
        controller = self.controller
        form = controller.state.creative_form
        strategy = controller.strategy
        resolution = controller.resolve()

        st.subheader(STEP_TITLES[WorkflowStep.CREATIVE])
        values = {
            'name': st.text_input("Creative Name *", value=form.name),
            'page_id': PagePicker(controller, "Facebook Page *", key="creative_page").render(form.page_id),
            'picture_url': st.text_input("Picture URL *", value=form.picture_url),
        }

        required = {name for name, _ in strategy.required_creative_fields}
        if "link_url" in required:
            values['link_url'] = st.text_input("Link URL *", value=form.link_url)
        else:
            values['business_page_url'] = st.text_input("Business Page URL *", value=form.business_page_url)

        if strategy.has_dedicated_creative_stage:
            values['phone_number'] = st.text_input("Phone Number *", value=form.phone_number,
                                                   placeholder="+919876543210")
            values['primary_text'] = st.text_area("Primary Text *", value=form.primary_text)
            values['headline'] = st.text_input("Headline *", value=form.headline, max_chars=27)
            values['description'] = st.text_input("Description", value=form.description)
        else:
            values['primary_text'] = st.text_area("Primary Text", value=form.primary_text)
            values['headline'] = st.text_input("Headline", value=form.headline)

        controller.update_form(WorkflowStep.CREATIVE, **values)

        CustomSelect(
            "Call to Action", resolution.allowed_ctas, format_func=enum_label, key="creative_cta",
            disabled=resolution.is_auto_selected
        ).render(
            form.call_to_action,
            on_change=lambda cta: controller.update_form(WorkflowStep.CREATIVE, call_to_action=cta)
        )
        if resolution.hint:
            st.caption(f"ℹ️ {resolution.hint}")

        return st.button("Create Ad Creative", type="primary")


class AdStepForm:
    """Final step; lead form campaigns create their instant form here first."""

    def __init__(self, controller: CampaignWorkflowController):
        self.controller = controller

    def render(self) -> bool:
        controller = self.controller
        state = controller.state
        st.subheader(STEP_TITLES[WorkflowStep.AD])

        name = st.text_input("Ad Name", value=state.ad_form.name)
        controller.update_form(WorkflowStep.AD, name=name)
        st.write(f"Ad set: `{state.adset_id}`  •  Creative: `{state.creative_id}`")

        if controller.strategy.requires_lead_form:
            if state.leadgen_form_id:
                st.success(f"✅ Lead form ready (ID: {state.leadgen_form_id})")
            else:
                definition = self._render_lead_form(state.adset_form.page_id)
                if st.button("Create Lead Form"):
                    st.session_state['last_outcome'] = controller.create_lead_form(definition)
                    st.rerun()

        return st.button("Create Ad", type="primary")

    def _render_lead_form(self, default_page_id: str) -> LeadFormDefinition:
        with st.expander("📝 Lead Form", expanded=True):
            form_name = st.text_input("Form Name *")
            page_id = PagePicker(self.controller, "Facebook Page *", key="lead_form_page").render(default_page_id)
            privacy_url = st.text_input("Privacy Policy URL *")
            follow_up_url = st.text_input("Thank-you Page URL")
            question_types = st.multiselect("Questions", LEAD_QUESTION_TYPES,
                                            default=["FULL_NAME", "PHONE"])

            questions = []
            for question_type in question_types:
                if question_type == "CUSTOM":
                    label = st.text_input("Custom question")
                    options = st.text_input("Choices (comma separated, leave empty for free text)")
                    choices = [opt.strip() for opt in options.split(",") if opt.strip()]
                    questions.append(LeadFormQuestion(
                        type="CUSTOM", label=label,
                        field_type="MULTIPLE_CHOICE" if choices else "SHORT_ANSWER",
                        options=choices
                    ))
                else:
                    questions.append(LeadFormQuestion(type=question_type))

        return LeadFormDefinition(
            name=form_name, page_id=page_id, privacy_policy_url=privacy_url,
            questions=questions, follow_up_action_url=follow_up_url
        )


class AdSetListingView:
    """Ad sets of the created campaign with insights and status toggles."""

    def __init__(self, listing):
        self.listing = listing

    def render(self, campaign_id: str):
        st.subheader("📊 Ad Sets")
        try:
            summaries = self.listing.load(campaign_id)
        except CampaignBuilderError as e:
            st.error(f"❌ Could not load ad sets: {e.message}")
            logger.error(f"Ad set listing error: {e.message}")
            return

        if not summaries:
            st.info("No ad sets found for this campaign yet.")
            return

        df: pd.DataFrame = self.listing.to_dataframe(summaries)
        st.dataframe(df, use_container_width=True, hide_index=True)

        for summary in summaries:
            is_active = summary.status == "active"
            label = f"⏸️ Pause {summary.name}" if is_active else f"▶️ Activate {summary.name}"
            if st.button(label, key=f"toggle_{summary.adset_id}"):
                result = self.listing.set_status(summary.adset_id, not is_active)
                if result['success']:
                    st.success(f"✅ {result['message']}")
                else:
                    st.error(f"❌ {result['message']}")


def display_workflow_progress(step: WorkflowStep):
    """Progress bar across the four creation steps."""
    done = min(int(step), int(WorkflowStep.COMPLETE)) - 1
    st.progress(max(done, 0) / 4, text=f"Step {max(done, 0)} of 4 complete")


def display_created_ids(ids: Dict[str, str]):
    if not ids:
        return
    with st.expander("🧾 Created resources"):
        for key, value in ids.items():
            st.write(f"**{key.replace('_', ' ').title()}:** `{value}`")
