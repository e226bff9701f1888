"""
Main entry point for the Ad Campaign Builder application.
"""
import logging
import streamlit as st

# Set up logging
logger = logging.getLogger(__name__)
from config.settings import config_manager, CredentialStore
from data.ads_client import AdsClient
from models.data_models import Credentials, WorkflowStep
from business_logic.workflow_controller import CampaignWorkflowController
from business_logic.adset_listing import AdSetListing
from ui.components import (
    CampaignTypeSelector, CampaignStepForm, AdSetStepForm, CreativeStepForm, AdStepForm,
    AdSetListingView, CAMPAIGN_TYPE_LABELS, display_outcome, display_workflow_progress,
    display_created_ids,
)


def _init_session(config):
    """Create the per-session controller, client and credential store once."""
    if 'controller' in st.session_state:
        return

    credential_store = CredentialStore(config_manager.get_default_credentials())
    client = AdsClient(config.api_base_url, timeout=config.request_timeout_seconds)
    st.session_state['credential_store'] = credential_store
    st.session_state['controller'] = CampaignWorkflowController(client, credential_store, config)
    st.session_state['listing'] = AdSetListing(client, credential_store, config)
    st.session_state['last_outcome'] = None


def render_connection_sidebar(credential_store: CredentialStore):
    """Ad account connection status and manual credential entry."""
    with st.sidebar:
        st.header("🔐 Ad Account")
        if credential_store.is_connected():
            st.success(f"Connected: act_{credential_store.get().ad_account_id}")
            if st.button("Disconnect"):
                credential_store.invalidate()
                st.rerun()
            return

        st.warning("Not connected")
        with st.form("connect_account"):
            account_id = st.text_input("Ad Account ID")
            token = st.text_input("Access Token", type="password")
            if st.form_submit_button("Connect"):
                credentials = Credentials(ad_account_id=account_id.strip(), access_token=token.strip())
                if credentials.is_complete():
                    credential_store.set(credentials)
                    st.rerun()
                else:
                    st.error("❌ Both the ad account ID and the access token are required.")


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="Ad Campaign Builder",
        page_icon="📣",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    st.title("📣 Ad Campaign Builder")
    st.markdown("Create click-to-WhatsApp, call, website and lead form campaigns step by step")

    # Load configuration
    try:
        config = config_manager.load_config()
    except ValueError as e:
        st.error(f"❌ Configuration Error: {e}")
        st.stop()

    _init_session(config)
    controller: CampaignWorkflowController = st.session_state['controller']
    credential_store: CredentialStore = st.session_state['credential_store']

    render_connection_sidebar(credential_store)
    display_outcome(st.session_state.get('last_outcome'))

    if not credential_store.is_connected():
        st.info("👈 Connect your Facebook ad account to start building a campaign.")
        st.stop()

    state = controller.state
    if state.step == WorkflowStep.SELECT_TYPE:
        if CampaignTypeSelector(controller).render():
            st.session_state['last_outcome'] = None
            st.rerun()
        return

    st.markdown(f"**Campaign type:** {CAMPAIGN_TYPE_LABELS[state.campaign_type]}")
    display_workflow_progress(state.step)
    display_created_ids(state.created_ids())

    if state.step == WorkflowStep.COMPLETE:
        st.success("🎉 Your campaign, ad set, creative and ad were created (paused).")
        AdSetListingView(st.session_state['listing']).render(state.campaign_id)
        if st.button("Start a new campaign"):
            controller.restart()
            st.session_state['last_outcome'] = None
            st.rerun()
        return

    forms = {
        WorkflowStep.CAMPAIGN: CampaignStepForm,
        WorkflowStep.ADSET: AdSetStepForm,
        WorkflowStep.CREATIVE: CreativeStepForm,
        WorkflowStep.AD: AdStepForm,
    }
    submitted = forms[state.step](controller).render()

    if submitted:
        with st.spinner("Submitting to the ads platform..."):
            st.session_state['last_outcome'] = controller.advance()
        st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        if st.button("⬅️ Back"):
            st.session_state['last_outcome'] = controller.back()
            st.rerun()
    with col2:
        if st.button("✖️ Abandon"):
            orphans = controller.abandon()
            if orphans:
                logger.info(f"User abandoned workflow leaving {orphans}")
            st.session_state['last_outcome'] = None
            st.rerun()


if __name__ == "__main__":
    main()
