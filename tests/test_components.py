"""
Tests for the Streamlit UI components.
"""

import pytest
from unittest.mock import Mock, patch

from models.data_models import OptimizationGoal, WorkflowStep
from business_logic.workflow_controller import StepOutcome
from business_logic.error_handler import SessionExpired
from ui.components import CustomSelect, PagePicker, AdSetListingView, enum_label, display_outcome


class TestCustomSelect:
    """Test cases for the typed select box."""

    def test_returns_option_object_and_fires_callback(self):
        options = [OptimizationGoal.IMPRESSIONS, OptimizationGoal.REACH]
        callback = Mock()

        with patch('ui.components.st') as mock_st:
            mock_st.selectbox.return_value = OptimizationGoal.REACH
            selected = CustomSelect("Goal", options, format_func=enum_label).render(
                OptimizationGoal.IMPRESSIONS, on_change=callback
            )

        assert selected == OptimizationGoal.REACH
        callback.assert_called_once_with(OptimizationGoal.REACH)
        kwargs = mock_st.selectbox.call_args[1]
        assert kwargs['options'] == options
        assert kwargs['index'] == 0
        assert kwargs['format_func'] is enum_label

    def test_no_callback_when_unchanged(self):
        callback = Mock()
        with patch('ui.components.st') as mock_st:
            mock_st.selectbox.return_value = OptimizationGoal.REACH
            CustomSelect("Goal", [OptimizationGoal.IMPRESSIONS, OptimizationGoal.REACH]).render(
                OptimizationGoal.REACH, on_change=callback
            )
        assert mock_st.selectbox.call_args[1]['index'] == 1
        callback.assert_not_called()

    def test_empty_options(self):
        with patch('ui.components.st') as mock_st:
            assert CustomSelect("CTA", []).render() is None
        mock_st.info.assert_called_once()
        mock_st.selectbox.assert_not_called()


class TestHelpers:

    @pytest.mark.parametrize("member, label", [
        (OptimizationGoal.LEAD_GENERATION, "Lead Generation"),
        (OptimizationGoal.REACH, "Reach"),
        (None, "-"),
    ])
    def test_enum_label(self, member, label):
        assert enum_label(member) == label

    def test_display_success_outcome(self):
        with patch('ui.components.st') as mock_st:
            display_outcome(StepOutcome(True, WorkflowStep.CAMPAIGN, "Campaign created"))
        mock_st.success.assert_called_once()
        mock_st.error.assert_not_called()

    def test_display_failed_outcome(self):
        outcome = StepOutcome(
            False, WorkflowStep.ADSET, "Invalid page id",
            notification={'type': 'error', 'title': 'Request Rejected', 'action': 'Edit and retry'}
        )
        with patch('ui.components.st') as mock_st:
            display_outcome(outcome)
        assert "Invalid page id" in mock_st.error.call_args[0][0]
        mock_st.info.assert_called_once()


class TestPagePicker:
    """Test cases for the Facebook Page picker."""

    def setup_method(self):
        self.controller = Mock()
        self.controller.credential_store.is_connected.return_value = True

    def test_select_box_when_pages_load(self):
        self.controller.available_pages.return_value = [
            {'id': "111", 'name': "Bakery"}, {'id': "222", 'name': "Cafe"}
        ]
        with patch('ui.components.st') as mock_st:
            mock_st.selectbox.return_value = "222"
            page_id = PagePicker(self.controller, "Facebook Page *", key="page").render("222")

        assert page_id == "222"
        kwargs = mock_st.selectbox.call_args[1]
        assert kwargs['options'] == ["111", "222"]
        assert kwargs['index'] == 1
        assert kwargs['format_func']("111") == "Bakery (111)"
        mock_st.text_input.assert_not_called()

    def test_unknown_current_page_kept_as_option(self):
        self.controller.available_pages.return_value = [{'id': "111", 'name': "Bakery"}]
        with patch('ui.components.st') as mock_st:
            mock_st.selectbox.return_value = "999"
            PagePicker(self.controller, "Facebook Page *", key="page").render("999")

        assert mock_st.selectbox.call_args[1]['options'] == ["999", "111"]

    def test_text_input_fallback(self):
        self.controller.available_pages.return_value = []
        with patch('ui.components.st') as mock_st:
            mock_st.text_input.return_value = "333"
            page_id = PagePicker(self.controller, "Facebook Page *", key="page").render("")

        assert page_id == "333"
        mock_st.selectbox.assert_not_called()


class TestAdSetListingView:

    def test_load_failure_shown(self):
        listing = Mock()
        listing.load.side_effect = SessionExpired("Your session has expired")

        with patch('ui.components.st') as mock_st:
            AdSetListingView(listing).render("c1")

        assert "Your session has expired" in mock_st.error.call_args[0][0]
        mock_st.dataframe.assert_not_called()
