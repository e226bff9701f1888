"""
Unit tests for configuration loading.
"""

import os
import unittest
from unittest.mock import patch

from config.settings import ConfigManager, CredentialStore, AppConfig
from models.data_models import Credentials


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager."""

    def setUp(self):
        self.st_patcher = patch('config.settings.st')
        mock_st = self.st_patcher.start()
        mock_st.secrets = {}

    def tearDown(self):
        self.st_patcher.stop()

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = ConfigManager().load_config()
        self.assertEqual(config, AppConfig())

    @patch.dict(os.environ, {
        'ADS_API_BASE_URL': "http://localhost:8000/api/v1/",
        'ADS_MIN_DAILY_BUDGET': "500",
        'ADS_LISTING_PAGE_SIZE': "ten",
    }, clear=True)
    def test_environment_overrides(self):
        config = ConfigManager().load_config()
        self.assertEqual(config.api_base_url, "http://localhost:8000/api/v1")
        self.assertEqual(config.min_daily_budget, 500)
        self.assertEqual(config.listing_page_size, 25)

    @patch.dict(os.environ, {'ADS_API_BASE_URL': "ftp://backend"}, clear=True)
    def test_invalid_base_url(self):
        with self.assertRaises(ValueError):
            ConfigManager().load_config()

    @patch.dict(os.environ, {'FB_ACCESS_TOKEN': "token", 'FB_AD_ACCOUNT_ID': "12345"}, clear=True)
    def test_default_credentials(self):
        credentials = ConfigManager().get_default_credentials()
        self.assertEqual(credentials, Credentials(ad_account_id="12345", access_token="token"))

    @patch.dict(os.environ, {'FB_ACCESS_TOKEN': "token"}, clear=True)
    def test_partial_credentials_ignored(self):
        self.assertIsNone(ConfigManager().get_default_credentials())


class TestCredentialStore(unittest.TestCase):

    def test_lifecycle(self):
        store = CredentialStore()
        self.assertFalse(store.is_connected())

        store.set(Credentials(ad_account_id="1", access_token="t"))
        self.assertTrue(store.is_connected())

        store.invalidate()
        self.assertIsNone(store.get())
        self.assertFalse(store.is_connected())


if __name__ == '__main__':
    unittest.main()
