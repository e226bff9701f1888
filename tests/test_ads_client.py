"""
Unit tests for the ads backend client.
"""

import unittest
from unittest.mock import Mock

import requests

from models.data_models import Credentials
from data.ads_client import AdsClient, extract_resource_id
from business_logic.error_handler import (
    ValidationError, SessionExpired, RemoteRejection, MalformedResponse,
    TransientNetworkError, FALLBACK_REMOTE_MESSAGE,
)


def make_response(status_code=200, body=None, json_error=False):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if json_error:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = body
    return response


class TestExtractResourceId(unittest.TestCase):
    """Test cases for response envelope normalization."""

    def test_success_envelope_takes_precedence(self):
        body = {'success': True, 'data': {'id': "111"}, 'id': "222"}
        self.assertEqual(extract_resource_id(body), "111")

    def test_data_envelope(self):
        self.assertEqual(extract_resource_id({'data': {'id': 333}}), "333")

    def test_bare_id(self):
        self.assertEqual(extract_resource_id({'id': "444"}), "444")

    def test_success_false_is_rejection(self):
        with self.assertRaises(RemoteRejection) as ctx:
            extract_resource_id({'success': False, 'message': "Budget too low"})
        self.assertEqual(ctx.exception.message, "Budget too low")

    def test_missing_id_is_malformed(self):
        with self.assertRaises(MalformedResponse):
            extract_resource_id({'success': True, 'data': {}})
        with self.assertRaises(MalformedResponse):
            extract_resource_id(["not", "a", "dict"])
        with self.assertRaises(MalformedResponse):
            extract_resource_id(None)


class TestAdsClient(unittest.TestCase):
    """Test cases for AdsClient requests."""

    def setUp(self):
        """Set up test fixtures."""
        self.session = Mock()
        self.client = AdsClient("https://backend.example.com/api/v1/", timeout=12, session=self.session)
        self.credentials = Credentials(ad_account_id="12345", access_token="secret-token")

    def test_create_sends_credential_headers(self):
        self.session.request.return_value = make_response(201, {'success': True, 'data': {'id': "c1"}})

        resource_id = self.client.create("click-to-call/campaigns", {'name': "Promo"}, self.credentials)

        self.assertEqual(resource_id, "c1")
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("POST", "https://backend.example.com/api/v1/click-to-call/campaigns"))
        self.assertEqual(kwargs['headers']['act_ad_account_id'], "12345")
        self.assertEqual(kwargs['headers']['fb_token'], "secret-token")
        self.assertNotIn('x-fb-access-token', kwargs['headers'])
        self.assertEqual(kwargs['json'], {'name': "Promo"})
        self.assertEqual(kwargs['timeout'], 12)

    def test_missing_credentials_never_reach_network(self):
        with self.assertRaises(ValidationError):
            self.client.create("click-to-call/campaigns", {}, None)
        with self.assertRaises(ValidationError):
            self.client.create("click-to-call/campaigns", {}, Credentials(ad_account_id="1", access_token=""))
        self.session.request.assert_not_called()

    def test_token_expired(self):
        self.session.request.return_value = make_response(
            401, {'fb': {'code': 190, 'error_subcode': 463, 'message': "Session has expired"}}
        )
        with self.assertRaises(SessionExpired):
            self.client.create("click-to-link/adsets", {}, self.credentials)

    def test_token_expired_flag(self):
        self.session.request.return_value = make_response(401, {'code': "TOKEN_EXPIRED"})
        with self.assertRaises(SessionExpired):
            self.client.create("click-to-link/adsets", {}, self.credentials)

    def test_other_401_is_rejection(self):
        self.session.request.return_value = make_response(401, {'message': "Unauthorized"})
        with self.assertRaises(RemoteRejection) as ctx:
            self.client.create("click-to-link/adsets", {}, self.credentials)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_platform_message_preferred(self):
        self.session.request.return_value = make_response(400, {
            'message': "Request failed",
            'error': {'code': 100, 'error_subcode': 1885183, 'error_user_msg': "Invalid page id"}
        })
        with self.assertRaises(RemoteRejection) as ctx:
            self.client.create("click-to-whatsapp/adcreatives", {}, self.credentials)
        self.assertEqual(ctx.exception.message, "Invalid page id")
        self.assertEqual(ctx.exception.error_code, 100)
        self.assertEqual(ctx.exception.error_subcode, 1885183)

    def test_non_json_error_uses_fallback(self):
        self.session.request.return_value = make_response(502, json_error=True)
        with self.assertRaises(RemoteRejection) as ctx:
            self.client.create("click-to-whatsapp/ads", {}, self.credentials)
        self.assertEqual(ctx.exception.message, FALLBACK_REMOTE_MESSAGE)

    def test_network_failures(self):
        self.session.request.side_effect = requests.Timeout("read timed out")
        with self.assertRaises(TransientNetworkError):
            self.client.create("click-to-call/ads", {}, self.credentials)

        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(TransientNetworkError):
            self.client.create("click-to-call/ads", {}, self.credentials)

    def test_create_does_not_retry(self):
        self.session.request.return_value = make_response(500, {'message': "Internal error"})
        with self.assertRaises(RemoteRejection):
            self.client.create("click-to-call/ads", {}, self.credentials)
        self.assertEqual(self.session.request.call_count, 1)

    def test_list_adsets(self):
        self.session.request.return_value = make_response(200, {
            'adsets': [{'id': str(i)} for i in range(30)]
        })
        adsets = self.client.list_adsets("c1", self.credentials, limit=25)

        self.assertEqual(len(adsets), 25)
        args, kwargs = self.session.request.call_args
        self.assertEqual(args[1], "https://backend.example.com/api/v1/adsets/all")
        self.assertEqual(kwargs['params'], {'campaignId': "c1", 'limit': 25})

    def test_fetch_adset_insights(self):
        self.session.request.return_value = make_response(200, {'data': [{'impressions': "100"}]})
        self.assertEqual(self.client.fetch_adset_insights("as1", self.credentials), {'impressions': "100"})

        self.session.request.return_value = make_response(200, {'data': []})
        self.assertIsNone(self.client.fetch_adset_insights("as1", self.credentials))

    def test_set_adset_status(self):
        self.session.request.return_value = make_response(200, {'success': True})
        self.client.set_adset_status("as1", False, self.credentials)
        args, _ = self.session.request.call_args
        self.assertEqual(args, ("POST", "https://backend.example.com/api/v1/adsets/as1/pause"))

    def test_list_pages(self):
        self.session.request.return_value = make_response(200, {'data': [{'id': "p1", 'name': "Shop"}]})
        self.assertEqual(self.client.list_pages(self.credentials), [{'id': "p1", 'name': "Shop"}])


if __name__ == '__main__':
    unittest.main()
