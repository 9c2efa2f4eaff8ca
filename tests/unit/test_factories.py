"""Tests for TransportFactory backend selection."""

import pytest
from unittest.mock import patch

from epubdate.application.factories import TransportFactory
from epubdate.domain.exceptions import TransportNotAvailableError
from epubdate.infrastructure.transport.curl_backend import CurlTransport
from epubdate.infrastructure.transport.requests_backend import RequestsTransport

from conftest import API_HOST, TOKEN

REQUESTS_AVAILABLE = 'epubdate.infrastructure.transport.requests_backend.RequestsTransport.is_available'
CURL_AVAILABLE = 'epubdate.infrastructure.transport.curl_backend.CurlTransport.is_available'


class TestTransportFactory:

    def test_auto_prefers_requests(self):
        with patch(CURL_AVAILABLE, return_value=True):
            transport = TransportFactory('auto').create(API_HOST, TOKEN)

        assert isinstance(transport, RequestsTransport)
        assert transport.name == 'requests'

    def test_auto_falls_back_to_curl(self):
        with patch(REQUESTS_AVAILABLE, return_value=False), patch(CURL_AVAILABLE, return_value=True):
            transport = TransportFactory('auto').create(API_HOST, TOKEN, timeout=12)

        assert isinstance(transport, CurlTransport)
        assert transport.timeout == 12
        assert transport.token == TOKEN

    def test_auto_nothing_available(self):
        with patch(REQUESTS_AVAILABLE, return_value=False), patch(CURL_AVAILABLE, return_value=False):
            with pytest.raises(TransportNotAvailableError):
                TransportFactory('auto').create(API_HOST, TOKEN)

    def test_force_curl(self):
        with patch(CURL_AVAILABLE, return_value=True):
            transport = TransportFactory('curl').create(API_HOST, TOKEN)

        assert isinstance(transport, CurlTransport)

    def test_force_curl_unavailable(self):
        with patch(CURL_AVAILABLE, return_value=False):
            with pytest.raises(TransportNotAvailableError, match="curl"):
                TransportFactory('curl').create(API_HOST, TOKEN)

    def test_force_requests_unavailable(self):
        with patch(REQUESTS_AVAILABLE, return_value=False), patch(CURL_AVAILABLE, return_value=True):
            with pytest.raises(TransportNotAvailableError, match="requests"):
                TransportFactory('requests').create(API_HOST, TOKEN)

    def test_unknown_backend(self):
        with pytest.raises(TransportNotAvailableError):
            TransportFactory('httpie').create(API_HOST, TOKEN)

    def test_prefer_from_env(self, monkeypatch):
        monkeypatch.setenv('EPUBDATE_TRANSPORT', 'CURL')

        assert TransportFactory().prefer == 'curl'

    def test_from_config(self, config):
        with patch(REQUESTS_AVAILABLE, return_value=False), patch(CURL_AVAILABLE, return_value=True):
            transport = TransportFactory.from_config(config)

        assert isinstance(transport, CurlTransport)
        assert transport.base_url == config.api_host
        assert transport.timeout == config.request_timeout
