"""
Unit tests for domain models.
"""

import pytest
from pathlib import Path

from epubdate.domain.models import (
    BookMetadata,
    BookflowState,
    Configuration,
    DownloadDescriptor,
    HttpResponse,
    Job,
    PRODUCTION_HOST,
)
from epubdate.domain.exceptions import ConfigurationError, MalformedResponseError

from conftest import TOKEN


class TestConfiguration:
    """Test Configuration validation."""

    def test_defaults(self, epub_file):
        config = Configuration(api_token=TOKEN, input_file=epub_file)

        assert config.api_host == PRODUCTION_HOST
        assert config.keep_remote is False
        assert config.metadata == BookMetadata()
        assert config.transport == "auto"
        assert config.max_polls == 720
        assert config.book_name == "My Novel"

    def test_is_immutable(self, epub_file):
        config = Configuration(api_token=TOKEN, input_file=epub_file)

        with pytest.raises(AttributeError):
            config.keep_remote = True

    @pytest.mark.parametrize("token", [
        "",
        "0123456789abcdef0123456789abcde",     # 31 chars
        "0123456789abcdef0123456789abcdef0",   # 33 chars
        "0123456789abcdef0123456789abcdeg",    # not hex
        " 0123456789abcdef0123456789abcde",
        "0123456789abcdef0123456789abcdef\n",
    ])
    def test_malformed_token(self, epub_file, token):
        with pytest.raises(ConfigurationError, match="token"):
            Configuration(api_token=token, input_file=epub_file)

    def test_mixed_case_token(self, epub_file):
        Configuration(api_token="ABCDEF0123456789abcdef0123456789", input_file=epub_file)

    def test_missing_input_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="does not exist"):
            Configuration(api_token=TOKEN, input_file=tmp_path / "missing.epub")

    def test_input_must_be_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Configuration(api_token=TOKEN, input_file=tmp_path)

    def test_invalid_host(self, epub_file):
        with pytest.raises(ConfigurationError, match="host"):
            Configuration(api_token=TOKEN, input_file=epub_file, api_host="bookflow.bookalope.net")

    def test_invalid_transport(self, epub_file):
        with pytest.raises(ConfigurationError, match="transport"):
            Configuration(api_token=TOKEN, input_file=epub_file, transport="httpie")

    def test_invalid_max_polls(self, epub_file):
        with pytest.raises(ConfigurationError):
            Configuration(api_token=TOKEN, input_file=epub_file, max_polls=0)

    def test_unbounded_polling(self, epub_file):
        config = Configuration(api_token=TOKEN, input_file=epub_file, max_polls=None)
        assert config.max_polls is None


class TestBookMetadata:
    """Test BookMetadata payload."""

    def test_absent_fields_are_empty_strings(self):
        payload = BookMetadata(title="Dune").as_payload()

        assert payload == {'title': 'Dune', 'author': '', 'isbn': '', 'publisher': ''}

    def test_all_fields(self):
        metadata = BookMetadata(title="T", author="A", isbn="978-3-16-148410-0", publisher="P")

        assert metadata.as_payload()['isbn'] == "978-3-16-148410-0"


class TestBookflowState:
    """Test terminal status sets."""

    def test_ingest_terminal(self):
        assert BookflowState.INGEST_TERMINAL == {'convert', 'processing_failed'}
        assert BookflowState.PROCESSING not in BookflowState.INGEST_TERMINAL

    def test_conversion_terminal(self):
        assert BookflowState.CONVERSION_TERMINAL == {'ok', 'failed'}
        assert BookflowState.PROCESSING not in BookflowState.CONVERSION_TERMINAL


class TestHttpResponse:
    """Test HttpResponse helpers."""

    @pytest.mark.parametrize("status,ok", [(200, True), (201, True), (204, True), (301, False), (401, False), (500, False)])
    def test_ok(self, status, ok):
        assert HttpResponse(status).ok is ok

    def test_json(self):
        assert HttpResponse(200, b'{"status": "ok"}').json() == {'status': 'ok'}

    def test_json_invalid(self):
        with pytest.raises(MalformedResponseError):
            HttpResponse(200, b'not json').json()

    def test_json_not_utf8(self):
        with pytest.raises(MalformedResponseError):
            HttpResponse(200, b'\xff\xfe').json()


def test_download_descriptor_status_url():
    assert DownloadDescriptor("https://h/api/dl/1").status_url == "https://h/api/dl/1/status"
    assert DownloadDescriptor("https://h/api/dl/1/").status_url == "https://h/api/dl/1/status"


def test_job_str():
    assert str(Job("b1", "f1")) == "Book id=b1, Bookflow id=f1"
