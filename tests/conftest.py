import sys
import os
import io
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Any, NamedTuple

import pytest

# Ensure src/ is on sys.path so the package is importable without installing
SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from epubdate.domain.models import Configuration, BookMetadata, HttpResponse
from epubdate.shared.polling import StatusPoller

TOKEN = "0123456789abcdef0123456789ABCDEF"
API_HOST = "https://bookflow.example"
DOWNLOAD_URL = "https://bookflow.example/api/bookflows/bf-1/download/epub3"

# Not valid UTF-8 on purpose
EPUB_BYTES = b"PK\x03\x04mimetypeapplication/epub+zip\x00\xff\xfe\x80binary"
CONVERTED_BYTES = b"PK\x03\x04converted\x00\x9c\xff\x10\r\n\x1a"

ENV_VARS = (
    'BOOKALOPE_TOKEN', 'BOOKALOPE_HOST', 'BOOKALOPE_KEEP', 'EPUBDATE_TRANSPORT',
    'EPUBDATE_MAX_POLLS', 'EPUBDATE_POLL_TICKS', 'EPUBDATE_REQUEST_TIMEOUT',
)


class Call(NamedTuple):
    method: str
    url: str
    json_body: Optional[Dict[str, Any]]
    body: Optional[bytes]


class FakeTransport:
    """Scripted stand-in for a transport; records every call it gets."""

    name = "fake"

    def __init__(self):
        self.calls: List[Call] = []
        self._routes: Dict[Tuple[str, str], list] = {}
        self.download_response = HttpResponse(200)
        self.download_bytes = CONVERTED_BYTES
        self.closed = False

    def add(self, method: str, url: str, *responses):
        """Queue responses; the last one repeats. Exceptions are raised."""
        self._routes[(method, url)] = list(responses)
        return self

    def request(self, method, path_or_url, json_body=None, body_file=None, headers=None):
        body = Path(body_file).read_bytes() if body_file is not None else None
        self.calls.append(Call(method, path_or_url, json_body, body))
        queue = self._routes.get((method, path_or_url))
        if not queue:
            return HttpResponse(404, b'{"error": "not found"}')
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def download(self, url, destination):
        self.calls.append(Call('DOWNLOAD', url, None, None))
        if self.download_response.ok:
            Path(destination).write_bytes(self.download_bytes)
        return self.download_response

    def close(self):
        self.closed = True

    @classmethod
    def is_available(cls):
        return True

    def calls_to(self, method: str, url: Optional[str] = None) -> List[Call]:
        return [c for c in self.calls if c.method == method and (url is None or c.url == url)]


def json_response(document, status=200) -> HttpResponse:
    import json
    return HttpResponse(status, json.dumps(document).encode('utf-8'))


@pytest.fixture
def epub_file(tmp_path):
    path = tmp_path / "books" / "My Novel.epub"
    path.parent.mkdir()
    path.write_bytes(EPUB_BYTES)
    return path


@pytest.fixture
def config(epub_file):
    return Configuration(
        api_token=TOKEN,
        input_file=epub_file,
        api_host=API_HOST,
        metadata=BookMetadata(title="My Novel", author="A. Writer"),
    )


@pytest.fixture
def poller():
    return StatusPoller(interval_ticks=1, tick_seconds=0, sleep=lambda s: None, stream=io.StringIO())


@pytest.fixture
def bookalope():
    """A fake server that walks one ebook through a successful run."""
    transport = FakeTransport()
    transport.add('GET', '/api/profile', json_response({'user': {'id': 'u-1'}}))
    transport.add('POST', '/api/books', json_response(
        {'book': {'id': 'book-1', 'bookflows': [{'id': 'bf-1'}]}}, status=201))
    transport.add('POST', '/api/bookflows/bf-1/files/document', HttpResponse(200, b''))
    transport.add('GET', '/api/bookflows/bf-1',
                  json_response({'bookflow': {'step': 'processing'}}),
                  json_response({'bookflow': {'step': 'processing'}}),
                  json_response({'bookflow': {'step': 'convert'}}))
    transport.add('POST', '/api/bookflows/bf-1/convert', json_response({'download_url': DOWNLOAD_URL}))
    transport.add('GET', DOWNLOAD_URL + '/status',
                  json_response({'status': 'processing'}),
                  json_response({'status': 'ok'}))
    transport.add('DELETE', '/api/books/book-1', HttpResponse(204))
    return transport
