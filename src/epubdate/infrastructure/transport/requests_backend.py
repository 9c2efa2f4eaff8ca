"""HTTP transport backed by the requests library."""

import importlib.util
import json
from pathlib import Path
from typing import Optional, Dict, Any

import requests
from requests.exceptions import RequestException

from epubdate.domain.models import HttpResponse
from epubdate.infrastructure.transport.base import BaseTransport, DOWNLOAD_ACCEPT, JSON_ACCEPT


class RequestsTransport(BaseTransport):
    """
    Transport using a requests Session.

    Implements ITransport protocol.
    """

    name = "requests"

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 300.0,
        chunk_size: int = 8192,
        session: Optional[requests.Session] = None
    ):
        super().__init__(base_url, token, timeout)
        self.chunk_size = chunk_size

        self.session = session or requests.Session()
        self.session.auth = self.auth

    def close(self) -> None:
        self.session.close()

    @classmethod
    def is_available(cls) -> bool:
        return importlib.util.find_spec("requests") is not None

    def _send(
        self,
        method: str,
        url: str,
        json_body: Optional[Dict[str, Any]],
        body_file: Optional[Path],
        headers: Dict[str, str]
    ) -> HttpResponse:
        headers.setdefault('Accept', JSON_ACCEPT)
        try:
            if body_file is not None:
                headers.setdefault('Content-Type', 'application/json')
                with open(body_file, 'rb') as f:
                    response = self.session.request(
                        method, url, data=f, headers=headers, timeout=self.timeout
                    )
            elif json_body is not None:
                headers.setdefault('Content-Type', 'application/json')
                response = self.session.request(
                    method, url, data=json.dumps(json_body).encode('utf-8'),
                    headers=headers, timeout=self.timeout
                )
            else:
                response = self.session.request(method, url, headers=headers, timeout=self.timeout)
        except RequestException as e:
            raise self._fail(method, url, str(e)) from e

        return HttpResponse(status_code=response.status_code, content=response.content)

    def _download(self, url: str, destination: Path) -> HttpResponse:
        try:
            with self.session.get(
                url, stream=True, headers={'Accept': DOWNLOAD_ACCEPT}, timeout=self.timeout
            ) as response:
                if not 200 <= response.status_code < 300:
                    return HttpResponse(status_code=response.status_code, content=response.content)

                downloaded = 0
                with open(destination, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)
                            downloaded += len(chunk)
        except RequestException as e:
            raise self._fail('GET', url, str(e)) from e

        self._logger.debug(f"Downloaded {downloaded} bytes to {destination}")
        return HttpResponse(status_code=response.status_code)
