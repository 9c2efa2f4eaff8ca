"""HTTP transport that shells out to the curl command line client."""

import json
import math
import shutil
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple

from epubdate.domain.models import HttpResponse
from epubdate.infrastructure.transport.base import BaseTransport, DOWNLOAD_ACCEPT, JSON_ACCEPT
from epubdate.utils.shell import run_cmd

# Appended by curl after the body, so the status is the last line of stdout.
WRITE_OUT = "\n%{http_code}"


class CurlTransport(BaseTransport):
    """
    Transport using the ``curl`` executable.

    Behaves like RequestsTransport: same basic auth, same status-code
    semantics, raw bytes in and out.

    Implements ITransport protocol.
    """

    name = "curl"

    def __init__(self, base_url: str, token: str, timeout: float = 300.0, executable: str = "curl"):
        super().__init__(base_url, token, timeout)
        self.executable = executable

    @classmethod
    def is_available(cls) -> bool:
        return shutil.which("curl") is not None

    def _base_cmd(self, method: str) -> List[str]:
        return [
            self.executable,
            "--silent", "--show-error",
            "--user", f"{self.token}:",
            "--request", method,
            *self._timeout_args(),
            "--write-out", WRITE_OUT,
        ]

    def _timeout_args(self) -> List[str]:
        """
        Same meaning as the requests timeout: a limit on connecting and on
        silence between reads, never on the whole transfer.

        curl only takes whole seconds for --speed-time, so it is rounded up.
        """
        return [
            "--connect-timeout", f"{self.timeout:g}",
            "--speed-limit", "1",
            "--speed-time", str(max(1, math.ceil(self.timeout))),
        ]

    def _send(
        self,
        method: str,
        url: str,
        json_body: Optional[Dict[str, Any]],
        body_file: Optional[Path],
        headers: Dict[str, str]
    ) -> HttpResponse:
        cmd = self._base_cmd(method)
        stdin = None

        headers.setdefault("Accept", JSON_ACCEPT)
        if json_body is not None or body_file is not None:
            headers.setdefault('Content-Type', 'application/json')
        for key, value in headers.items():
            cmd += ["--header", f"{key}: {value}"]

        if body_file is not None:
            cmd += ["--data-binary", f"@{body_file}"]
        elif json_body is not None:
            cmd += ["--data-binary", "@-"]
            stdin = json.dumps(json_body).encode('utf-8')

        cmd += ["--output", "-", url]

        rc, stdout, stderr = run_cmd(cmd, input=stdin)
        if rc != 0:
            raise self._fail(method, url, f"curl exited with {rc}: {stderr.strip()}")

        body, status = self._split_status(method, url, stdout)
        return HttpResponse(status_code=status, content=body)

    def _download(self, url: str, destination: Path) -> HttpResponse:
        cmd = self._base_cmd("GET") + [
            "--header", f"Accept: {DOWNLOAD_ACCEPT}",
            "--output", str(destination), url,
        ]

        rc, stdout, stderr = run_cmd(cmd)
        if rc != 0:
            destination.unlink(missing_ok=True)
            raise self._fail("GET", url, f"curl exited with {rc}: {stderr.strip()}")

        _, status = self._split_status("GET", url, stdout)
        if not 200 <= status < 300:
            # curl writes error bodies to the output file too
            content = destination.read_bytes() if destination.exists() else b""
            destination.unlink(missing_ok=True)
            return HttpResponse(status_code=status, content=content)

        self._logger.debug(f"Downloaded {destination.stat().st_size} bytes to {destination}")
        return HttpResponse(status_code=status)

    def _split_status(self, method: str, url: str, stdout: bytes) -> Tuple[bytes, int]:
        body, _, code = stdout.rpartition(b"\n")
        try:
            status = int(code.decode('ascii').strip())
        except (UnicodeDecodeError, ValueError):
            raise self._fail(method, url, f"could not read HTTP status from curl output: {code[-20:]!r}")
        if status == 0:
            raise self._fail(method, url, "no HTTP response received")
        return body, status
