"""Main orchestrator for the Bookflow conversion workflow."""

import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional, Tuple

from epubdate.domain.models import (
    BookflowState, Configuration, ConversionResult, DownloadDescriptor, HttpResponse, Job
)
from epubdate.domain.protocols import ITransport, IPoller, ILogger, IMetricsCollector
from epubdate.domain.exceptions import MalformedResponseError, RemoteFailure, TransportError
from epubdate.infrastructure.storage import Workspace
from epubdate.shared.logging import LoggerAdapter, get_logger
from epubdate.shared.metrics import MetricsCollector

CONVERT_FORMAT = "epub3"
CONVERT_VERSION = "final"


class BookflowOrchestrator:
    """
    Drives one ebook through Bookalope, strictly in order:

    create -> upload -> wait-for-ingest -> convert -> wait-for-convert
    -> download -> cleanup

    Every step raises on failure and no step is entered twice. The remote
    Book is deleted only after a successful download; failed runs leave it
    on the server for inspection.
    """

    def __init__(
        self,
        config: Configuration,
        transport: ITransport,
        poller: IPoller,
        metrics: Optional[IMetricsCollector] = None,
        logger: Optional[ILogger] = None
    ):
        self._config = config
        self._transport = transport
        self._poller = poller
        self._metrics = metrics or MetricsCollector()
        self._logger = logger or LoggerAdapter(get_logger(__name__))

    def run(self, workspace: Workspace) -> ConversionResult:
        """
        Execute the whole workflow.

        Args:
            workspace: Open workspace for staged payloads and the download

        Returns:
            ConversionResult with the path of the converted ebook

        Raises:
            TransportError: A call failed; ``step`` names which one
            RemoteFailure: Bookalope reported failed ingestion or conversion
            PollTimeoutError: A status never became terminal
        """
        job = self.create_book()
        self.upload_document(job, workspace)
        self.wait_for_ingest(job)
        descriptor = self.convert(job)
        self.wait_for_conversion(descriptor)
        output_path = self.download(job, descriptor, workspace)
        deleted, continuation_url = self.cleanup_remote(job)

        self._logger.info("Done")
        return ConversionResult(
            output_path=output_path,
            job=job,
            download_url=descriptor.download_url,
            remote_deleted=deleted,
            continuation_url=continuation_url,
            metrics=self._metrics.get_summary()
        )

    def create_book(self) -> Job:
        """Create a new Book and use its initial Bookflow."""
        self._logger.info("Creating new Book...")
        payload = {'name': self._config.book_name, **self._config.metadata.as_payload()}

        with self._step('create'):
            response = self._transport.request('POST', '/api/books', json_body=payload)
            document = self._expect_json(response, "Book creation")
            job = Job(
                book_id=str(_field(document, 'book', 'id')),
                bookflow_id=str(_field(document, 'book', 'bookflows', 0, 'id')),
            )

        self._logger.info(f"Done, {job}")
        return job

    def upload_document(self, job: Job, workspace: Workspace) -> None:
        """
        Upload the ebook, which starts ingestion of its content and styling.

        skip_analysis tells Bookalope to carry through the ebook's visual
        styles instead of restructuring it semantically (WYSIWYG conversion).
        """
        source = self._config.input_file
        self._logger.info(f"Uploading and ingesting ebook file: {source.name}")

        with self._step('upload'):
            envelope = workspace.stage_upload_envelope(source, {
                'filetype': 'epub',
                'filename': source.name,
                'skip_analysis': True,
            })
            response = self._transport.request(
                'POST', f'/api/bookflows/{job.bookflow_id}/files/document', body_file=envelope
            )
            self._expect_ok(response, "Document upload")

    def wait_for_ingest(self, job: Job) -> None:
        """Wait until the Bookflow step changes from 'processing' to 'convert'."""
        with self._step('ingest'):
            status = self._poller.poll(
                lambda: self._bookflow_step(job), BookflowState.INGEST_TERMINAL
            )

        if status == BookflowState.PROCESSING_FAILED:
            raise RemoteFailure("Bookalope failed to ingest the ebook", step='ingest', status=status)
        self._logger.info("Waiting for Bookflow to finish, done!")

    def convert(self, job: Job) -> DownloadDescriptor:
        """Ask for an EPUB3 conversion of the ingested ebook."""
        self._logger.info("Converting to EPUB3 format and downloading ebook file...")

        with self._step('convert'):
            response = self._transport.request(
                'POST', f'/api/bookflows/{job.bookflow_id}/convert',
                json_body={'format': CONVERT_FORMAT, 'version': CONVERT_VERSION}
            )
            document = self._expect_json(response, "Conversion request")
            descriptor = DownloadDescriptor(download_url=str(_field(document, 'download_url')))

        self._logger.debug(f"Download URL: {descriptor.download_url}")
        return descriptor

    def wait_for_conversion(self, descriptor: DownloadDescriptor) -> None:
        """Wait until the download status is 'ok'."""
        with self._step('conversion'):
            status = self._poller.poll(
                lambda: self._download_status(descriptor), BookflowState.CONVERSION_TERMINAL
            )

        if status == BookflowState.FAILED:
            raise RemoteFailure("Bookalope failed to convert the ebook", step='conversion', status=status)
        self._logger.info("Waiting for Bookflow to finish, done!")

    def download(self, job: Job, descriptor: DownloadDescriptor, workspace: Workspace) -> Path:
        """Fetch the converted ebook and move it next to the input file."""
        staged = workspace.path / f"{job.bookflow_id}.epub"
        target = self.output_path_for(job)

        with self._step('download'):
            response = self._transport.download(descriptor.download_url, staged)
            self._expect_ok(response, "Download")
            shutil.move(str(staged), str(target))

        self._logger.info(f"Saved converted ebook to file {target}")
        return target

    def cleanup_remote(self, job: Job) -> Tuple[bool, Optional[str]]:
        """
        Delete the Book and its Bookflow, or keep them and report where.

        Returns:
            (deleted, continuation_url)
        """
        if self._config.keep_remote:
            url = self.continuation_url(job)
            self._logger.info(f"You can continue working with your Bookflow by clicking: {url}")
            return False, url

        self._logger.info("Deleting Book and Bookflow...")
        self._metrics.start_timer('cleanup')
        try:
            response = self._transport.request('DELETE', f'/api/books/{job.book_id}')
        except TransportError as e:
            self._logger.warning(f"Could not delete Book {job.book_id}: {e}")
            return False, None
        finally:
            self._metrics.stop_timer('cleanup')

        if not response.ok:
            self._logger.warning(f"Could not delete Book {job.book_id}: HTTP {response.status_code}")
            return False, None
        return True, None

    def output_path_for(self, job: Job) -> Path:
        """``{input-dir}/{input-stem}-{bookflow_id}.epub``"""
        source = self._config.input_file
        return source.with_name(f"{source.stem}-{job.bookflow_id}.epub")

    def continuation_url(self, job: Job) -> str:
        return f"{self._config.api_host.rstrip('/')}/bookflows/{job.bookflow_id}/convert"

    def _bookflow_step(self, job: Job) -> str:
        response = self._transport.request('GET', f'/api/bookflows/{job.bookflow_id}')
        document = self._expect_json(response, "Bookflow status")
        return str(_field(document, 'bookflow', 'step'))

    def _download_status(self, descriptor: DownloadDescriptor) -> str:
        response = self._transport.request('GET', descriptor.status_url)
        document = self._expect_json(response, "Conversion status")
        return str(_field(document, 'status'))

    @contextmanager
    def _step(self, name: str):
        """Time a step and tag transport errors raised inside it with its name."""
        self._metrics.start_timer(name)
        try:
            yield
        except TransportError as e:
            if e.step is None:
                e.step = name
            self._logger.debug(f"Step '{name}' failed: {e}")
            raise
        finally:
            self._metrics.stop_timer(name)

    def _expect_ok(self, response: HttpResponse, what: str) -> None:
        if not response.ok:
            detail = response.content[:200].decode('utf-8', errors='replace').strip()
            message = f"{what} returned HTTP {response.status_code}"
            raise TransportError(f"{message}: {detail}" if detail else message)

    def _expect_json(self, response: HttpResponse, what: str) -> Any:
        self._expect_ok(response, what)
        return response.json()


def _field(document: Any, *path) -> Any:
    """Walk nested dicts/lists, raising MalformedResponseError on any gap."""
    value = document
    for key in path:
        try:
            value = value[key]
        except (KeyError, IndexError, TypeError):
            dotted = '.'.join(str(k) for k in path)
            raise MalformedResponseError(f"Response has no '{dotted}'")
    if value is None:
        dotted = '.'.join(str(k) for k in path)
        raise MalformedResponseError(f"Response has empty '{dotted}'")
    return value
