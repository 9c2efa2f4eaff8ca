"""CLI interface for upgrading EPUB files through Bookalope."""
import sys
import signal
import logging
import argparse
from pathlib import Path
from typing import Optional, List

from epubdate import __version__
from epubdate.domain.models import BETA_HOST, TRANSPORT_CHOICES
from epubdate.domain.exceptions import EpubdateError, RemoteFailure
from epubdate.infrastructure.config import ConfigLoader
from epubdate.infrastructure.storage import Workspace
from epubdate.application.orchestrator import BookflowOrchestrator
from epubdate.application.factories import TransportFactory
from epubdate.application.credentials import require_valid_credentials
from epubdate.shared.logging import setup_logger, LoggerAdapter, get_logger
from epubdate.shared.metrics import MetricsCollector
from epubdate.shared.polling import StatusPoller


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="epubdate",
        description="Upgrade and/or fix an EPUB file using the Bookalope cloud service.",
        epilog="Note that the metadata of the original EPUB file overrides the command line options.",
    )
    parser.add_argument('epub', type=Path, help='EPUB file to upgrade')
    parser.add_argument('-b', '--beta', action='store_true', help="Use Bookalope's Beta server instead of its production server.")
    parser.add_argument('--host', help='Use this Bookalope server URL.')
    parser.add_argument('-o', '--token', help='Use this authentication token.')
    parser.add_argument('-k', '--keep', action='store_true', default=None, help='Keep the Bookflow on the server, do not delete.')
    parser.add_argument('-t', '--title', help="Set the ebook's metadata: title.")
    parser.add_argument('-a', '--author', help="Set the ebook's metadata: author.")
    parser.add_argument('-i', '--isbn', help="Set the ebook's metadata: ISBN number.")
    parser.add_argument('-p', '--publisher', help="Set the ebook's metadata: publisher.")
    parser.add_argument('--config', type=Path, help='Config YAML file')
    parser.add_argument('--transport', choices=TRANSPORT_CHOICES, help='HTTP backend (default: auto)')
    parser.add_argument('--max-polls', type=int, help='Give up waiting after this many status checks (0: never)')
    parser.add_argument('--log-file', type=Path, help='Also write the log to this file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def _overrides_from_args(args) -> dict:
    host = args.host
    if args.beta and not host:
        host = BETA_HOST
    return {
        'input_file': args.epub,
        'api_token': args.token,
        'api_host': host,
        'keep_remote': args.keep,
        'title': args.title,
        'author': args.author,
        'isbn': args.isbn,
        'publisher': args.publisher,
        'transport': args.transport,
        'max_polls': args.max_polls,
    }


def _interrupt(signum, frame):
    raise KeyboardInterrupt(f"signal {signum}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on bad options; this tool reports every failure as 1
        return 0 if e.code == 0 else 1

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logger(level=log_level, log_file=args.log_file)
    logger = get_logger(__name__)

    signal.signal(signal.SIGTERM, _interrupt)

    transport = None
    try:
        config = ConfigLoader(config_path=args.config).load(overrides=_overrides_from_args(args))

        logger.info(f"Talking to Bookalope server {config.api_host}")

        transport = TransportFactory.from_config(config)
        logger.debug(f"Transport: {transport.name}")
        require_valid_credentials(transport)

        metrics = MetricsCollector()
        poller = StatusPoller(
            interval_ticks=config.poll_ticks,
            tick_seconds=config.tick_seconds,
            max_polls=config.max_polls,
            metrics=metrics
        )
        orchestrator = BookflowOrchestrator(
            config=config,
            transport=transport,
            poller=poller,
            metrics=metrics,
            logger=LoggerAdapter(get_logger('orchestrator'))
        )

        with Workspace() as workspace:
            result = orchestrator.run(workspace)

        logger.debug(f"Metrics: {result.metrics}")
        return 0

    except RemoteFailure as e:
        logger.error(f"{e}, exiting")
        return 1
    except EpubdateError as e:
        logger.error(f"Pipeline error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    except Exception as e:
        logger.exception(f"Error: {e}")
        return 1
    finally:
        if transport is not None:
            transport.close()


if __name__ == '__main__':
    sys.exit(main())
