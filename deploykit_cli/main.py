import argparse
from pathlib import Path

from deploykit_cli import daemon
from deploykit_cli.__version__ import __version__
from deploykit_cli.daemon.exceptions import DeploykitError
from deploykit_cli.logging import LoggerFactory, setup_logging
from deploykit_cli.services.cancellation import CancellationController, CancellationToken
from deploykit_cli.services.session import InstallSession
from deploykit_cli.ui.progress import RichProgressReporter
from deploykit_cli.ui.prompts import InquirerPrompter

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deploykit-cli", description="Install AOSC OS through the Deploykit daemon"
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--offline", dest="offline", action="store_true", default=None,
        help="Install from the sysroots on the live media",
    )
    mode.add_argument(
        "--online", dest="offline", action="store_false",
        help="Download the system image from the release server",
    )
    parser.add_argument("--arch", default=None, help="Override the detected architecture")
    parser.add_argument(
        "--poll-interval", type=float, default=None,
        help="Seconds between progress polls",
    )
    parser.add_argument(
        "--reboot", action="store_true", help="Reboot once the installation finishes"
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Log every progress poll")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for log files")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug, trace=args.trace, log_dir=args.log_dir)
    log = LoggerFactory.for_system()
    log.debug(f"deploykit-cli {__version__}")

    try:
        client = daemon.connect()
    except DeploykitError as error:
        log.error(str(error))
        return EXIT_FAILURE

    token = CancellationToken()
    session = InstallSession(
        client,
        InquirerPrompter(),
        RichProgressReporter(),
        cancel_token=token,
        offline=args.offline,
        arch=args.arch,
        reboot=args.reboot,
        poll_interval=args.poll_interval,
    )

    with CancellationController(client, token):
        try:
            session.run()
        except DeploykitError as error:
            log.error(str(error))
            return EXIT_FAILURE
        except KeyboardInterrupt:
            log.warning("Aborted by user")
            return EXIT_INTERRUPTED

    log.success("Installation finished")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
