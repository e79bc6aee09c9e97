"""Command line interface: list regions and services, and probe service availability."""

import argparse
import queue
import sys
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .. import __version__
from ..core.config import Config
from ..core.error_handling import RemoteQueryError
from ..core.logging import get_logger, setup_logging
from ..data_sources.aws_ssm_client import AWSSSMClient
from ..data_sources.regional_table_client import RegionalTableClient
from ..outputs.report import OUTPUT_FORMATS, AvailabilityReport, OutputError
from ..processors.availability import AvailabilityProbeError, AvailabilityProber
from ..processors.base import ProcessingContext, ProcessingError
from ..processors.catalog import RegionCatalog, ServiceCatalog
from ..progress import PROGRESS_DONE, QueueProgressSink, drain_progress
from .prompter import Prompter, PromptAbortedError

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="aws-service-regions",
        description="Find the AWS regions in which a service is available, "
        "using the SSM global-infrastructure parameters",
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--profile', type=str,
                        help='AWS profile to use (default: AWS_PROFILE)')
    parser.add_argument('--region', type=str,
                        help='Region of the SSM endpoint to query (default: AWS_DEFAULT_REGION or us-east-1)')
    parser.add_argument('--log-level', type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Log level (default: LOG_LEVEL or WARNING)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Shortcut for --log-level INFO')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')

    subparsers.add_parser('regions', help='Print all regions (same as "list regions")')
    _add_services_arguments(
        subparsers.add_parser('services', help='Print all services (same as "list services")'))

    list_parser = subparsers.add_parser('list', help='List regions or services')
    list_subparsers = list_parser.add_subparsers(dest='list_command', metavar='KIND')
    list_subparsers.required = True
    list_subparsers.add_parser('regions', help='Print all regions')
    _add_services_arguments(list_subparsers.add_parser('services', help='Print all services'))

    availability_parser = subparsers.add_parser(
        'availability', help='Show in which regions a service is available')
    availability_parser.add_argument('service', nargs='?',
                                     help='Service code, e.g. lambda (prompted for when omitted)')
    availability_parser.add_argument('--reference-region', type=str,
                                     help='Region whose service list is offered in the prompt')
    availability_parser.add_argument('--concurrency', type=int,
                                     help='Maximum simultaneous region probes (default: 3)')
    availability_parser.add_argument('--keep-going', action='store_true',
                                     help='Probe every region even after a region fails')
    availability_parser.add_argument('--format', dest='output_format', default='text',
                                     choices=OUTPUT_FORMATS,
                                     help='Output format (default: text; xlsx needs --output-file)')
    availability_parser.add_argument('--output-file', type=str,
                                     help='Write the result to this file instead of stdout')
    availability_parser.add_argument('-q', '--quiet', action='store_true',
                                     help='Do not print progress')

    return parser


def _add_services_arguments(services_parser: argparse.ArgumentParser):
    services_parser.add_argument('--reference-region', type=str,
                                 help='Region whose service list is used (default: us-east-1)')
    services_parser.add_argument('--names', action='store_true',
                                 help='Print service names from the AWS regional services table instead')


def build_context(config: Config, ssm_client=None) -> ProcessingContext:
    """Create the processing context holding the shared SSM client."""
    if ssm_client is None:
        session = boto3.Session(
            profile_name=config.aws_profile, region_name=config.aws_region
        )
        ssm_client = AWSSSMClient(
            aws_session=session,
            region=config.aws_region,
            max_retries=config.max_retries,
            base_delay=config.retry_base_delay,
        )
    return ProcessingContext(config=config, ssm_client=ssm_client, logger_name="cli")


def run_regions(context: ProcessingContext, out) -> int:
    for region in RegionCatalog(context).process():
        print(region, file=out)
    return 0


def run_services(args, context: ProcessingContext, out) -> int:
    if args.names:
        client = RegionalTableClient(timeout=context.config.http_timeout)
        services = client.fetch_service_names()
    else:
        services = ServiceCatalog(context).process()

    for service in services:
        print(service, file=out)
    return 0


def run_availability(args, context: ProcessingContext, out, err, prompter: Optional[Prompter] = None) -> int:
    if args.output_format == 'xlsx' and not args.output_file:
        print("The xlsx format requires --output-file", file=err)
        return 2

    service = args.service
    if not service:
        services = ServiceCatalog(context).process()
        prompter = prompter or Prompter(output=err)
        service = services[prompter.select("Select service to query", services)]

    regions = RegionCatalog(context).process()

    events: queue.Queue = queue.Queue()
    if args.quiet:
        consumer = drain_progress(events, lambda region: None)
    else:
        consumer = drain_progress(
            events, lambda region: print(f"Probing {region}...", file=err, flush=True)
        )

    prober = AvailabilityProber(context)
    try:
        availability = prober.process(
            service, regions, QueueProgressSink(events), fail_fast=not args.keep_going
        )
    except AvailabilityProbeError as e:
        if e.partial:
            _emit_report(args, AvailabilityReport(service, e.partial, {"partial": True}), out)
        raise
    finally:
        events.put(PROGRESS_DONE)
        consumer.join()

    _emit_report(args, AvailabilityReport(service, availability), out)
    return 0


def _emit_report(args, report: AvailabilityReport, out):
    if args.output_file:
        report.write(args.output_format, args.output_file)
    else:
        print(report.render(args.output_format), file=out)


def main(argv: Optional[List[str]] = None, out=None, err=None) -> int:
    """Main execution function."""
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr

    argv = list(sys.argv[1:] if argv is None else argv)

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        # Bare invocation behaves like an interactive availability query
        args = parser.parse_args(argv + ['availability'])
    command = args.list_command if args.command == 'list' else args.command

    try:
        config = Config.from_args(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=err)
        return 2

    setup_logging(config.log_level, config.log_format)

    try:
        context = build_context(config)
        if command == 'regions':
            return run_regions(context, out)
        elif command == 'services':
            return run_services(args, context, out)
        return run_availability(args, context, out, err)

    except PromptAbortedError:
        print("Aborted. Exiting.", file=err)
        return 1
    except (RemoteQueryError, ProcessingError, OutputError, BotoCoreError) as e:
        logger.debug("Command failed", command=command, error_type=type(e).__name__)
        print(f"Error: {e}", file=err)
        return 1


if __name__ == "__main__":
    sys.exit(main())
