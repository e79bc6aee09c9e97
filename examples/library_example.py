#!/usr/bin/env python3
"""Example of using the catalogs and prober as a library."""

import queue

import boto3

from aws_service_regions.core.config import Config
from aws_service_regions.core.logging import setup_logging
from aws_service_regions.data_sources.aws_ssm_client import AWSSSMClient
from aws_service_regions.processors import (AvailabilityProbeError,
                                            AvailabilityProber,
                                            ProcessingContext, RegionCatalog,
                                            ServiceCatalog)
from aws_service_regions.progress import (PROGRESS_DONE, QueueProgressSink,
                                          drain_progress)


def main():
    config = Config.from_env()
    setup_logging("INFO", config.log_format)

    # One client for every catalog and probe thread
    session = boto3.Session(profile_name=config.aws_profile, region_name=config.aws_region)
    ssm_client = AWSSSMClient(
        aws_session=session,
        region=config.aws_region,
        max_retries=config.max_retries,
        base_delay=config.retry_base_delay,
    )
    context = ProcessingContext(config=config, ssm_client=ssm_client, logger_name="example")

    regions = RegionCatalog(context).process()
    services = ServiceCatalog(context).process()
    print(f"{len(regions)} regions, {len(services)} services in {config.reference_region}")

    events = queue.Queue()
    consumer = drain_progress(events, lambda region: print(f"  probing {region}"))
    try:
        availability = AvailabilityProber(context).process(
            "lambda", regions, QueueProgressSink(events)
        )
    except AvailabilityProbeError as e:
        print(f"Probe incomplete: {e}")
        availability = e.partial
    finally:
        events.put(PROGRESS_DONE)
        consumer.join()

    for region, available in sorted(availability.items()):
        print(f"{region:20} {'yes' if available else 'no'}")


if __name__ == "__main__":
    main()
