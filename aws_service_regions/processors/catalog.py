"""Region and service catalogs read from the SSM global-infrastructure namespace."""

from datetime import datetime
from typing import List

from ..core.error_handling import RemoteQueryError
from .base import BaseProcessor, ProcessingContext


class RegionCatalog(BaseProcessor):
    """Lists every region published under the global-infrastructure regions path."""

    def process(self) -> List[str]:
        """Return all region codes, sorted lexicographically.

        Raises:
            RemoteQueryError: If the parameter store cannot be queried
        """
        try:
            with self.logger.timer("region listing"):
                regions = self.ssm_client.fetch_data("regions")
        except RemoteQueryError:
            self._record_outcome(False)
            raise

        self._record_outcome(True)
        self.context.metadata["region_catalog"] = {
            "total_regions": len(regions),
            "listed_at": datetime.now().isoformat(),
        }
        return regions


class ServiceCatalog(BaseProcessor):
    """Lists services as published for a single reference region.

    Only the reference region is read rather than the union across all regions.
    A service that exists solely outside the reference region is therefore not
    listed.
    """

    def __init__(self, context: ProcessingContext):
        super().__init__(context)
        self.reference_region = context.config.reference_region
        self.page_size = context.config.services_page_size

    def process(self) -> List[str]:
        """Return the reference region's service codes, sorted lexicographically.

        Raises:
            RemoteQueryError: If the parameter store cannot be queried
        """
        try:
            with self.logger.timer(f"service listing for {self.reference_region}"):
                services = self.ssm_client.fetch_data(
                    "services", region=self.reference_region, max_results=self.page_size
                )
        except RemoteQueryError:
            self._record_outcome(False)
            raise

        self._record_outcome(True)
        self.context.metadata["service_catalog"] = {
            "reference_region": self.reference_region,
            "total_services": len(services),
            "listed_at": datetime.now().isoformat(),
        }
        return services
