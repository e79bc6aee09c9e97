"""Configuration management for AWS service region lookups."""

from dataclasses import dataclass
from typing import Optional
import os

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Configuration settings for AWS service region lookups."""

    # AWS Settings
    aws_region: str = "us-east-1"
    aws_profile: Optional[str] = None

    # Catalog Settings
    # us-east-1 tends to carry the most services, and gets new ones first
    reference_region: str = "us-east-1"
    services_page_size: int = 10  # SSM maximum for GetParametersByPath

    # Performance Settings
    max_concurrency: int = 3
    max_retries: int = 3
    retry_base_delay: float = 1.0
    http_timeout: int = 30

    # Logging Settings
    log_level: str = "WARNING"
    log_format: str = "human"

    def __post_init__(self):
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if not 1 <= self.services_page_size <= 10:
            raise ValueError("services_page_size must be between 1 and 10")
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
        if self.log_format not in ("human", "json"):
            raise ValueError(f"Unknown log format: {self.log_format}")

    @classmethod
    def from_env(cls) -> 'Config':
        """Create config from environment variables."""
        return cls(
            aws_region=os.getenv('AWS_DEFAULT_REGION', 'us-east-1'),
            aws_profile=os.getenv('AWS_PROFILE'),
            reference_region=os.getenv('REFERENCE_REGION', 'us-east-1'),
            services_page_size=int(os.getenv('SERVICES_PAGE_SIZE', '10')),
            max_concurrency=int(os.getenv('MAX_CONCURRENCY', '3')),
            max_retries=int(os.getenv('MAX_RETRIES', '3')),
            retry_base_delay=float(os.getenv('RETRY_BASE_DELAY', '1.0')),
            http_timeout=int(os.getenv('HTTP_TIMEOUT', '30')),
            log_level=os.getenv('LOG_LEVEL', 'WARNING'),
            log_format=os.getenv('LOG_FORMAT', 'human').lower(),
        )

    @classmethod
    def from_args(cls, args) -> 'Config':
        """Create config from command line arguments."""
        config = cls.from_env()

        # Override with CLI arguments if provided
        if hasattr(args, 'profile') and args.profile:
            config.aws_profile = args.profile
        if hasattr(args, 'region') and args.region:
            config.aws_region = args.region
        if hasattr(args, 'reference_region') and args.reference_region:
            config.reference_region = args.reference_region
        if getattr(args, 'concurrency', None) is not None:
            if args.concurrency < 1:
                raise ValueError("concurrency must be at least 1")
            config.max_concurrency = args.concurrency
        if hasattr(args, 'log_level') and args.log_level:
            config.log_level = args.log_level
        if hasattr(args, 'verbose') and args.verbose:
            config.log_level = 'INFO'

        return config
