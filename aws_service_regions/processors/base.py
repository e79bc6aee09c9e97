"""Base processor interfaces and shared processing context."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.config import Config
from ..core.logging import get_logger


@dataclass
class ProcessingContext:
    """Shared context for all processors.

    The SSM client is built once by the caller and shared by every processor
    (and every probe thread) using this context.
    """

    config: Config
    ssm_client: Any = None
    logger_name: str = "processor"
    start_time: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.start_time is None:
            self.start_time = datetime.now()


class ProcessingError(Exception):
    """Exception raised during processing operations."""

    pass


class ProcessingValidationError(ProcessingError):
    """Exception raised when input data validation fails."""

    pass


class BaseProcessor(ABC):
    """Abstract base class for all processors.

    Provides common functionality for:
    - Logging with context
    - Access to the shared SSM client
    - Operation statistics
    """

    def __init__(self, context: ProcessingContext):
        """Initialize processor with context.

        Args:
            context: Processing context with config and SSM client

        Raises:
            ProcessingError: If the context carries no SSM client
        """
        if context.ssm_client is None:
            raise ProcessingError("SSM client not found in processing context")

        self.context = context
        self.ssm_client = context.ssm_client
        self.logger = get_logger(
            f"{context.logger_name}.{self.__class__.__name__.lower()}"
        )
        self._processing_stats = {
            "total_operations": 0,
            "successful_operations": 0,
            "failed_operations": 0,
        }

    @abstractmethod
    def process(self, *args, **kwargs) -> Any:
        """Run the processor and return its result.

        Raises:
            ProcessingError: If processing fails
            ProcessingValidationError: If input validation fails
        """
        pass

    def validate_input(self, input_data: Any) -> bool:
        """Validate input data before processing.

        Processors that take input override this.
        """
        return True

    def _record_outcome(self, success: bool):
        self._processing_stats["total_operations"] += 1
        key = "successful_operations" if success else "failed_operations"
        self._processing_stats[key] += 1

    def get_processing_stats(self) -> Dict[str, Any]:
        """Get processor statistics."""
        return dict(self._processing_stats)
