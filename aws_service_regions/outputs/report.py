"""Rendering of availability results as text, JSON, CSV and Excel."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from ..core.logging import get_logger

OUTPUT_FORMATS = ("text", "json", "csv", "xlsx")


class OutputError(Exception):
    """Exception raised when a report cannot be written."""

    pass


class AvailabilityReport:
    """An availability result for one service, always presented sorted by region."""

    def __init__(self, service: str, availability: Mapping[str, bool],
                 metadata: Optional[Dict[str, Any]] = None):
        self.service = service
        self.availability = dict(sorted(availability.items()))
        self.metadata = metadata or {}
        self.logger = get_logger("outputs.report")

    @property
    def available_regions(self) -> List[str]:
        return [region for region, available in self.availability.items() if available]

    def get_statistics(self) -> Dict[str, int]:
        total = len(self.availability)
        available = len(self.available_regions)
        return {
            "total_regions": total,
            "available_regions": available,
            "unavailable_regions": total - available,
        }

    def render_text(self) -> str:
        """One ``<region> <true|false>`` line per region."""
        return "\n".join(
            f"{region} {str(available).lower()}"
            for region, available in self.availability.items()
        )

    def to_dict(self) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            **self.get_statistics(),
        }
        metadata.update(self.metadata)
        return {
            "service": self.service,
            "metadata": metadata,
            "availability": self.availability,
        }

    def render_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "Region Code": list(self.availability.keys()),
                "Service Code": self.service,
                "Available": list(self.availability.values()),
            },
            columns=["Region Code", "Service Code", "Available"],
        )

    def render_csv(self) -> str:
        return self.to_dataframe().to_csv(index=False)

    def render(self, output_format: str) -> str:
        """Render to a string in ``text``, ``json`` or ``csv`` format."""
        if output_format == "text":
            return self.render_text()
        elif output_format == "json":
            return self.render_json()
        elif output_format == "csv":
            return self.render_csv().rstrip("\n")

        raise OutputError(f"Format {output_format!r} cannot be rendered as text")

    def write(self, output_format: str, filepath: str) -> str:
        """Write the report to ``filepath``.

        Raises:
            OutputError: If the format is unknown or the file cannot be written
        """
        if output_format not in OUTPUT_FORMATS:
            raise OutputError(f"Unknown output format: {output_format}")

        path = Path(filepath)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if output_format == "xlsx":
                with pd.ExcelWriter(path, engine="openpyxl") as writer:
                    self.to_dataframe().to_excel(
                        writer, sheet_name="Availability", index=False
                    )
            elif output_format == "csv":
                self.to_dataframe().to_csv(path, index=False, encoding="utf-8")
            else:
                path.write_text(self.render(output_format) + "\n", encoding="utf-8")
        except OSError as e:
            raise OutputError(f"Failed to write {path}: {e}") from e

        self.logger.info(
            f"Wrote {output_format} report", path=str(path), **self.get_statistics()
        )
        return str(path)
