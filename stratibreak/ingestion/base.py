"""Base adapter interface for importing project snapshots."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from stratibreak.models.gap import Gap
from stratibreak.models.project import Project


@dataclass
class ImportResult:
    """Bundles the output from an adapter's parse method."""

    source: str
    projects: list[Project] = field(default_factory=list)
    gaps: list[Gap] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class BaseAdapter(ABC):
    """Abstract base class for all ingestion adapters."""

    source: str = "unknown"

    @abstractmethod
    def parse(self, file_path: Path, tenant_id: str) -> ImportResult:
        """Parse a file and return an ImportResult with typed models."""
        ...

    @abstractmethod
    def validate(self, data: ImportResult) -> list[str]:
        """Validate parsed data. Returns a list of validation error messages."""
        ...
