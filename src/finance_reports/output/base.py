"""Abstract document renderer interface."""

from abc import ABC, abstractmethod
from typing import Union

from finance_reports.models.export import ExportArtifact, ExportConfig
from finance_reports.models.report import ReportAggregate, TransactionListing

RenderInput = Union[ReportAggregate, TransactionListing]


class BaseRenderer(ABC):
    """Turns an aggregate or a transaction listing into a document.

    Implementations must honor config.include_charts and
    config.include_summary, report the real page count and byte size of
    the finished file, and raise RenderError without leaving a partial
    file behind when anything goes wrong.
    """

    @abstractmethod
    def render(self, data: RenderInput, config: ExportConfig) -> ExportArtifact:
        """Render data according to config.

        Args:
            data: Report aggregate or transaction listing.
            config: Validated export configuration.

        Returns:
            Artifact describing the written file.

        Raises:
            RenderError: If the document could not be produced.
        """
        pass
