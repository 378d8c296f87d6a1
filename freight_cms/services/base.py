"""
Base service class for the reconciliation services.

Provides common functionality:
- Configuration loading
- Structured logging
- Reconciliation record tracking and export
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

import structlog
from pydantic import BaseModel

from freight_cms.core.config import ConfigManager, get_config


class ReconciliationRecord(BaseModel):
    """
    Structured trace of a computation performed by a service.

    Kept so that every balance, batch and margin shown to an operator can be
    traced back to its inputs.
    """

    timestamp: datetime
    service_name: str
    record_type: str
    input_data: dict[str, Any]
    output_data: dict[str, Any]
    execution_time_seconds: float


class BaseService(ABC):
    """
    Base class for the reconciliation services.

    Provides:
    - Configuration loading
    - Record logging
    - Record export
    """

    def __init__(
        self,
        service_name: str,
        config_manager: Optional[ConfigManager] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """
        Initialize the base service.

        Args:
            service_name: Name of the service (e.g., "balance", "batching")
            config_manager: Optional config manager (defaults to global instance)
            logger: Optional structured logger
        """
        self.service_name = service_name
        self.config_manager = config_manager or get_config()
        self.logger = logger or structlog.get_logger(service_name=service_name)

        self.record_history: list[ReconciliationRecord] = []

    def log_record(self, record: ReconciliationRecord) -> None:
        """
        Log a reconciliation record.

        Args:
            record: ReconciliationRecord instance with the computation details
        """
        self.record_history.append(record)
        self.logger.info(
            "reconciliation_record",
            record_type=record.record_type,
            execution_time=record.execution_time_seconds,
        )

    def _record(
        self,
        record_type: str,
        input_data: dict[str, Any],
        output_data: dict[str, Any],
        started_at: float,
        finished_at: float,
    ) -> None:
        self.log_record(
            ReconciliationRecord(
                timestamp=datetime.now(),
                service_name=self.service_name,
                record_type=record_type,
                input_data=input_data,
                output_data=output_data,
                execution_time_seconds=finished_at - started_at,
            )
        )

    def export_records(self, filepath: str) -> None:
        """
        Export record history to a JSON file.

        Args:
            filepath: Path to output JSON file
        """
        with open(filepath, "w") as f:
            records_dict = [r.model_dump(mode="json") for r in self.record_history]
            json.dump(records_dict, f, indent=2, default=str)

        self.logger.info("records_exported", filepath=filepath, count=len(self.record_history))

    @abstractmethod
    def execute(self, *args: Any, **kwargs: Any) -> Any:
        """
        Execute the service's primary computation.

        Returns:
            Service-specific output
        """
        pass

    def __repr__(self) -> str:
        """String representation of the service."""
        return f"{self.__class__.__name__}(service_name='{self.service_name}')"
