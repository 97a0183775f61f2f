"""Per-resource log lines, the run summary block and JSON export."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import structlog
from pydantic import BaseModel, Field

from costopt.models.results import ExecutionResult, RunSummary

logger = structlog.get_logger(__name__)


class RunReport(BaseModel):
    """Everything one runbook invocation produced."""
    
    summary: RunSummary
    results: List[ExecutionResult] = Field(default_factory=list)
    
    def events(self) -> List[Dict[str, Any]]:
        return [result.to_event() for result in self.results]
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.model_dump(mode="json"),
            "results": [result.model_dump(mode="json") for result in self.results],
            "events": self.events(),
        }


class RunReporter:
    """Emits the structured records an automation job stream collects."""
    
    def __init__(self, runbook: str):
        self.logger = logger.bind(runbook=runbook)
    
    def resource_processed(self, result: ExecutionResult) -> None:
        fields = result.summary_fields()
        fields["savings"] = round(result.estimated_savings, 2)
        if result.success:
            self.logger.info(result.message, **fields)
        else:
            self.logger.error(result.message, **fields)
    
    def run_completed(self, summary: RunSummary) -> None:
        self.logger.info(
            "Run summary",
            dry_run=summary.dry_run,
            total_resources=summary.total_resources,
            actions=summary.action_counts,
            succeeded=summary.succeeded,
            failed=summary.failed,
            total_estimated_savings=summary.total_estimated_savings,
            applied_savings=summary.applied_savings,
            duration_seconds=round(summary.duration_seconds, 2),
        )
    
    def write_json(self, report: RunReport, output: Optional[Union[str, Path]]) -> Optional[Path]:
        if not output:
            return None
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(report.to_dict(), f, indent=2, default=str)
        self.logger.info("Results written", path=str(output_path))
        return output_path
