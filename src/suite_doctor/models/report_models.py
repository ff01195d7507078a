"""Run-level models shared by every pipeline stage."""

from enum import Enum

from suite_doctor.models.base import ReportModel


class PipelineStage(str, Enum):
    DISCOVERY = "discovery"
    REFACTORING = "refactoring"
    APPLY = "apply"
    MAINTAINABILITY = "maintainability"
    QUALITY = "quality"
    DOCUMENTATION = "documentation"
    REPORTS = "reports"


class FileFailure(ReportModel):
    file_path: str
    stage: PipelineStage
    error: str
