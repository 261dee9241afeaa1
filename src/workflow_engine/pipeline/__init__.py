"""Pipeline orchestration.

Pipelines compose tool commands into stages with mandatory or optional
failure policies and join every mandatory failure into one PipelineError.
"""

from workflow_engine.pipeline.errors import PipelineError, join_errors
from workflow_engine.pipeline.executor import (
    Pipeline,
    PipelineExecutor,
    PipelineResult,
    PipelineState,
    Stage,
    Step,
    StepPolicy,
    StepResult,
)
from workflow_engine.pipeline.debug import DebugPipeline
from workflow_engine.pipeline.image_scan import ImageScanPipeline
from workflow_engine.pipeline.smoke import (
    ContainerSmokeEnvironment,
    SmokeEnvironment,
    SmokeTestPipeline,
    format_report,
)

__all__ = [
    "ContainerSmokeEnvironment",
    "DebugPipeline",
    "ImageScanPipeline",
    "Pipeline",
    "PipelineError",
    "PipelineExecutor",
    "PipelineResult",
    "PipelineState",
    "SmokeEnvironment",
    "SmokeTestPipeline",
    "Stage",
    "Step",
    "StepPolicy",
    "StepResult",
    "format_report",
    "join_errors",
]
