"""Sequential batch processing with a persisted processed index."""

from .batch_orchestrator import BatchOrchestrator
from .corrections import Correction, CorrectionReason, CorrectionStore
from .models import BatchItem, BatchReport, BatchRun, Outcome, OutcomeStatus, RunState
from .pipeline_config import PipelineConfig
from .processed_store import ProcessedStore
from .progress import ProgressThrottle

__all__ = [
    'BatchOrchestrator',
    'Correction',
    'CorrectionReason',
    'CorrectionStore',
    'BatchItem',
    'BatchReport',
    'BatchRun',
    'Outcome',
    'OutcomeStatus',
    'RunState',
    'PipelineConfig',
    'ProcessedStore',
    'ProgressThrottle',
]
