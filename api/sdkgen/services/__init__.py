"""
Business logic services.

Provides:
- Job orchestration and lifecycle state machine
- Viability analysis with LLM retry and heuristic fallback
- TypeScript SDK synthesis
- Progress event broadcasting
"""

from .job_manager import job_manager, JobManager, DocumentSubmission, RemoteSpecSubmission
from .analysis_engine import AnalysisEngine, parse_analysis_response
from .heuristics import fallback_analysis, score_text, score_spec
from .llm_service import build_analysis_client, OpenAIAnalysisClient, DisabledAnalysisClient
from .progress_broadcaster import progress_broadcaster, ProgressBroadcaster, Subscription
from .sdk_generator import synthesize_sdk, normalize_provider_name

__all__ = [
    "job_manager",
    "JobManager",
    "DocumentSubmission",
    "RemoteSpecSubmission",
    "AnalysisEngine",
    "parse_analysis_response",
    "fallback_analysis",
    "score_text",
    "score_spec",
    "build_analysis_client",
    "OpenAIAnalysisClient",
    "DisabledAnalysisClient",
    "progress_broadcaster",
    "ProgressBroadcaster",
    "Subscription",
    "synthesize_sdk",
    "normalize_provider_name",
]
