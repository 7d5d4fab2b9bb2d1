"""Core business logic."""

from .analysis import CaseAnalysisOrchestrator, transition_case
from .case_manager import CaseManager
from .seed import DEMO_CASE, seed_demo_case

__all__ = [
    "CaseAnalysisOrchestrator",
    "CaseManager",
    "DEMO_CASE",
    "seed_demo_case",
    "transition_case",
]
