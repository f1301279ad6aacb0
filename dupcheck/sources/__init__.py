"""Candidate sources: read-only access to the corpus a check compares against."""

from .base import (
    CandidateSource,
    GenerationSession,
    ScriptRecord,
    SessionFile,
    TestCaseRecord,
)
from .directory import DirectoryCandidateSource
from .memory import MemoryCandidateSource

__all__ = [
    "CandidateSource",
    "DirectoryCandidateSource",
    "GenerationSession",
    "MemoryCandidateSource",
    "ScriptRecord",
    "SessionFile",
    "TestCaseRecord",
]
