"""Turn a repository's commit history into a per-line provenance model."""

from .analysis_io import load_analysis, save_analysis
from .git_utils import GitError
from .history import analyze_repository
from .models import AnalysisResult, CommitterRegistry, FileInfo, LineChange

__all__ = [
    "AnalysisResult",
    "CommitterRegistry",
    "FileInfo",
    "GitError",
    "LineChange",
    "analyze_repository",
    "load_analysis",
    "save_analysis",
]
