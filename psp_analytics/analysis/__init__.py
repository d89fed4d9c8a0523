"""
Analysis orchestration.
"""

from .pipeline import AnalysisPipeline

__all__ = ["AnalysisPipeline"]
