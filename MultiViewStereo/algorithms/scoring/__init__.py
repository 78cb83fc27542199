"""
Center view scoring.
"""

from .coverage import RectifiedViewCoverageScorer

__all__ = ['RectifiedViewCoverageScorer']
