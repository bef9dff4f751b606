"""
Post-Processing Module for the Warranty Invoice Extraction Pipeline.

This module provides functionality for:
    - Norwegian date and amount normalization
    - Cost classification (labor / travel / parts)
    - Confidence scoring
    - Cross-validation of totals, dates and required fields
    - Canonical mapping of any strategy output

Author: ML Engineering Team
"""

from .normalizers import DateNormalizer, AmountNormalizer
from .classifier import CostClassifier
from .scoring import ConfidenceScorer
from .validators import CrossValidator, ValidationResult
from .processor import CanonicalMapper

__all__ = [
    'DateNormalizer',
    'AmountNormalizer',
    'CostClassifier',
    'ConfidenceScorer',
    'CrossValidator',
    'ValidationResult',
    'CanonicalMapper',
]
