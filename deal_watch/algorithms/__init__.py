"""
Algorithms Module
Core algorithms for deal scoring, trend detection and preference matching
"""

from .trend_classifier import classify_trend, TrendClassifier
from .deal_scorer import (
    calculate_deal_score,
    determine_recommendation,
    get_deal_quality,
    DealScoreBreakdown,
    DealScoringEngine
)
from .preference_matcher import (
    calculate_match_score,
    get_match_quality,
    MatchScoreBreakdown,
    PreferenceMatcher
)
from .urgency import classify_urgency, UrgencyClassifier

__all__ = [
    "classify_trend",
    "TrendClassifier",
    "calculate_deal_score",
    "determine_recommendation",
    "get_deal_quality",
    "DealScoreBreakdown",
    "DealScoringEngine",
    "calculate_match_score",
    "get_match_quality",
    "MatchScoreBreakdown",
    "PreferenceMatcher",
    "classify_urgency",
    "UrgencyClassifier"
]
