"""
Urgency Classifier
Derives dispatch priority from the booking recommendation and match score

| Condition                              | Urgency   |
|----------------------------------------|-----------|
| BOOK_NOW and match score > 80          | immediate |
| BOOK_NOW and match score > 70          | soon      |
| otherwise                              | monitor   |

immediate and soon are sent to the email collaborator right away;
monitor is queued for the periodic digest.
"""

from ..schemas.deal_schemas import Recommendation, Urgency


def classify_urgency(recommendation: Recommendation, match_score: int) -> Urgency:
    """
    Classify dispatch urgency

    Example:
        >>> classify_urgency(Recommendation.BOOK_NOW, 85)
        <Urgency.IMMEDIATE: 'immediate'>
        >>> classify_urgency(Recommendation.MONITOR, 95)
        <Urgency.MONITOR: 'monitor'>
    """
    if recommendation == Recommendation.BOOK_NOW and match_score > 80:
        return Urgency.IMMEDIATE
    if recommendation == Recommendation.BOOK_NOW and match_score > 70:
        return Urgency.SOON
    return Urgency.MONITOR


class UrgencyClassifier:
    def classify(self, recommendation: Recommendation, match_score: int) -> Urgency:
        return classify_urgency(recommendation, match_score)
