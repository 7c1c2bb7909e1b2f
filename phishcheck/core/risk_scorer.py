import math

from phishcheck.schemas import Verdict

# A clean document never scores exactly 0
BASE_SCORE = 10
WEIGHT_MULTIPLIER = 4
MIN_SCORE = 0
MAX_SCORE = 100


class RiskScorer:
    def __init__(self, high_threshold: int = 70, medium_threshold: int = 40):
        """
        Map accumulated rule weight onto a bounded 0-100 score and a verdict
        """
        if medium_threshold > high_threshold:
            raise ValueError("medium_threshold must not exceed high_threshold")

        # Verdict thresholds
        self.thresholds = {
            'high': high_threshold,
            'medium': medium_threshold
        }

    def calculate_risk_score(self, total_weight: int) -> int:
        """Normalize raw weight, clamped to [0, 100]"""
        raw = BASE_SCORE + total_weight * WEIGHT_MULTIPLIER
        # Round half up rather than to even
        rounded = int(math.floor(raw + 0.5))
        return max(MIN_SCORE, min(MAX_SCORE, rounded))

    def determine_verdict(self, risk_score: int) -> Verdict:
        if risk_score >= self.thresholds['high']:
            return Verdict(label="High", tier="bad")
        elif risk_score >= self.thresholds['medium']:
            return Verdict(label="Medium", tier="warn")
        else:
            return Verdict(label="Low", tier="ok")
