"""
Single entry point of the scoring core.
"""
import logging
from typing import Optional

from phishcheck.core.entity_extractor import EntityExtractor
from phishcheck.core.risk_scorer import RiskScorer
from phishcheck.core.rules import RuleSet
from phishcheck.schemas import AnalysisResult

logger = logging.getLogger(__name__)


class PhishingAnalyzer:
    """
    Runs extraction, every heuristic rule and score normalization.

    Holds no per-call state, so one instance can serve any number of
    concurrent callers.
    """

    def __init__(self, rule_set: Optional[RuleSet] = None,
                 risk_scorer: Optional[RiskScorer] = None,
                 entity_extractor: Optional[EntityExtractor] = None):
        self.rule_set = rule_set or RuleSet()
        self.risk_scorer = risk_scorer or RiskScorer()
        self.entity_extractor = entity_extractor or EntityExtractor()

    def analyze(self, text: str) -> AnalysisResult:
        """
        Score a document for phishing intent

        Args:
            text: Plain text, already extracted from whatever file it came from

        Returns:
            AnalysisResult; never raises for string input
        """
        lower = (text or "").lower()
        entities = self.entity_extractor.extract(lower)

        total_weight = 0
        findings = []
        for result in self.rule_set.evaluate(lower, entities):
            total_weight += result.weight
            findings.extend(result.findings)

        score = self.risk_scorer.calculate_risk_score(total_weight)
        verdict = self.risk_scorer.determine_verdict(score)
        logger.debug(f"Raw weight {total_weight} -> score {score} ({verdict.label})")

        return AnalysisResult(
            score=score,
            verdict=verdict,
            urls=entities.urls,
            emails=entities.emails,
            domains=entities.domains,
            idn_info=entities.idn_info,
            findings=findings
        )


_default_analyzer = PhishingAnalyzer()


def analyze(text: str) -> AnalysisResult:
    """Analyze `text` with the default rule set and thresholds."""
    return _default_analyzer.analyze(text)


__all__ = [
    'PhishingAnalyzer',
    'analyze',
]
