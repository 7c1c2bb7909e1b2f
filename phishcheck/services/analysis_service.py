import time
import logging
from typing import Iterable, List, Optional, Tuple

from phishcheck.config import settings
from phishcheck.core.analyzer import PhishingAnalyzer
from phishcheck.core.risk_scorer import RiskScorer
from phishcheck.core.text_extractor import TextExtractor
from phishcheck.exceptions import NoInputError, SourceError
from phishcheck.schemas import AnalysisResult, DocumentAnalysis, SourceFailure, SourceText

logger = logging.getLogger(__name__)

# (filename, content, declared content type)
UploadedFile = Tuple[str, bytes, Optional[str]]


class AnalysisService:
    def __init__(self, analyzer: Optional[PhishingAnalyzer] = None,
                 text_extractor: Optional[TextExtractor] = None):
        self.analyzer = analyzer or PhishingAnalyzer(
            risk_scorer=RiskScorer(
                high_threshold=settings.HIGH_RISK_THRESHOLD,
                medium_threshold=settings.MEDIUM_RISK_THRESHOLD
            )
        )
        self.text_extractor = text_extractor or TextExtractor()

    def analyze_text(self, text: str) -> AnalysisResult:
        """Score already-extracted text"""
        start_time = time.time()
        result = self.analyzer.analyze(text)
        processing_time = time.time() - start_time
        logger.info(
            f"✓ Analysis complete in {processing_time:.3f}s - "
            f"Verdict: {result.verdict.label} ({result.score}/100)"
        )
        return result

    def analyze_documents(self, files: Iterable[UploadedFile],
                          pasted_text: Optional[str] = None,
                          read_failures: Iterable[SourceError] = ()) -> DocumentAnalysis:
        """
        Complete document analysis pipeline

        Every file is extracted on its own; a failing file is reported in
        `errors` and the remaining sources are still analyzed.
        `read_failures` are sources the caller could not even read; they are
        reported the same way.

        Raises:
            NoInputError: no source produced any text
        """
        parts: List[str] = []
        sources: List[SourceText] = []
        failures: List[SourceError] = list(read_failures)
        errors: List[SourceFailure] = [
            SourceFailure(name=e.source, error=e.error, detail=e.detail) for e in failures
        ]

        files = list(files)
        for index, (filename, content, content_type) in enumerate(files, start=1):
            logger.info(f"[{index}/{len(files)}] Extracting text from {filename}...")
            try:
                text = self.text_extractor.extract_text(filename, content, content_type)
            except SourceError as e:
                logger.warning(f"Skipping {filename}: {e.detail}")
                failures.append(e)
                errors.append(SourceFailure(name=filename, error=e.error, detail=e.detail))
                continue

            parts.append(f"\n\n[File: {filename}]\n{text}")
            sources.append(SourceText(name=filename, kind="file", characters=len(text)))

        manual = (pasted_text or "").strip()
        if manual:
            parts.append(f"\n\n[Pasted text]\n{manual}")
            sources.append(SourceText(name="pasted text", kind="pasted", characters=len(manual)))

        all_text = '\n'.join(parts).strip()
        if not all_text:
            if errors:
                raise NoInputError(
                    f"No usable input: {len(failures)} source(s) failed extraction",
                    failures=failures
                )
            raise NoInputError()

        return DocumentAnalysis(
            result=self.analyze_text(all_text),
            sources=sources,
            errors=errors
        )
