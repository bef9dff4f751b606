"""
Invoice Extraction Pipeline.

Orchestrates an ordered list of extraction strategies:

    Deterministic -> Assistant -> Vision

Each strategy is tried at most once, sequentially. The first result at
or above its strategy's minimum confidence is returned; otherwise the
best lower-confidence result is returned with a review warning.

Usage:
    from warranty_invoice.extraction.pipeline import InvoiceExtractionPipeline

    pipeline = InvoiceExtractionPipeline()
    result = pipeline.extract(document)
    print(result.to_json())

Author: ML Engineering Team
"""

from typing import List, Optional, Sequence

from warranty_invoice.config import get_config
from warranty_invoice.input_handler.handler import RawDocument
from warranty_invoice.input_handler.image_processor import ImageNormalizer
from warranty_invoice.postprocessor.processor import CanonicalMapper
from warranty_invoice.utils.exceptions import ExtractionFailed
from warranty_invoice.utils.logger import get_logger
from .assistant import AssistantStrategy
from .extraction_result import ExtractionResult
from .strategies import DeterministicStrategy, ExtractionStrategy
from .vision import VisionStrategy

# Initialize module logger
logger = get_logger(__name__)


def build_default_strategies(use_ai: bool = True) -> List[ExtractionStrategy]:
    """
    Build the strategy list from configuration.

    AI tiers are only included when an API key is configured; the
    assistant tier additionally needs an assistant id.

    Args:
        use_ai: Set False to keep the pipeline fully offline.
    """
    normalizer = ImageNormalizer()
    strategies: List[ExtractionStrategy] = []

    if get_config("pipeline.deterministic_enabled", True):
        strategies.append(DeterministicStrategy(normalizer=normalizer))

    api_key = get_config("ai.api_key", "")
    if use_ai and api_key:
        if get_config("ai.assistant.enabled", True) and get_config("ai.assistant.assistant_id", ""):
            strategies.append(AssistantStrategy(normalizer=normalizer))
        if get_config("ai.vision.enabled", True):
            strategies.append(VisionStrategy(normalizer=normalizer))
    elif use_ai:
        logger.debug("No API key configured, AI fallback disabled")

    return strategies


class InvoiceExtractionPipeline:
    """
    Fallback chain over extraction strategies.

    DecodeError and OcrEngineError from a strategy propagate to the
    caller unchanged; ExtractionFailed moves on to the next strategy.

    Attributes:
        strategies: Ordered strategies, highest priority first
        mapper: Canonical mapper applied to every raw extraction

    Example:
        >>> pipeline = InvoiceExtractionPipeline()
        >>> result = pipeline.extract(InputHandler().load("invoice.jpg"))
        >>> result.source
        <ExtractionSource.DETERMINISTIC: 'deterministic'>
    """

    LOW_CONFIDENCE_WARNING = "Confidence {confidence} below threshold {threshold}; review all fields"

    def __init__(
        self,
        strategies: Optional[Sequence[ExtractionStrategy]] = None,
        mapper: Optional[CanonicalMapper] = None,
        use_ai: bool = True
    ) -> None:
        self.strategies = list(strategies) if strategies is not None else build_default_strategies(use_ai)
        self.mapper = mapper or CanonicalMapper()

        if not self.strategies:
            raise ValueError("Extraction pipeline needs at least one strategy")

        logger.info(f"Pipeline strategies: {[s.name for s in self.strategies]}")

    def extract(self, document: RawDocument) -> ExtractionResult:
        """
        Extract one invoice.

        Args:
            document: Raw input document.

        Returns:
            ExtractionResult from the first acceptable strategy, or the
            best low-confidence result with a review warning.

        Raises:
            DecodeError: The document bytes are unreadable.
            OcrEngineError: The OCR engine failed.
            ExtractionFailed: No strategy produced totals.
        """
        logger.info(f"Extracting {document.display_name}")

        best: Optional[ExtractionResult] = None
        best_threshold = 0
        failures = []

        for strategy in self.strategies:
            try:
                raw = strategy.attempt(document)
                result = self.mapper.map(raw, source_file=document.filename)
            except ExtractionFailed as e:
                logger.warning(f"Strategy {strategy.name} failed, falling through: {e}")
                failures.append(f"{strategy.name}: {e.details.get('reason') or e.message}")
                continue

            if result.confidence >= strategy.min_confidence:
                logger.info(
                    f"Accepted {strategy.name} result with confidence {result.confidence} "
                    f"(minimum {strategy.min_confidence})"
                )
                return result

            logger.warning(
                f"Strategy {strategy.name} confidence {result.confidence} "
                f"below minimum {strategy.min_confidence}"
            )
            if best is None or result.confidence > best.confidence:
                best = result
                best_threshold = strategy.min_confidence

        if best is not None:
            return best.with_warning(self.LOW_CONFIDENCE_WARNING.format(
                confidence=best.confidence, threshold=best_threshold
            ))

        logger.error(f"No strategy produced totals for {document.display_name}")
        raise ExtractionFailed("pipeline", "; ".join(failures) or "no strategy produced totals")
