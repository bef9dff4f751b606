"""
Extraction Strategies.

Every way of reading an invoice is an ExtractionStrategy with a single
attempt(document) operation. The pipeline holds an ordered list of them
and tries each once.

Strategies:
    - DeterministicStrategy: normalizer, OCR, layout parser (offline)
    - AssistantStrategy: hosted assistant service (extraction.assistant)
    - VisionStrategy: vision chat completion (extraction.vision)

Author: ML Engineering Team
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from warranty_invoice.config import get_config
from warranty_invoice.input_handler.handler import RawDocument
from warranty_invoice.input_handler.image_processor import ImageNormalizer
from warranty_invoice.layout_parser.parser import LayoutParser
from warranty_invoice.ocr_engine.engine import OCREngine
from warranty_invoice.postprocessor.classifier import CostClassifier
from warranty_invoice.postprocessor.scoring import ConfidenceScorer
from warranty_invoice.utils.logger import get_logger
from .extraction_result import ExtractionSource, RawExtraction

# Initialize module logger
logger = get_logger(__name__)


class ExtractionStrategy(ABC):
    """
    One way of turning a document into a raw extraction.

    Attributes:
        name: Short name used in logs
        source: Provenance tag put on the result
        min_confidence: Lowest confidence the pipeline accepts from
                        this strategy without trying the next one
    """

    name: str = "strategy"
    source: ExtractionSource = ExtractionSource.DETERMINISTIC
    min_confidence: int = 0

    @abstractmethod
    def attempt(self, document: RawDocument) -> RawExtraction:
        """
        Extract a raw payload from the document.

        Raises:
            ExtractionFailed: If the strategy produced no usable totals.
                The pipeline falls through to the next strategy.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(min_confidence={self.min_confidence})"


class DeterministicStrategy(ExtractionStrategy):
    """
    Offline extraction for the known supplier layout.

    Normalize, OCR, parse, classify and score. DecodeError and
    OcrEngineError are not caught: a page that cannot be read is not
    something a later strategy is expected to fix.

    Example:
        >>> strategy = DeterministicStrategy()
        >>> raw = strategy.attempt(document)
        >>> raw.payload["totals"]["labour"], raw.confidence
        (1950.0, 88)
    """

    name = "deterministic"
    source = ExtractionSource.DETERMINISTIC

    def __init__(
        self,
        normalizer: Optional[ImageNormalizer] = None,
        ocr_engine: Optional[OCREngine] = None,
        layout_parser: Optional[LayoutParser] = None,
        classifier: Optional[CostClassifier] = None,
        scorer: Optional[ConfidenceScorer] = None,
        min_confidence: Optional[int] = None
    ) -> None:
        self.normalizer = normalizer or ImageNormalizer()
        self.ocr_engine = ocr_engine or OCREngine()
        self.layout_parser = layout_parser or LayoutParser()
        self.classifier = classifier or CostClassifier()
        self.scorer = scorer or ConfidenceScorer(classifier=self.classifier)
        self.min_confidence = min_confidence if min_confidence is not None else get_config(
            "pipeline.confidence_threshold", 60
        )

    def attempt(self, document: RawDocument) -> RawExtraction:
        image = self.normalizer.normalize(document)
        ocr_text = self.ocr_engine.recognize(image)
        parsed = self.layout_parser.parse(ocr_text)

        costs = self.classifier.classify(parsed.rows)
        confidence = self.scorer.score(parsed.header, parsed.rows, costs)

        payload: Dict[str, Any] = {
            key: value for key, value in parsed.header.to_dict().items() if value is not None
        }
        payload['totals'] = {
            'labour': costs.labor_cost,
            'travel': costs.travel_cost,
            'parts': costs.parts_cost,
            'grandTotal': parsed.header.declared_total,
        }
        payload['rows'] = [
            {
                'code': row.code,
                'description': row.description,
                'quantity': row.quantity,
                'unitPrice': row.unit_price,
                'lineTotal': row.line_total,
            }
            for row in parsed.rows
        ]

        logger.info(
            f"Deterministic parse of {document.display_name}: "
            f"{len(parsed.rows)} row(s), score {confidence}"
        )
        return RawExtraction(source=self.source, payload=payload, confidence=confidence)
