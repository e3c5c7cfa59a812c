from __future__ import annotations
import re
from sdkgen.documents.base import DocumentSignals, TextDocument
from sdkgen.documents import signals
from sdkgen.errors import MalformedInput
from sdkgen.obs.decorators import traced
from sdkgen.obs.logging_setup import get_logger
from sdkgen.utils.pdf_extractor import pdf_extractor

logger = get_logger(__name__)

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n]")
_PAGE_OF = re.compile(r"^\s*Page \d+ of \d+\s*$", re.MULTILINE)
_PAGE_NUMBER = re.compile(r"^\s*\d+\s*$", re.MULTILINE)
_SPACE_RUNS = re.compile(r"[ \t]{2,}")
_TRAILING_SPACE = re.compile(r"[ \t]+\n")
_BLANK_RUNS = re.compile(r"\n{3,}")


def clean_text(raw_text: str) -> str:
    """Strip control characters and pagination artifacts, collapse whitespace."""
    text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
    text = _NON_PRINTABLE.sub(" ", text)
    text = _PAGE_OF.sub("", text)
    text = _PAGE_NUMBER.sub("", text)
    text = _SPACE_RUNS.sub(" ", text)
    text = _TRAILING_SPACE.sub("\n", text)
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()


def analyze_structure(text: str) -> DocumentSignals:
    return DocumentSignals(
        has_endpoints=signals.any_match(signals.ENDPOINT_PATTERNS, text),
        has_authentication=signals.any_match(signals.AUTH_PATTERNS, text),
        has_examples=signals.any_match(signals.EXAMPLE_PATTERNS, text),
        has_schemas=signals.any_match(signals.SCHEMA_PATTERNS, text),
        sections=signals.extract_sections(text),
        provider_type=signals.detect_provider_type(text),
    )


@traced("normalize_text")
def normalize_text(data: bytes) -> TextDocument:
    """Validate, extract and annotate a PDF document."""
    extracted = pdf_extractor.extract_from_bytes(data)

    cleaned = clean_text(extracted.text)
    if not cleaned:
        raise MalformedInput(
            "PDF appears to be empty or contains no extractable text",
            code="EMPTY_PDF",
        )

    document = TextDocument(
        cleaned_text=cleaned,
        signals=analyze_structure(cleaned),
        raw_text=extracted.text,
        pages=extracted.pages,
        title=extracted.title,
    )

    logger.info("PDF normalized",
               pages=document.pages,
               characters=len(cleaned),
               provider_type=document.signals.provider_type.value,
               sections=len(document.signals.sections))
    return document
