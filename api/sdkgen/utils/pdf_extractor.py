from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import fitz  # PyMuPDF
from sdkgen.errors import MalformedInput
from sdkgen.obs.logging_setup import get_logger
from sdkgen.obs.decorators import traced

logger = get_logger(__name__)

PDF_SIGNATURE = b"%PDF"

@dataclass(frozen=True)
class ExtractedPdf:
    text: str
    pages: int
    title: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None

class PDFExtractor:
    """PDF text extraction with error handling."""

    def has_pdf_signature(self, pdf_bytes: bytes) -> bool:
        return pdf_bytes[:4] == PDF_SIGNATURE

    @traced("pdf_extract_from_bytes")
    def extract_from_bytes(self, pdf_bytes: bytes) -> ExtractedPdf:
        """Extract text and metadata from PDF bytes."""
        if not self.has_pdf_signature(pdf_bytes):
            raise MalformedInput("Invalid PDF file format - not a valid PDF document", code="INVALID_PDF")

        try:
            doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        except Exception as e:
            logger.error(f"PDF open failed: {e}")
            raise MalformedInput(f"Failed to process PDF file: {e}", code="PDF_PROCESSING_ERROR") from e

        with doc:
            page_texts = []
            for page_num in range(doc.page_count):
                try:
                    page_texts.append(doc.load_page(page_num).get_text())
                except Exception as e:
                    logger.warning(f"Failed to extract page {page_num + 1}: {e}")
                    continue

            metadata = doc.metadata or {}
            extracted = ExtractedPdf(
                text="\n".join(page_texts),
                pages=doc.page_count,
                title=metadata.get("title") or None,
                creator=metadata.get("creator") or None,
                producer=metadata.get("producer") or None,
            )

        logger.info("PDF extracted",
                   pages=extracted.pages,
                   text_length=len(extracted.text))
        return extracted

# Global PDF extractor instance
pdf_extractor = PDFExtractor()
