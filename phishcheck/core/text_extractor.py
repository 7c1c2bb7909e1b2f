import io
import re
import logging
from email import policy
from email.parser import BytesParser
from typing import Optional

import pdfplumber
import pytesseract
from bs4 import BeautifulSoup
from PIL import Image

from phishcheck.config import settings
from phishcheck.exceptions import ExtractionError, FileTooLarge, UnsupportedFormat

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = {'pdf'}
IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'webp'}
EMAIL_EXTENSIONS = {'eml'}
TEXT_EXTENSIONS = {'txt'}

# Headers the sender/reply-to rules look at, in output order
EMAIL_HEADERS = ('From', 'Reply-To', 'To', 'Subject')


class TextExtractor:
    """
    Turns an uploaded file into plain text for the analyzer

    Supported inputs:
    - PDF (pdfplumber)
    - Images (Pillow + tesseract OCR, bilingual pass with single-language fallback)
    - Raw email messages (.eml)
    - Plain text
    """

    def __init__(self, max_bytes: Optional[int] = None,
                 ocr_languages: Optional[str] = None,
                 ocr_fallback_language: Optional[str] = None,
                 ocr_config: Optional[str] = None):
        self.max_bytes = max_bytes if max_bytes is not None else settings.MAX_FILE_SIZE_MB * 1024 * 1024
        self.ocr_languages = ocr_languages or settings.OCR_LANGUAGES
        self.ocr_fallback_language = ocr_fallback_language or settings.OCR_FALLBACK_LANGUAGE
        self.ocr_config = ocr_config if ocr_config is not None else settings.OCR_CONFIG

    def extract_text(self, filename: str, content: bytes, content_type: Optional[str] = None) -> str:
        """
        Extract text from a file

        Args:
            filename: Original file name, used for extension sniffing and errors
            content: Raw file bytes
            content_type: Declared MIME type, if any

        Raises:
            FileTooLarge, UnsupportedFormat, ExtractionError
        """
        if len(content) > self.max_bytes:
            raise FileTooLarge(filename, len(content), self.max_bytes)

        kind = self.detect_kind(filename, content_type)
        logger.debug(f"Extracting {filename} as {kind}")

        if kind == 'pdf':
            return self._read_pdf_text(filename, content)
        if kind == 'image':
            return self._ocr_image(filename, content)
        if kind == 'email':
            return self._read_email_text(content)
        if kind == 'text':
            return self._decode_text(content)

        raise UnsupportedFormat(filename, content_type or self._extension(filename))

    def detect_kind(self, filename: str, content_type: Optional[str] = None) -> Optional[str]:
        """Classify by declared MIME type first, then by extension"""
        mime = (content_type or '').split(';')[0].strip().lower()
        ext = self._extension(filename)

        if mime == 'application/pdf' or ext in PDF_EXTENSIONS:
            return 'pdf'
        if mime.startswith('image/') or ext in IMAGE_EXTENSIONS:
            return 'image'
        if mime == 'message/rfc822' or ext in EMAIL_EXTENSIONS:
            return 'email'
        if mime.startswith('text/') or ext in TEXT_EXTENSIONS:
            return 'text'
        return None

    # ===== PDF =====

    def _read_pdf_text(self, filename: str, content: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                pages = [page.extract_text() or '' for page in pdf.pages]
        except Exception as e:
            logger.warning(f"PDF extraction failed for {filename}: {e}")
            raise ExtractionError(filename, f"Could not read PDF: {e}") from e
        return ''.join(f"{page}\n" for page in pages)

    # ===== IMAGES (OCR) =====

    def _ocr_image(self, filename: str, content: bytes) -> str:
        try:
            image = Image.open(io.BytesIO(content))
            image.load()
        except Exception as e:
            # Includes DecompressionBombError, which is not an OSError
            raise ExtractionError(filename, f"Could not open image: {e}") from e

        logger.info(f"OCR in progress: {filename}")
        try:
            return self._recognize(image, self.ocr_languages)
        except Exception as e:
            logger.warning(
                f"OCR with '{self.ocr_languages}' failed for {filename}, "
                f"retrying with '{self.ocr_fallback_language}': {e}"
            )

        try:
            return self._recognize(image, self.ocr_fallback_language)
        except Exception as e:
            raise ExtractionError(filename, f"OCR failed: {e}") from e

    def _recognize(self, image, lang: str) -> str:
        return pytesseract.image_to_string(image, lang=lang, config=self.ocr_config)

    # ===== EMAIL =====

    def _read_email_text(self, content: bytes) -> str:
        """
        Render an RFC 822 message as header lines plus text body, so the
        sender and reply-to heuristics still see `From:` / `Reply-To:`.
        """
        try:
            msg = BytesParser(policy=policy.default).parsebytes(content)
        except Exception as e:
            logger.error(f"Failed to parse email: {e}")
            return self._decode_text(content)

        lines = []
        for header in EMAIL_HEADERS:
            value = msg.get(header)
            if value:
                lines.append(f"{header}: {value}")

        body = self._get_email_body(msg)
        if not lines and not body.strip():
            return self._decode_text(content)

        return '\n'.join(lines) + '\n\n' + body

    def _get_email_body(self, msg) -> str:
        """
        Extract plain text and HTML body, skipping attachments
        """
        body_parts = []

        if msg.is_multipart():
            for part in msg.walk():
                content_type = part.get_content_type()
                content_disposition = part.get_content_disposition()

                # Skip attachments
                if content_disposition == 'attachment':
                    continue

                try:
                    if content_type == "text/plain":
                        body_parts.append(part.get_content())
                    elif content_type == "text/html":
                        body_parts.append(self._extract_text_from_html(part.get_content()))
                except Exception as e:
                    logger.warning(f"Error extracting body part: {e}")
        else:
            try:
                content = msg.get_content()
                if msg.get_content_type() == "text/html":
                    body_parts.append(self._extract_text_from_html(content))
                elif isinstance(content, str):
                    body_parts.append(content)
            except Exception as e:
                logger.warning(f"Error extracting non-multipart body: {e}")

        return '\n'.join(body_parts)

    def _extract_text_from_html(self, html: str) -> str:
        """
        Extract text from HTML content with URL preservation
        """
        try:
            soup = BeautifulSoup(html, 'lxml')

            # Surface href/src targets before flattening to text
            for tag in soup.find_all(['a', 'img']):
                if tag.name == 'a' and tag.get('href'):
                    tag.string = f" {tag.get_text(' ', strip=True)} {tag.get('href')} "
                elif tag.get('src'):
                    tag.string = f" {tag.get('src')} "

            text = soup.get_text(separator=' ')
            return re.sub(r'\s+', ' ', text).strip()
        except Exception as e:
            logger.warning(f"HTML parsing error: {e}")
            return re.sub(r'<[^>]+>', ' ', html)

    # ===== PLAIN TEXT =====

    def _decode_text(self, content: bytes) -> str:
        return content.decode('utf-8-sig', errors='replace')

    def _extension(self, filename: str) -> str:
        if not filename or '.' not in filename:
            return ''
        return filename.rsplit('.', 1)[-1].lower()

