import re
import logging
from typing import List, Optional
from urllib.parse import urlsplit

from phishcheck.schemas import ExtractedEntities, IDNInfo

logger = logging.getLogger(__name__)

ACE_PREFIX = 'xn--'


class EntityExtractor:
    """
    Entity extractor for free text

    Pulls the indicators the heuristic rules work on:
    - HTTP/HTTPS URLs
    - Email addresses
    - Hostnames derived from both, with IDN/punycode information
    """

    def __init__(self):
        # ===== REGEX PATTERNS =====

        # Scheme followed by anything up to whitespace or a closing parenthesis
        self.url_pattern = re.compile(r'https?://[^\s)]+', re.IGNORECASE)

        # Punctuation that usually closes the sentence around a URL
        self.url_trailing_pattern = re.compile(r'[)\].,]+$')

        self.email_pattern = re.compile(
            r'[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}',
            re.IGNORECASE
        )

        self.non_ascii_pattern = re.compile(r'[^\x00-\x7F]')

    def extract(self, text: str) -> ExtractedEntities:
        """
        Extract URLs, emails and domains from text

        Args:
            text: Input text, usually already lowercased by the caller

        Returns:
            ExtractedEntities with order-preserving, deduplicated lists
        """
        if not text:
            return ExtractedEntities()

        urls = self._clean_and_deduplicate_urls(self.url_pattern.findall(text))
        emails = self._deduplicate(self.email_pattern.findall(text))

        domains = []
        for url in urls:
            domain = self._extract_domain_from_url(url)
            if domain:
                domains.append(domain)
        for email in emails:
            domain = self._extract_domain_from_email(email)
            if domain:
                domains.append(domain)
        domains = self._deduplicate(domains)

        return ExtractedEntities(
            urls=urls,
            emails=emails,
            domains=domains,
            idn_info=[self.idn_info(domain) for domain in domains]
        )

    def idn_info(self, domain: str) -> IDNInfo:
        """Flag IDN/punycode domains and decode ACE labels"""
        is_idn = bool(self.non_ascii_pattern.search(domain)) or ACE_PREFIX in domain
        unicode_form = decode_idn(domain) if ACE_PREFIX in domain else domain
        return IDNInfo(domain=domain, is_idn=is_idn, unicode_form=unicode_form)

    def _clean_and_deduplicate_urls(self, urls: List[str]) -> List[str]:
        """
        Strip trailing punctuation, then deduplicate preserving order
        """
        cleaned = []
        for url in urls:
            url = self.url_trailing_pattern.sub('', url)
            if url:
                cleaned.append(url)
        return self._deduplicate(cleaned)

    def _extract_domain_from_url(self, url: str) -> Optional[str]:
        """
        Lowercased hostname of a URL, None when it cannot be parsed
        """
        try:
            hostname = urlsplit(url).hostname
        except ValueError as e:
            logger.debug(f"Skipping malformed URL {url}: {e}")
            return None
        return hostname.lower() if hostname else None

    def _extract_domain_from_email(self, email: str) -> Optional[str]:
        if '@' not in email:
            return None
        domain = email.split('@', 1)[1].lower()
        return domain or None

    def _deduplicate(self, items: List[str]) -> List[str]:
        """
        Deduplicate while preserving order
        """
        seen = set()
        result = []
        for item in items:
            if item not in seen:
                seen.add(item)
                result.append(item)
        return result


def decode_punycode(label: str) -> str:
    """Decode a single ACE label, returning it unchanged when it is not valid punycode."""
    if not label.startswith(ACE_PREFIX):
        return label
    try:
        return label.encode('ascii').decode('idna')
    except (UnicodeError, LookupError):
        pass
    # IDNA2003 rejects code points newer than Unicode 3.2; plain punycode does not
    try:
        return label[len(ACE_PREFIX):].encode('ascii').decode('punycode')
    except (UnicodeError, LookupError):
        return label


def decode_idn(domain: str) -> str:
    """Unicode form of a (possibly ACE-encoded) domain."""
    if not domain:
        return ""
    return '.'.join(decode_punycode(label) for label in domain.split('.'))


__all__ = [
    'EntityExtractor',
    'decode_punycode',
    'decode_idn',
]
