"""
Heuristic rules for phishing / social-engineering detection.

Every rule is a pure function ``(text, entities, lexicon) -> RuleResult``.
Rules never see each other's output; `RULES` fixes the order in which they
run, and that order is the order of the findings in the final result.

`text` is the lowercased document and `entities` were extracted from it.
"""
import re
import logging
from functools import lru_cache
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlsplit

from phishcheck.core.similarity import similar
from phishcheck.core.wordlists import DEFAULT_LEXICON, Lexicon
from phishcheck.schemas import ExtractedEntities, Finding, RuleResult

logger = logging.getLogger(__name__)

Rule = Callable[[str, ExtractedEntities, Lexicon], RuleResult]

# ===== WEIGHTS =====
URGENCY_WEIGHT_PER_HIT = 2
URGENCY_MAX_WEIGHT = 10
SHORTENER_WEIGHT = 8
SUSPICIOUS_TLD_WEIGHT = 8
MULTI_HYPHEN_WEIGHT = 4
DEEP_SUBDOMAIN_WEIGHT = 3
IDN_WEIGHT = 8
BRAND_SIMILARITY_WEIGHT = 6
SENSITIVE_DATA_WEIGHT = 6
SENDER_MISMATCH_WEIGHT = 3
REPLY_TO_MISMATCH_WEIGHT = 5
NOISE_WEIGHT = 2

MIN_HYPHENS = 2
MIN_DEEP_LABELS = 4
NOISE_RATIO_THRESHOLD = 0.6
MAX_LISTED_TERMS = 10

# ===== HEADER PATTERNS =====
# Single-line, RFC-loose header forms only
FROM_PATTERN = re.compile(r'from:\s*(.*?)(?:\n|\r|$)', re.IGNORECASE)
REPLY_TO_PATTERN = re.compile(r'reply-to:\s*(.*?)(?:\n|\r|$)', re.IGNORECASE)
ADDRESS_PATTERN = re.compile(r'[A-Za-z0-9_.+-]+@[A-Za-z0-9_.-]+')
DISPLAY_NAME_STRIP_PATTERN = re.compile(r'[<>"\']')

# ===== TEXT NOISE =====
LETTER_PATTERN = re.compile(r'[a-záéíóúñ]', re.IGNORECASE)
NON_LETTER_PATTERN = re.compile(r'[^\sa-záéíóúñ]', re.IGNORECASE)

TLD_PATTERN = re.compile(r'(\.[a-z0-9-]+)$')


def _finding(level: str, message: str, rule: str) -> Finding:
    return Finding(level=level, message=message, rule=rule)


@lru_cache(maxsize=None)
def _term_pattern(term: str) -> re.Pattern:
    """Whole word or phrase; 'confirm' must not hit 'confirmada'."""
    return re.compile(rf'(?<!\w){re.escape(term)}(?!\w)', re.IGNORECASE)


def _term_present(text: str, term: str) -> bool:
    return _term_pattern(term).search(text) is not None


def _first_address(header_value: Optional[str]) -> Optional[str]:
    if not header_value:
        return None
    match = ADDRESS_PATTERN.search(header_value)
    return match.group(0) if match else None


def _address_domain(address: str) -> str:
    return address.split('@', 1)[1].lower()


def _unique(words: List[str]) -> List[str]:
    """Deduplicate while preserving order"""
    seen = set()
    result = []
    for word in words:
        if word not in seen:
            seen.add(word)
            result.append(word)
    return result


def _header_value(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1) if match else None


# ============================================================================
# RULES
# ============================================================================

def check_urgency_language(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    """
    Urgency / manipulation vocabulary, 2 points per hit up to 10.
    A term listed in both languages is two hits; the message lists it once.
    """
    hits = [term for term in lexicon.urgency_terms if _term_present(text, term)]
    if not hits:
        return RuleResult()

    distinct = _unique(hits)
    listed = ', '.join(distinct[:MAX_LISTED_TERMS])
    if len(distinct) > MAX_LISTED_TERMS:
        listed += '…'
    return RuleResult(
        weight=min(len(hits) * URGENCY_WEIGHT_PER_HIT, URGENCY_MAX_WEIGHT),
        findings=[_finding('warn', f"Urgency/manipulation language detected: {listed}", 'urgency')]
    )


def check_missing_urls(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    """Informational only: phishing sometimes hides links inside images"""
    if entities.urls:
        return RuleResult()
    return RuleResult(findings=[
        _finding('warn', "No explicit URLs detected. Phishing sometimes hides links inside images.", 'no_urls')
    ])


def _is_shortened(url: str, shorteners: Tuple[str, ...]) -> bool:
    """
    Host is the shortener, a subdomain of it, or starts with it
    (bit.ly.evil.com). A shortener elsewhere in the URL does not count.
    """
    try:
        host = (urlsplit(url).hostname or '').lower()
    except ValueError:
        return False
    return any(
        host == s or host.endswith('.' + s) or host.startswith(s + '.')
        for s in shorteners
    )


def check_url_shorteners(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    short_hits = [url for url in entities.urls if _is_shortened(url, lexicon.shorteners)]
    if not short_hits:
        return RuleResult()
    return RuleResult(
        weight=SHORTENER_WEIGHT,
        findings=[_finding('bad', f"URL shortener in use: {' , '.join(short_hits)}", 'shortener')]
    )


def check_domain_structure(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    """
    Per-domain checks: suspicious TLD, multiple hyphens, deep subdomains.
    A domain can trigger all three.
    """
    weight = 0
    findings: List[Finding] = []

    for domain in entities.domains:
        match = TLD_PATTERN.search(domain)
        tld = match.group(1) if match else ''
        if tld in lexicon.suspicious_tlds:
            weight += SUSPICIOUS_TLD_WEIGHT
            findings.append(_finding('bad', f"Untrusted TLD: {domain}", 'suspicious_tld'))

        if domain.count('-') >= MIN_HYPHENS:
            weight += MULTI_HYPHEN_WEIGHT
            findings.append(_finding('warn', f"Domain with multiple hyphens: {domain}", 'multi_hyphen'))

        if len(domain.split('.')) >= MIN_DEEP_LABELS:
            weight += DEEP_SUBDOMAIN_WEIGHT
            findings.append(_finding(
                'warn', f"Deep subdomain that may be trying to impersonate: {domain}", 'deep_subdomain'
            ))

    return RuleResult(weight=weight, findings=findings)


def check_idn_domains(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    idn_hits = [info for info in entities.idn_info if info.is_idn]
    if not idn_hits:
        return RuleResult()

    described = []
    for info in idn_hits:
        if info.unicode_form and info.unicode_form != info.domain:
            described.append(f"{info.domain} → {info.unicode_form}")
        else:
            described.append(info.domain)
    return RuleResult(
        weight=IDN_WEIGHT,
        findings=[_finding(
            'bad', f"IDN/punycode domains (possible homograph): {' , '.join(described)}", 'idn'
        )]
    )


def _is_official_brand_domain(domain: str, brand: str) -> bool:
    official = f"{brand}.com"
    return (
        domain == official
        or domain.endswith('.' + official)
        or domain.endswith('.' + brand)
    )


def check_brand_similarity(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    """One finding per (domain, brand) pair that looks alike"""
    weight = 0
    findings: List[Finding] = []

    for domain in entities.domains:
        for brand in lexicon.brands:
            if similar(domain, brand) and not _is_official_brand_domain(domain, brand):
                weight += BRAND_SIMILARITY_WEIGHT
                findings.append(_finding(
                    'bad', f"Domain resembles a known brand: {domain} ≈ {brand}", 'brand_similarity'
                ))

    return RuleResult(weight=weight, findings=findings)


def check_sensitive_data_request(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    if not any(_term_present(text, term) for term in lexicon.sensitive_terms):
        return RuleResult()
    return RuleResult(
        weight=SENSITIVE_DATA_WEIGHT,
        findings=[_finding(
            'bad', "Request for sensitive data (e.g. card/password/OTP).", 'sensitive_data'
        )]
    )


def check_sender_display_name(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    """
    Reports the detected sender, then checks that the display name mentions
    the first label of the sender's domain. Heuristic only, not authentication.
    """
    from_value = _header_value(FROM_PATTERN, text)
    if from_value is None:
        return RuleResult()

    findings = [_finding('ok', f"Sender detected: {from_value.strip()}", 'sender_detected')]
    weight = 0

    address = _first_address(from_value)
    name_only = DISPLAY_NAME_STRIP_PATTERN.sub('', ADDRESS_PATTERN.sub('', from_value)).strip()
    if address and name_only:
        host = _address_domain(address)
        if host.split('.')[0] not in name_only.lower():
            weight += SENDER_MISMATCH_WEIGHT
            findings.append(_finding(
                'warn',
                f"Display name does not match the sender domain ({name_only} vs {host})",
                'sender_mismatch'
            ))

    return RuleResult(weight=weight, findings=findings)


def check_reply_to_mismatch(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    reply_to = _first_address(_header_value(REPLY_TO_PATTERN, text))
    sender = _first_address(_header_value(FROM_PATTERN, text))
    if not reply_to or not sender:
        return RuleResult()
    if _address_domain(reply_to) == _address_domain(sender):
        return RuleResult()
    return RuleResult(
        weight=REPLY_TO_MISMATCH_WEIGHT,
        findings=[_finding('bad', f"Reply-To differs from From: {reply_to} ≠ {sender}", 'reply_to_mismatch')]
    )


def check_text_noise(text: str, entities: ExtractedEntities, lexicon: Lexicon) -> RuleResult:
    """Symbol-heavy text, typical of OCR output from link-laden images"""
    letters = len(LETTER_PATTERN.findall(text))
    if not letters:
        return RuleResult()
    non_letters = len(NON_LETTER_PATTERN.findall(text))
    if non_letters / letters <= NOISE_RATIO_THRESHOLD:
        return RuleResult()
    return RuleResult(
        weight=NOISE_WEIGHT,
        findings=[_finding(
            'warn', "Cluttered text with excess symbols/noise (possibly an image with links).", 'noise_ratio'
        )]
    )


RULES: Tuple[Rule, ...] = (
    check_urgency_language,
    check_missing_urls,
    check_url_shorteners,
    check_domain_structure,
    check_idn_domains,
    check_brand_similarity,
    check_sensitive_data_request,
    check_sender_display_name,
    check_reply_to_mismatch,
    check_text_noise,
)


class RuleSet:
    """Fixed, ordered collection of rules sharing one lexicon"""

    def __init__(self, lexicon: Lexicon = DEFAULT_LEXICON, rules: Tuple[Rule, ...] = RULES):
        self.lexicon = lexicon
        self.rules = tuple(rules)

    def evaluate(self, text: str, entities: ExtractedEntities) -> List[RuleResult]:
        """Run every rule in order; one RuleResult per rule"""
        results = []
        for rule in self.rules:
            result = rule(text, entities, self.lexicon)
            if result.weight:
                logger.debug(f"{rule.__name__} contributed {result.weight}")
            results.append(result)
        return results


__all__ = [
    'RULES',
    'RuleSet',
    'check_urgency_language',
    'check_missing_urls',
    'check_url_shorteners',
    'check_domain_structure',
    'check_idn_domains',
    'check_brand_similarity',
    'check_sensitive_data_request',
    'check_sender_display_name',
    'check_reply_to_mismatch',
    'check_text_noise',
]
