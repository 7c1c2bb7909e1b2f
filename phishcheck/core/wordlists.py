"""
Fixed word lists used by the heuristic rules.

The tables are bundled as a frozen `Lexicon` so a caller can build a
`RuleSet` with different lists (tests, regional variants) without touching
module state.
"""
from dataclasses import dataclass
from typing import Tuple

# ===== URGENCY / MANIPULATION LANGUAGE =====
URGENCY_WORDS_ES = (
    'urgente', 'inmediato', 'último aviso', 'suspender', 'bloqueado', 'verifique',
    'confirmar', 'restablecer', 'contraseña', 'token', 'código', 'premio', 'ganador',
    'factura pendiente', 'pago rechazado', 'impuesto', 'hacienda', 'aeat', 'correos',
    'paquete', 'aduana', 'seguro', 'transferencia', 'banco', 'santander', 'bbva',
    'caixa', 'iban', 'otp', 'sms', 'confirmación', 'actualice sus datos', 'evitar sanción',
)

URGENCY_WORDS_EN = (
    'urgent', 'immediately', 'last notice', 'suspend', 'blocked', 'verify', 'confirm',
    'reset', 'password', 'token', 'code', 'prize', 'winner', 'pending invoice',
    'payment failed', 'tax', 'customs', 'delivery', 'bank', 'transfer', 'otp',
    'account', 'update your details',
)

# ===== DOMAINS =====
SUSPICIOUS_TLDS = (
    '.xyz', '.top', '.gq', '.tk', '.cf', '.ru', '.work', '.zip', '.mov', '.rest',
    '.country', '.mom', '.fit', '.cam', '.buzz', '.click', '.loan', '.men', '.live',
    '.shop', '.info',
)

URL_SHORTENERS = (
    'bit.ly', 'tinyurl.com', 't.co', 'goo.gl', 'is.gd', 'ow.ly', 'buff.ly',
    'rebrand.ly', 'cutt.ly', 'tiny.one',
)

KNOWN_BRANDS = (
    'amazon', 'apple', 'microsoft', 'google', 'facebook', 'instagram', 'paypal',
    'santander', 'bbva', 'caixabank', 'correos', 'aeat', 'dgt', 'endesa',
    'iberdrola', 'movistar', 'orange', 'vodafone',
)

# ===== SENSITIVE DATA REQUESTS =====
SENSITIVE_TERMS = (
    'dni', 'nif', 'tarjeta', 'cvv', 'iban', 'clave', 'contraseña', 'token', 'otp',
    'verifica', 'confirma', 'confirme', 'transferencia', 'pago',
)


@dataclass(frozen=True)
class Lexicon:
    # Both languages concatenated; a term in both lists scores twice
    urgency_terms: Tuple[str, ...] = URGENCY_WORDS_ES + URGENCY_WORDS_EN
    suspicious_tlds: Tuple[str, ...] = SUSPICIOUS_TLDS
    shorteners: Tuple[str, ...] = URL_SHORTENERS
    brands: Tuple[str, ...] = KNOWN_BRANDS
    sensitive_terms: Tuple[str, ...] = SENSITIVE_TERMS


DEFAULT_LEXICON = Lexicon()

__all__ = [
    'URGENCY_WORDS_ES',
    'URGENCY_WORDS_EN',
    'SUSPICIOUS_TLDS',
    'URL_SHORTENERS',
    'KNOWN_BRANDS',
    'SENSITIVE_TERMS',
    'Lexicon',
    'DEFAULT_LEXICON',
]
