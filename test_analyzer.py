import pytest

from phishcheck.core.analyzer import PhishingAnalyzer, analyze
from phishcheck.core.risk_scorer import RiskScorer
from phishcheck.core.rules import RuleSet
from phishcheck.core.wordlists import Lexicon

SCENARIO_A = "Hola, verifique su cuenta urgente en http://bit.ly/abc123"
SCENARIO_B = (
    "From: PayPal Support <no-reply@paypa1-secure.xyz>\n"
    "Ingrese su tarjeta y contraseña para confirmar."
)
SCENARIO_C = "Reunión confirmada para el jueves a las 10."
SCENARIO_D = "Reply-To: billing@real-bank.com\nFrom: support@real-bank.net"


def rule_ids(result):
    return [finding.rule for finding in result.findings]


# ===== SCENARIOS =====

def test_shortener_with_urgency():
    result = analyze(SCENARIO_A)
    by_rule = {f.rule: f for f in result.findings}
    assert by_rule["urgency"].level == "warn"
    assert by_rule["shortener"].level == "bad"
    assert result.score > 10
    assert result.urls == ["http://bit.ly/abc123"]


def test_brand_lookalike_sender_is_high_risk():
    result = analyze(SCENARIO_B)
    assert rule_ids(result) == [
        "urgency",
        "no_urls",
        "suspicious_tld",
        "brand_similarity",
        "sensitive_data",
        "sender_detected",
        "sender_mismatch",
    ]
    levels = {f.rule: f.level for f in result.findings}
    assert levels["suspicious_tld"] == "bad"
    assert levels["sensitive_data"] == "bad"
    assert levels["brand_similarity"] == "bad"
    assert "paypal" in result.findings[3].message
    assert result.verdict.tier == "bad"
    assert result.verdict.label == "High"
    assert result.emails == ["no-reply@paypa1-secure.xyz"]


def test_plain_text_scores_base():
    result = analyze(SCENARIO_C)
    assert rule_ids(result) == ["no_urls"]
    assert result.findings[0].level == "warn"
    assert result.score == 10
    assert result.verdict.tier == "ok"


def test_reply_to_mismatch_fires():
    result = analyze(SCENARIO_D)
    findings = [f for f in result.findings if f.rule == "reply_to_mismatch"]
    assert len(findings) == 1
    assert findings[0].level == "bad"
    assert result.domains == ["real-bank.com", "real-bank.net"]


def test_empty_input():
    result = analyze("")
    assert rule_ids(result) == ["no_urls"]
    assert result.score == 10
    assert result.verdict.tier == "ok"
    assert result.verdict.label == "Low"


# ===== PROPERTIES =====

@pytest.mark.parametrize("text", [SCENARIO_A, SCENARIO_B, SCENARIO_C, SCENARIO_D, ""])
def test_analysis_is_deterministic(text):
    assert analyze(text) == analyze(text)
    assert analyze(text).model_dump() == PhishingAnalyzer().analyze(text).model_dump()


def test_input_is_not_mutated():
    text = SCENARIO_B
    analyze(text)
    assert text == SCENARIO_B


def test_score_is_clamped():
    domains = " ".join(f"http://secure-login-{i}.bank.verify.xyz/" for i in range(20))
    result = analyze(f"URGENTE bloqueado premio tarjeta {domains}")
    assert result.score == 100


@pytest.mark.parametrize("text", [SCENARIO_A, SCENARIO_B, SCENARIO_C, SCENARIO_D, "", "$$$ !!!"])
def test_verdict_matches_score(text):
    result = analyze(text)
    assert 0 <= result.score <= 100
    if result.score >= 70:
        assert result.verdict.tier == "bad"
    elif result.score >= 40:
        assert result.verdict.tier == "warn"
    else:
        assert result.verdict.tier == "ok"


def test_more_urgency_never_lowers_score():
    words = ["urgente", "inmediato", "bloqueado", "premio", "ganador", "banco", "urgent"]
    text = "Hola"
    previous = analyze(text).score
    for word in words:
        text = f"{text} {word}"
        score = analyze(text).score
        assert score >= previous
        previous = score


def test_findings_follow_rule_order():
    text = (
        "From: Soporte <alerts@secure-pay-pal.info>\n"
        "Reply-To: help@other.example\n"
        "URGENTE: confirme su clave en http://bit.ly/x o http://xn--80ak6aa92e.com"
    )
    # Domain structure findings interleave per domain, so they share a slot
    order = [
        ("urgency",), ("no_urls",), ("shortener",),
        ("suspicious_tld", "multi_hyphen", "deep_subdomain"),
        ("idn",), ("brand_similarity",), ("sensitive_data",),
        ("sender_detected",), ("sender_mismatch",), ("reply_to_mismatch",), ("noise_ratio",),
    ]

    def slot(rule):
        return next(i for i, group in enumerate(order) if rule in group)

    ids = rule_ids(analyze(text))
    assert ids == sorted(ids, key=slot)
    assert {"urgency", "shortener", "idn", "sensitive_data", "reply_to_mismatch"} <= set(ids)


def test_same_host_in_three_urls_yields_one_domain():
    result = analyze("http://evil.top/a http://evil.top/b http://evil.top/c")
    assert result.domains == ["evil.top"]
    assert [f.rule for f in result.findings].count("suspicious_tld") == 1


def test_shared_urgency_term_scores_both_lists():
    result = analyze("su token")
    assert rule_ids(result) == ["urgency", "no_urls", "sensitive_data"]
    # 2 hits for urgency plus the sensitive data request
    assert result.score == 10 + 4 * (4 + 6)


def test_idn_round_trip():
    result = analyze("Visit http://xn--80ak6aa92e.com now")
    info = result.idn_info[0]
    assert info.is_idn is True
    assert info.unicode_form == "аррӏе.com"


# ===== CONFIGURATION =====

def test_custom_thresholds():
    analyzer = PhishingAnalyzer(risk_scorer=RiskScorer(high_threshold=30, medium_threshold=15))
    assert analyzer.analyze(SCENARIO_A).verdict.tier == "bad"


def test_custom_lexicon():
    analyzer = PhishingAnalyzer(rule_set=RuleSet(lexicon=Lexicon(urgency_terms=("reunión",))))
    result = analyzer.analyze(SCENARIO_C)
    assert "urgency" in rule_ids(result)
    assert result.score == 18


# ===== SCORE NORMALIZER =====

def test_score_normalization():
    scorer = RiskScorer()
    assert scorer.calculate_risk_score(0) == 10
    assert scorer.calculate_risk_score(7) == 38
    assert scorer.calculate_risk_score(8) == 42
    assert scorer.calculate_risk_score(15) == 70
    assert scorer.calculate_risk_score(1000) == 100
    assert scorer.calculate_risk_score(-5) == 0


@pytest.mark.parametrize("score,label,tier", [
    (0, "Low", "ok"),
    (39, "Low", "ok"),
    (40, "Medium", "warn"),
    (69, "Medium", "warn"),
    (70, "High", "bad"),
    (100, "High", "bad"),
])
def test_verdict_tiers(score, label, tier):
    verdict = RiskScorer().determine_verdict(score)
    assert verdict.label == label
    assert verdict.tier == tier


def test_invalid_thresholds():
    with pytest.raises(ValueError):
        RiskScorer(high_threshold=30, medium_threshold=50)
