"""
Pure unit tests for clipguard/moderation/text_analyzer.py and the shared lexicon.

No I/O: every input is a literal string scored against DEFAULT_LEXICON or a
small custom Lexicon.
"""

import dataclasses

import pytest

from clipguard.moderation.lexicon import DEFAULT_LEXICON, Lexicon
from clipguard.moderation.text_analyzer import analyze_text, text_violations
from clipguard.schemas.moderation import Sentiment, Severity, TextResult, ViolationType


# ---------------------------------------------------------------------------
# Lexicon
# ---------------------------------------------------------------------------


def test_default_lexicon_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_LEXICON.profanity = ()


def test_lexicon_patterns_are_compiled_case_insensitive():
    assert any(p.search("RACIAL CLEANSING") for p in DEFAULT_LEXICON.hate_speech_patterns)
    assert any(p.search("Free XXX stuff") for p in DEFAULT_LEXICON.metadata_patterns)


def test_custom_lexicon_is_honoured():
    custom = dataclasses.replace(Lexicon.build(), violence=("banana",))
    result = analyze_text("banana banana", lexicon=custom)
    assert result.toxicity == pytest.approx(0.25)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def test_empty_text_is_neutral():
    result = analyze_text("")
    assert result == TextResult()
    assert result.sentiment == Sentiment.NEUTRAL
    assert result.toxicity == 0.0


def test_clean_text_scores_zero():
    result = analyze_text("Relaxing piano music for a calm evening")
    assert result.toxicity == 0.0
    assert result.profanity_words == ()
    assert text_violations(result) == []


def test_sentiment_positive_and_negative():
    assert analyze_text("what a great and happy day").sentiment == Sentiment.POSITIVE
    assert analyze_text("this is terrible and awful").sentiment == Sentiment.NEGATIVE


def test_violence_words_are_weighted():
    # 3 violence words × 0.25, no negative or profane hits
    result = analyze_text("murder shoot stab")
    assert result.toxicity == pytest.approx(0.75)


def test_hate_speech_pattern_is_reported():
    result = analyze_text("we should kill all muslims")
    assert len(result.hate_speech_indicators) == 1
    # hate pattern 0.3 + violence 'kill' 0.25 + negative 'kill' 0.1
    assert result.toxicity == pytest.approx(0.65)


def test_toxicity_is_clamped_to_one():
    result = analyze_text("kill murder shoot stab")
    assert result.toxicity == 1.0


def test_profanity_matches_substrings_in_lexicon_order():
    result = analyze_text("Shit, that fucking crap")
    assert result.profanity_words == ("fuck", "shit", "crap")


def test_shouting_alone_is_not_toxic():
    result = analyze_text("I WILL KILL YOU!!!")
    assert result.toxicity == pytest.approx(0.35)
    assert text_violations(result) == []


# ---------------------------------------------------------------------------
# Violations
# ---------------------------------------------------------------------------


def test_high_toxicity_violation():
    violations = text_violations(analyze_text("murder shoot stab"))
    assert len(violations) == 1
    v = violations[0]
    assert v.type == ViolationType.HATE_SPEECH
    assert v.severity == Severity.HIGH
    assert v.confidence == pytest.approx(0.75)


def test_critical_toxicity_violation_carries_profanity_evidence():
    result = analyze_text("fuck this, kill murder shoot")
    violations = text_violations(result)
    assert violations[0].severity == Severity.CRITICAL
    assert violations[0].evidence == "fuck"


def test_threshold_is_exclusive():
    assert text_violations(TextResult(toxicity=0.7)) == []
    assert text_violations(TextResult(toxicity=0.9))[0].severity == Severity.HIGH
