"""Tests for KeywordMatcher."""
import pytest

from mindscreen.shared.models import PHQ9Item, SeverityCategory, SymptomCategory
from mindscreen.services.analysis_service.keyword_matcher import KeywordMatcher, compile_terms


@pytest.fixture
def matcher():
    return KeywordMatcher()


class TestCompileTerms:

    def test_anchored_at_word_start(self):
        [(term, pattern)] = compile_terms(["joy"])
        assert term == "joy"
        assert pattern.search("pure JOY today")
        assert pattern.search("joyful")
        assert not pattern.search("I enjoy it")


class TestMatch:
    """Vocabulary matching."""

    def test_depression_keywords(self, matcher):
        result = matcher.match("I feel hopeless and worthless, nothing matters anymore")
        assert "hopeless" in result.depression_keywords
        assert "worthless" in result.depression_keywords
        assert "nothing matters" in result.depression_keywords
        assert result.categories == [SymptomCategory.COGNITIVE]
        assert result.risk_keywords == []

    def test_inflected_forms_match(self, matcher):
        result = matcher.match("the hopelessness and sadness are overwhelming")
        assert result.depression_keywords == ["hopeless", "sad"]
        assert result.positive_keywords == []

    def test_self_harm_inflection_is_risk_keyword(self, matcher):
        result = matcher.match("I have been self-harming again")
        assert result.risk_keywords == ["self-harm"]
        assert SymptomCategory.SUICIDAL in result.categories

    def test_mid_word_terms_do_not_match(self, matcher):
        result = matcher.match("I enjoy music")
        assert result.positive_keywords == []
        assert result.depression_keywords == []

    def test_positive_keywords(self, matcher):
        result = matcher.match("I had a great day, feeling grateful and motivated")
        assert set(result.positive_keywords) == {"great", "grateful", "motivated"}

    def test_risk_keywords_are_also_depression_keywords(self, matcher):
        result = matcher.match("I want to end it all")
        assert result.risk_keywords == ["end it all"]
        assert "end it all" in result.depression_keywords
        assert SymptomCategory.SUICIDAL in result.categories
        assert result.has_risk_keywords

    def test_matches_are_deduplicated(self, matcher):
        result = matcher.match("sad, sad, so sad")
        assert result.depression_keywords == ["sad"]

    def test_case_insensitive(self, matcher):
        assert matcher.match("HOPELESS").depression_keywords == ["hopeless"]

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_input(self, matcher, text):
        result = matcher.match(text)
        assert result.depression_keywords == []
        assert result.positive_keywords == []
        assert result.categories == []


class TestRiskPhrases:

    def test_high_and_medium(self, matcher):
        high, medium = matcher.match_risk_phrases("I hate myself and I can't sleep")
        assert high == ["hate myself"]
        assert medium == ["can't sleep"]

    def test_none_input(self, matcher):
        assert matcher.match_risk_phrases(None) == ([], [])


class TestEstimatePHQ9:
    """Keyword PHQ-9 estimation."""

    def test_sometimes_scores_one_point(self, matcher):
        estimate = matcher.estimate_phq9("sometimes I can't sleep and feel tired")
        assert estimate.item_scores[PHQ9Item.SLEEP.value - 1] == 1
        assert estimate.item_scores[PHQ9Item.FATIGUE.value - 1] == 1
        assert estimate.total_score == 2
        assert estimate.confidence_level == pytest.approx(0.6)

    def test_every_day_scores_three(self, matcher):
        estimate = matcher.estimate_phq9("I feel sad every day")
        assert estimate.item_scores[PHQ9Item.DEPRESSED_MOOD.value - 1] == 3
        assert estimate.total_score == 3

    def test_often_scores_two(self, matcher):
        estimate = matcher.estimate_phq9("I often feel exhausted")
        assert estimate.item_scores[PHQ9Item.FATIGUE.value - 1] == 2

    def test_no_symptoms(self, matcher):
        estimate = matcher.estimate_phq9("The weather is nice")
        assert estimate.total_score == 0
        assert estimate.confidence_level == 0.0
        assert estimate.severity_category == SeverityCategory.MINIMAL

    def test_total_capped_at_27(self, matcher):
        text = (
            "always lost interest. always depressed. always insomnia. "
            "always exhausted. always no appetite. always worthless. "
            "always can't focus. always restless. always want to die."
        )
        estimate = matcher.estimate_phq9(text)
        assert estimate.item_scores == [3] * 9
        assert estimate.total_score == 27
        assert estimate.severity_category == SeverityCategory.SEVERE
        assert estimate.confidence_level == pytest.approx(0.9)


class TestClinicalFactors:

    def test_risk_and_protective_factors(self, matcher):
        keywords = matcher.match("I feel hopeless but grateful and supported")
        factors = matcher.clinical_factors(keywords)
        assert factors.risk_factors == ["negative cognitive patterns"]
        assert factors.protective_factors == ["social support", "gratitude"]
        assert factors.symptom_clusters == ["cognitive"]
