"""Tests for locale vocabularies."""
import json

import pytest

from mindscreen.services.analysis_service.config import (
    DEFAULT_LOCALE,
    ENGLISH_VOCABULARY,
    MALAYSIAN_VOCABULARY,
    get_vocabulary,
    load_vocabulary,
)
from mindscreen.services.analysis_service.keyword_matcher import KeywordMatcher
from mindscreen.services.analysis_service.linguistic_features import LinguisticFeatureExtractor


@pytest.fixture
def vocabulary_file(tmp_path):
    data = {
        "locale": "test-XX",
        "first_person_pronouns": ["ich", "mich"],
        "negations": ["nicht", "nie"],
        "absolutist_words": ["immer"],
        "intensifiers": ["sehr"],
        "clinical_categories": {
            "emotional": ["traurig"],
            "suicidal": ["sterben"],
        },
        "positive_terms": ["froh"],
        "high_risk_phrases": [],
        "medium_risk_phrases": [],
        "phq9_symptoms": {"depressed_mood": ["traurig"]},
        "intensity_qualifiers": {"immer": 3},
        "risk_factor_labels": {"emotional": "gedrueckte Stimmung"},
        "protective_factors": {"freude": ["froh"]},
    }
    path = tmp_path / "vocabulary.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestGetVocabulary:

    def test_default_is_english(self):
        assert get_vocabulary(DEFAULT_LOCALE) is ENGLISH_VOCABULARY

    def test_unknown_locale_falls_back(self):
        assert get_vocabulary("zz-ZZ") is ENGLISH_VOCABULARY

    def test_malaysian_english_is_registered(self):
        vocabulary = get_vocabulary("en-MY")
        assert vocabulary is MALAYSIAN_VOCABULARY
        assert vocabulary.locale == "en-MY"
        assert vocabulary.clinical_categories == ENGLISH_VOCABULARY.clinical_categories

    def test_malaysian_english_counts_malay_negators(self):
        extractor = LinguisticFeatureExtractor(MALAYSIAN_VOCABULARY)
        assert extractor.extract("I tak boleh sleep, I can't").negation_count == 2


class TestLoadVocabulary:

    def test_loads_and_registers(self, vocabulary_file):
        vocabulary = load_vocabulary(vocabulary_file)

        assert vocabulary.locale == "test-XX"
        assert "ich" in vocabulary.first_person_pronouns
        assert vocabulary.clinical_categories["emotional"] == ("traurig",)
        assert get_vocabulary("test-XX") is vocabulary

    def test_loaded_vocabulary_drives_matching(self, vocabulary_file):
        matcher = KeywordMatcher(load_vocabulary(vocabulary_file, register=False))

        result = matcher.match("Ich bin immer traurig und will sterben")
        assert result.depression_keywords == ["traurig", "sterben"]
        assert result.risk_keywords == ["sterben"]
        assert matcher.estimate_phq9("immer traurig").total_score == 3

    def test_missing_required_field(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"locale": "xx"}), encoding="utf-8")
        with pytest.raises(KeyError):
            load_vocabulary(path, register=False)

    @pytest.mark.parametrize("field_name", [
        "positive_terms", "high_risk_phrases", "clinical_categories",
        "phq9_symptoms", "protective_factors",
    ])
    def test_each_core_list_is_required(self, vocabulary_file, field_name):
        data = json.loads(vocabulary_file.read_text(encoding="utf-8"))
        del data[field_name]
        vocabulary_file.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(KeyError):
            load_vocabulary(vocabulary_file, register=False)

    def test_topics_are_optional(self, vocabulary_file):
        vocabulary = load_vocabulary(vocabulary_file, register=False)
        assert vocabulary.named_topics == ()
        assert dict(vocabulary.clinical_topics) == {}
