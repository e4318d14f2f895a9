"""Tests for the symptom taxonomy and body-system classifier.

Matching is bidirectional substring containment, which over-matches
generic symptoms. The over-matching cases below are pinned on purpose.
"""
from medintake.shared.models import BodySystem
from medintake.services.question_service.taxonomy import (
    SYMPTOM_TYPES,
    classify,
    normalize_symptom_key,
)


class TestNormalizeSymptomKey:
    """Tests for symptom key normalization."""

    def test_lowercases_and_replaces_underscores(self):
        assert normalize_symptom_key("Chest_Pain") == "chest pain"

    def test_collapses_whitespace(self):
        assert normalize_symptom_key("  shortness   of  breath ") == "shortness of breath"

    def test_none_is_empty(self):
        assert normalize_symptom_key(None) == ""


class TestClassify:
    """Tests for classify()."""

    def test_empty_input_yields_empty_set(self):
        assert classify([]) == frozenset()

    def test_blank_rows_are_ignored(self):
        """An empty string is contained in every keyword and must not match."""
        assert classify(["", "   "]) == frozenset()

    def test_single_system(self):
        assert classify(["headache"]) == {BodySystem.NEUROLOGICAL}

    def test_case_insensitive(self):
        assert classify(["HEADACHE"]) == {BodySystem.NEUROLOGICAL}

    def test_underscored_keys_match(self):
        assert classify(["chest_pain"]) == {BodySystem.CARDIOVASCULAR}

    def test_keyword_shared_by_two_systems(self):
        """Shortness of breath is listed under both systems."""
        assert classify(["shortness of breath"]) == {
            BodySystem.CARDIOVASCULAR,
            BodySystem.RESPIRATORY,
        }

    def test_multiple_symptoms_union(self):
        assert classify(["nausea", "fever"]) == {
            BodySystem.GASTROINTESTINAL,
            BodySystem.CONSTITUTIONAL,
        }

    def test_symptom_containing_keyword_matches(self):
        """'muscle weakness' contains the neurological keyword 'weakness'."""
        assert BodySystem.NEUROLOGICAL in classify(["muscle weakness"])

    def test_generic_pain_matches_every_pain_keyword(self):
        """Pinned over-match: 'pain' is contained in every '... pain' keyword."""
        assert classify(["pain"]) == {
            BodySystem.CARDIOVASCULAR,
            BodySystem.GASTROINTESTINAL,
            BodySystem.MUSCULOSKELETAL,
            BodySystem.GENITOURINARY,
        }

    def test_specific_pain_stays_in_its_system(self):
        assert classify(["back pain"]) == {BodySystem.MUSCULOSKELETAL}

    def test_unknown_symptom_matches_nothing(self):
        assert classify(["hiccups"]) == frozenset()


class TestSymptomCatalog:
    """Tests for the static symptom catalog."""

    def test_catalog_has_no_duplicates(self):
        assert len(SYMPTOM_TYPES) == len(set(SYMPTOM_TYPES))

    def test_catalog_keys_are_normalized(self):
        for symptom in SYMPTOM_TYPES:
            assert normalize_symptom_key(symptom) == symptom
