"""Unit tests for measure scoring, severity helpers and trend classification."""

import pytest

from mbc_tracker.domain.exceptions import ValidationFailedError
from mbc_tracker.domain.services.measure_catalog import build_gad7, build_phq9, default_catalog
from mbc_tracker.domain.services.scoring import (
    MeasureScorer,
    is_elevated,
    needs_follow_up,
    severity_description,
)
from mbc_tracker.domain.services.trends import Trend, calculate_trend
from mbc_tracker.tests.conftest import answers_for


@pytest.fixture
def scorer():
    return MeasureScorer()


@pytest.mark.unit
class TestMeasureCatalog:
    def test_phq9_definition(self):
        phq9 = build_phq9()
        assert phq9.question_count == 9
        assert (phq9.min_score, phq9.max_score) == (0, 27)
        assert [b.label for b in phq9.severity_bands] == [
            "minimal",
            "mild",
            "moderate",
            "moderately_severe",
            "severe",
        ]

    def test_gad7_definition(self):
        gad7 = build_gad7()
        assert gad7.question_count == 7
        assert gad7.max_score == 21
        assert gad7.band_for(15).label == "severe"

    def test_catalog_keyed_by_upper_name(self):
        assert set(default_catalog()) == {"PHQ-9", "GAD-7"}


@pytest.mark.unit
class TestMeasureScorer:
    @pytest.mark.parametrize(
        "values,total,label",
        [
            ([0] * 9, 0, "minimal"),
            ([1, 1, 1, 1, 0, 0, 0, 0, 0], 4, "minimal"),
            ([1] * 5 + [0] * 4, 5, "mild"),
            ([2] * 5 + [0] * 4, 10, "moderate"),
            ([2] * 7 + [1, 0], 15, "moderately_severe"),
            ([3] * 9, 27, "severe"),
        ],
    )
    def test_phq9_band_boundaries(self, scorer, values, total, label):
        result = scorer.score("PHQ-9", answers_for(values))
        assert result.total_score == total
        assert result.severity_label == label
        assert result.max_possible_score == 27
        assert result.answered_questions == 9

    def test_lookup_is_case_insensitive(self, scorer):
        assert scorer.score("gad-7", answers_for([1] * 7)).severity_label == "mild"

    def test_unknown_measure(self, scorer):
        with pytest.raises(ValidationFailedError, match="Unknown measure"):
            scorer.score("BDI-II", answers_for([0] * 21))

    def test_wrong_answer_count(self, scorer):
        with pytest.raises(ValidationFailedError, match="expects 7 answers"):
            scorer.score("GAD-7", answers_for([0] * 6))

    def test_value_out_of_range(self, scorer):
        with pytest.raises(ValidationFailedError, match="Must be 0-3"):
            scorer.score("GAD-7", answers_for([0] * 6 + [4]))

    def test_duplicate_question_number(self, scorer):
        answers = answers_for([0] * 7)
        answers[6] = answers[0]
        with pytest.raises(ValidationFailedError, match="duplicate"):
            scorer.score("GAD-7", answers)

    def test_no_answers(self, scorer):
        with pytest.raises(ValidationFailedError):
            scorer.score("PHQ-9", [])

    def test_custom_catalog(self):
        measure = build_gad7()
        scorer = MeasureScorer({"anxiety": measure})
        assert scorer.get_measure("ANXIETY") is measure
        assert scorer.known_measures() == ["GAD-7"]


@pytest.mark.unit
def test_severity_helpers():
    assert severity_description("moderately_severe") == "Moderately severe symptoms"
    assert severity_description("unheard-of") == "Unknown severity"
    assert is_elevated(10) and not is_elevated(9)
    assert needs_follow_up("phq-9", 15)
    assert not needs_follow_up("PHQ-9", 14)
    assert not needs_follow_up("OTHER", 27)


@pytest.mark.unit
class TestTrend:
    @pytest.mark.parametrize(
        "scores,expected",
        [
            ([], Trend.INSUFFICIENT),
            ([12], Trend.INSUFFICIENT),
            ([12, 13], Trend.STABLE),
            ([20, 15], Trend.IMPROVING),
            ([5, 9], Trend.WORSENING),
            ([20, 18, 6, 5, 4], Trend.IMPROVING),
            ([4, 4, 5, 4, 5], Trend.STABLE),
            ([2, 3, 10, 12, 14], Trend.WORSENING),
        ],
    )
    def test_calculate_trend(self, scores, expected):
        assert calculate_trend(scores) is expected

