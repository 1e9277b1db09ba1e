"""Tests for classifier score normalisation."""

from dashboard.services.openai_moderation import scores_from_category_scores
from dashboard.services.scoring import (
    error_scores,
    merge_max,
    normalize_class_name,
    regions_from_scores,
    scores_from_classes,
    severity,
    status_from_scores,
    warnings_from_scores,
)


class TestScoresFromClasses:
    """Test cases for class list normalisation."""

    def test_class_names(self):
        assert normalize_class_name("yes_sexual_activity") == "sexual activity"
        assert normalize_class_name("gore") == "gore"

    def test_drops_negated_and_empty_scores(self):
        classes = [
            {"class": "yes_violence", "score": 0.7},
            {"class": "no_violence", "score": 0.3},
            {"class": "yes_drugs", "score": 0},
            {"class": "weapons", "score": "0.25"},
            {"class": "gore", "score": float("nan")},
            {"score": 0.9},
            "not-a-class",
        ]

        assert scores_from_classes(classes) == {"violence": 0.7, "weapons": 0.25}

    def test_floor(self):
        classes = [
            {"class": "yes_violence", "score": 0.001},
            {"class": "yes_gore", "score": 0.002},
        ]

        assert scores_from_classes(classes, floor=0.001) == {"gore": 0.002}

    def test_missing_classes(self):
        assert scores_from_classes(None) == {}
        assert scores_from_classes([]) == {}


class TestDecisions:
    """Test cases for status, severity, warnings and regions."""

    def test_status_thresholds(self):
        assert status_from_scores({}) == "approved"
        assert status_from_scores({"a": 0.4}) == "approved"
        assert status_from_scores({"a": 0.41}) == "flagged"
        assert status_from_scores({"a": 0.8}) == "flagged"
        assert status_from_scores({"a": 0.81, "b": 0.1}) == "rejected"

    def test_severity(self):
        assert severity({"a": 0.9}) == "high"
        assert severity({"a": 0.5}) == "medium"
        assert severity({"a": 0.1}) == "low"

    def test_warnings_are_ranked(self):
        scores = {"gore": 0.2, "violence": 0.9, "drugs": 0.01, "weapons": 0.2}

        assert warnings_from_scores(scores) == ["violence", "gore", "weapons"]

    def test_regions(self):
        regions = regions_from_scores({"violence": 0.5, "gore": 0.2})

        assert len(regions) == 1
        assert regions[0].type == "violence"
        assert (regions[0].x, regions[0].y, regions[0].width, regions[0].height) == (0, 0, 100, 100)

    def test_merge_max(self):
        assert merge_max({"a": 0.2}, {"a": 0.5, "b": 0.1}, {}) == {"a": 0.5, "b": 0.1}

    def test_error_scores(self):
        assert error_scores() == {"api_error": 1.0}
        assert error_scores("unsupported_media_type") == {"unsupported_media_type": 1.0}

    def test_openai_category_scores(self):
        scores = scores_from_category_scores({
            "self_harm": 0.5,
            "hate": 0.005,
            "violence": None,
        })

        assert scores == {"self harm": 0.5}
