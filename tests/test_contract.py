"""
Tests for the detector contract.

Verifies that:
- Labels are normalized and truncated uniformly
- Confidence adjustments compose in order
- run_detector applies the tag allow-list and confidence floor
- Structural validation rejects malformed detectors
"""
import pytest
from pydantic import ValidationError

from labels.contract import (
    CONFIDENCE_SCORES,
    DETECTOR_PRIORITIES,
    FunctionDetector,
    adjust_confidence,
    clean_label_text,
    is_detection_result,
    is_generic_label,
    make_result,
    merge_detection_options,
    normalize_label,
    run_detector,
    validate_detector,
)
from labels.errors import InvalidDetectorError, LabelEngineError
from models.detection import DetectionContext, DetectionOptions, DetectionResult


class _Element:
    """Minimal opaque element handle."""

    def __init__(self, name):
        self.name = name


class TestNormalizeLabel:
    """Tests for the shared label normalizer."""

    def test_collapses_whitespace_and_trims(self, options):
        assert normalize_label("  First \n\t Name  ", options) == "First Name"

    def test_truncates_with_ellipsis(self):
        options = DetectionOptions(max_length=10)
        assert normalize_label("abcdefghijklmnop", options) == "abcdefg..."

    def test_label_at_max_length_is_kept(self):
        options = DetectionOptions(max_length=10)
        assert normalize_label("abcdefghij", options) == "abcdefghij"

    def test_transform_runs_first(self):
        options = DetectionOptions(transform=str.upper)
        assert normalize_label(" email  address ", options) == "EMAIL ADDRESS"

    def test_whitespace_kept_when_disabled(self):
        options = DetectionOptions(normalize_whitespace=False, trim=False)
        assert normalize_label(" a  b ", options) == " a  b "

    def test_empty_label(self, options):
        assert normalize_label("", options) == ""


class TestLabelText:
    """Tests for generic-label matching and label cleanup."""

    @pytest.mark.parametrize("label", ["Input", "field", " SUBMIT ", "*", "....."])
    def test_generic_labels(self, label):
        assert is_generic_label(label)

    @pytest.mark.parametrize("label", ["Email", "Input type", "First name"])
    def test_specific_labels(self, label):
        assert not is_generic_label(label)

    def test_clean_label_text(self):
        assert clean_label_text("  Email  (required):") == "Email"
        assert clean_label_text("* Password *") == "Password"
        assert clean_label_text("Nickname (optional)") == "Nickname"


class TestAdjustConfidence:
    """Tests for the confidence adjustment helper."""

    def test_length_bonus(self):
        assert adjust_confidence(0.7, "Email", length_bonus=True) == pytest.approx(0.75)

    def test_length_bonus_capped(self):
        assert adjust_confidence(0.98, "Email", length_bonus=True) == 1.0

    def test_no_length_bonus_outside_range(self):
        assert adjust_confidence(0.7, "x" * 51, length_bonus=True) == 0.7

    def test_short_penalty(self):
        assert adjust_confidence(0.7, "ab", short_penalty=True) == pytest.approx(0.6)

    def test_generic_penalty(self):
        assert adjust_confidence(0.7, "Field", generic_penalty=True) == pytest.approx(0.55)

    def test_factors_compose(self):
        value = adjust_confidence(
            0.7, "Field", length_bonus=True, generic_penalty=True, exact_match_bonus=True
        )
        assert value == pytest.approx(0.7)

    def test_floor_at_zero(self):
        assert adjust_confidence(0.05, "*", short_penalty=True, generic_penalty=True) == 0.0


class TestOptions:
    """Tests for detection option merging."""

    def test_none_gives_defaults(self):
        assert merge_detection_options(None) == DetectionOptions()

    def test_partial_mapping_is_merged(self):
        merged = merge_detection_options({"max_length": 20})
        assert merged.max_length == 20
        assert merged.trim is True

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            merge_detection_options({"colour": "red"})


class TestRunDetector:
    """Tests for the shared detect wrapper."""

    @pytest.fixture
    def context(self):
        return DetectionContext(element=_Element("input"))

    def test_unsupported_tag_short_circuits(self, options):
        called = []

        def find(context, options):
            called.append(True)
            return make_result("x", "Label", "attribute", 0.9, options)

        context = DetectionContext(element=_Element("div"))
        assert run_detector(find, context, options, supported_elements=("input",)) is None
        assert called == []

    def test_result_below_floor_dropped(self, context):
        options = DetectionOptions(min_confidence=0.8)

        def find(context, options):
            return make_result("x", "Label", "attribute", 0.7, options)

        assert run_detector(find, context, options) is None

    def test_label_renormalized(self, context, options):
        def find(context, options):
            return DetectionResult(
                label="  Spaced \n out ",
                confidence=0.7,
                strategy="x",
                source={"type": "attribute"},
            )

        result = run_detector(find, context, options)
        assert result.label == "Spaced out"

    def test_blank_label_dropped(self, context, options):
        def find(context, options):
            return make_result("x", "   ", "attribute", 0.7, options)

        assert run_detector(find, context, options) is None


class TestMakeResult:
    """Tests for result construction."""

    def test_metadata_records_truncation(self):
        options = DetectionOptions(max_length=8)
        result = make_result("x", "A very long label", "attribute", 0.6, options, attribute="title")

        assert result.label == "A ver..."
        assert result.metadata.truncated is True
        assert result.metadata.raw_text == "A very long label"
        assert result.metadata.original_length == 17
        assert result.source.attribute == "title"
        assert is_detection_result(result)

    def test_out_of_range_confidence_rejected(self, options):
        with pytest.raises(ValidationError):
            make_result("x", "Label", "attribute", 1.5, options)

    def test_is_detection_result_rejects_other_values(self):
        assert not is_detection_result({"label": "x", "confidence": 0.5})


class TestValidateDetector:
    """Tests for structural validation at the registration boundary."""

    def test_function_detector_is_valid(self):
        detector = FunctionDetector(
            name="fn",
            priority=30,
            base_confidence=0.5,
            find=lambda context, options: None,
        )
        assert validate_detector(detector) is detector

    def test_missing_members_listed(self):
        class Broken:
            name = ""
            priority = "high"

        with pytest.raises(InvalidDetectorError) as excinfo:
            validate_detector(Broken())

        message = str(excinfo.value)
        assert "name" in message
        assert "priority" in message
        assert "detect()" in message
        assert isinstance(excinfo.value, LabelEngineError)
        assert isinstance(excinfo.value, TypeError)

    def test_base_confidence_out_of_range(self):
        detector = FunctionDetector(
            name="fn", priority=30, base_confidence=2.0, find=lambda c, o: None
        )
        with pytest.raises(InvalidDetectorError):
            validate_detector(detector)


class TestConstants:
    """Tests for the published bands."""

    def test_priority_bands_are_ordered(self):
        values = list(DETECTOR_PRIORITIES.values())
        assert values == sorted(values)
        assert DETECTOR_PRIORITIES["framework"] < 20 <= DETECTOR_PRIORITIES["aria"] < 40

    def test_confidence_scores_in_range(self):
        assert all(0.0 <= v <= 1.0 for v in CONFIDENCE_SCORES.values())
