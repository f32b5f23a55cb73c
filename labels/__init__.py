"""Label detection engine: detector contract, catalog and resolver."""

from labels.catalog import DetectorCatalog, RegistryListener
from labels.contract import (
    CONFIDENCE_SCORES,
    DEFAULT_DETECTION_OPTIONS,
    DETECTOR_PRIORITIES,
    FunctionDetector,
    LabelDetector,
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
from labels.defaults import (
    config_from_env,
    element_has_label,
    get_all_label_candidates,
    get_default_catalog,
    get_default_resolver,
    get_label_for_element,
    reset_defaults,
    resolve_label,
    set_default_resolver,
)
from labels.errors import DuplicateNameError, InvalidDetectorError, LabelEngineError
from labels.resolver import (
    LabelResolver,
    create_accurate_resolver,
    create_fast_resolver,
    create_label_resolver,
    create_resolver_with_catalog,
)
from labels.selection import (
    filter_by_confidence,
    find_candidate_by_detector,
    sort_by_confidence,
    sort_by_priority,
    sort_by_weighted_score,
    unique_labels,
    weighted_score,
)

__all__ = [
    # Contract
    "CONFIDENCE_SCORES",
    "DEFAULT_DETECTION_OPTIONS",
    "DETECTOR_PRIORITIES",
    "FunctionDetector",
    "LabelDetector",
    "adjust_confidence",
    "clean_label_text",
    "is_detection_result",
    "is_generic_label",
    "make_result",
    "merge_detection_options",
    "normalize_label",
    "run_detector",
    "validate_detector",
    # Catalog
    "DetectorCatalog",
    "RegistryListener",
    # Resolver
    "LabelResolver",
    "create_accurate_resolver",
    "create_fast_resolver",
    "create_label_resolver",
    "create_resolver_with_catalog",
    # Candidate utilities
    "filter_by_confidence",
    "find_candidate_by_detector",
    "sort_by_confidence",
    "sort_by_priority",
    "sort_by_weighted_score",
    "unique_labels",
    "weighted_score",
    # Defaults
    "config_from_env",
    "element_has_label",
    "get_all_label_candidates",
    "get_default_catalog",
    "get_default_resolver",
    "get_label_for_element",
    "reset_defaults",
    "resolve_label",
    "set_default_resolver",
    # Errors
    "DuplicateNameError",
    "InvalidDetectorError",
    "LabelEngineError",
]
