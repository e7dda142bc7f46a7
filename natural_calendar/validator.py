from .models import ComponentType, ParsedPhrase, ValidationResult

NO_TEMPORAL_REFERENCE = "No temporal reference found"
AMBIGUOUS_TIME = "Multiple time components found - may be ambiguous"

ANCHOR_TYPES = (ComponentType.TIME, ComponentType.DATE, ComponentType.WEEKDAY)


def validate_phrase(phrase: ParsedPhrase) -> ValidationResult:
    """Check that the phrase has at least one temporal anchor and flag ambiguity"""
    missing = ()
    warnings = []

    if not any(phrase.components_of(t) for t in ANCHOR_TYPES):
        missing = (ComponentType.TIME, ComponentType.DATE)
        warnings.append(NO_TEMPORAL_REFERENCE)

    if len(phrase.components_of(ComponentType.TIME)) > 1:
        warnings.append(AMBIGUOUS_TIME)

    return ValidationResult(is_valid=not missing, missing_types=missing, warnings=tuple(warnings))
