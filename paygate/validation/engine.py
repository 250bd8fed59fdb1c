from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .patterns import FieldKind, PatternRegistry, default_registry

BODY_FIELD = "body"
_BODY_NOT_OBJECT = "Request body must be a JSON object."
_NOT_PERMITTED = "Field is not permitted."


@dataclass(frozen=True)
class ValidationRule:
    field_name: str
    kind: FieldKind
    optional: bool = False
    message: Optional[str] = None
    label: Optional[str] = None

    @property
    def required_message(self) -> str:
        return f"{self.label or self.field_name} is required."


@dataclass
class ValidationResult:
    accepted: bool
    normalized_fields: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    def error_list(self) -> List[Dict[str, str]]:
        """Errors as an ordered list of {field, message}, for response bodies."""
        return [{"field": k, "message": v} for k, v in self.errors.items()]


# ---------------------------------------------------------------------------
# Rule sets
# ---------------------------------------------------------------------------

LOGIN_RULES: Sequence[ValidationRule] = (
    ValidationRule("idNumber", FieldKind.NATIONAL_ID, label="ID number"),
    ValidationRule("password", FieldKind.SECRET, label="Password"),
)

PAYMENT_RULES: Sequence[ValidationRule] = (
    ValidationRule(
        "recipientName",
        FieldKind.NAME,
        optional=True,
        message="Recipient name must be 2-100 characters and contain only letters, numbers, and spaces.",
        label="Recipient name",
    ),
    ValidationRule(
        "payeeAccountNumber",
        FieldKind.ACCOUNT_NUMBER,
        message="Payee account number must be between 8 and 18 digits with no spaces or special characters.",
        label="Payee account number",
    ),
    ValidationRule("swiftCode", FieldKind.SWIFT_CODE, label="SWIFT code"),
    ValidationRule("amount", FieldKind.AMOUNT, label="Amount"),
    ValidationRule("currency", FieldKind.CURRENCY, label="Currency"),
    ValidationRule("memo", FieldKind.MEMO, optional=True, label="Memo"),
)

# Out-of-band account provisioning only; there is no public sign-up route.
REGISTRATION_RULES: Sequence[ValidationRule] = (
    ValidationRule(
        "fullName",
        FieldKind.NAME,
        message="Full name must be 2-100 characters and contain only letters, numbers, and spaces.",
        label="Full name",
    ),
    ValidationRule("idNumber", FieldKind.NATIONAL_ID, label="ID number"),
    ValidationRule("accountNumber", FieldKind.ACCOUNT_NUMBER, label="Account number"),
    ValidationRule("password", FieldKind.PASSWORD, label="Password"),
)

USER_PAYMENT_RULES: Sequence[ValidationRule] = (
    ValidationRule("username", FieldKind.USERNAME, label="Username"),
    ValidationRule("amount", FieldKind.BOUNDED_AMOUNT, label="Amount"),
)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def _coerce(raw: Any) -> Optional[str]:
    """JSON scalars to text. Returns None for values no grammar can accept."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return str(raw)
    return None


class ValidationEngine:
    """
    Apply a rule set to an input record.

    Every declared field is checked, in declaration order, and at most one
    message is recorded per field. Fields the rule set does not declare are
    rejected (deny-by-default) and reported after the declared ones, sorted
    by name. Never raises, never performs I/O.
    """

    def __init__(self, registry: PatternRegistry = default_registry) -> None:
        self.registry = registry

    def validate(self, record: Any, rules: Sequence[ValidationRule]) -> ValidationResult:
        if not isinstance(record, Mapping):
            return ValidationResult(accepted=False, errors={BODY_FIELD: _BODY_NOT_OBJECT})

        normalized: Dict[str, str] = {}
        errors: Dict[str, str] = {}

        for rule in rules:
            raw = record.get(rule.field_name)
            outcome = self._check(rule, raw)
            if outcome is None:
                continue
            ok, value = outcome
            if ok:
                normalized[rule.field_name] = value
            else:
                errors[rule.field_name] = value

        declared = {rule.field_name for rule in rules}
        for name in sorted(str(k) for k in record.keys() if k not in declared):
            errors[name] = _NOT_PERMITTED

        if errors:
            return ValidationResult(accepted=False, errors=errors)
        return ValidationResult(accepted=True, normalized_fields=normalized)

    def _check(self, rule: ValidationRule, raw: Any) -> Optional[tuple[bool, str]]:
        """(True, normalized) | (False, message) | None for a skipped optional field."""
        if raw is None:
            return None if rule.optional else (False, rule.required_message)

        # No grammar for this kind: nothing it could carry is acceptable.
        if rule.kind not in self.registry:
            return False, rule.message or _NOT_PERMITTED
        pattern = self.registry.pattern(rule.kind)
        message = rule.message or pattern.message

        text = _coerce(raw)
        if text is None:
            return False, message

        value = pattern.normalize(text)
        if value == "":
            return None if rule.optional else (False, rule.required_message)

        if not pattern.matches(value):
            return False, message
        return True, value


default_engine = ValidationEngine()


def validate_field(kind: FieldKind, raw: Any, registry: PatternRegistry = default_registry) -> Optional[str]:
    """On-change check for a single value. Returns the error message or None."""
    if kind not in registry:
        return _NOT_PERMITTED
    text = _coerce(raw)
    pattern = registry.pattern(kind)
    if text is None:
        return pattern.message
    value = pattern.normalize(text)
    if value == "" and pattern.min_len == 0:
        return None
    return None if pattern.matches(value) else pattern.message
