"""
Rule-set store.
Owns the active classification rule set and its persistence.
"""

import logging
import threading
from functools import lru_cache
from importlib import resources

from pydantic import ValidationError

from .rules import ClassificationRuleSet
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

RULE_STORAGE_KEY = "autoseat_classification_rules"
DEFAULT_RULES_PACKAGE = "warranty_engine.data"
DEFAULT_RULES_FILE = "classification_rules.json"


class RuleSetValidationError(ValueError):
    """Raised when a rule-set document violates the schema."""


def format_validation_error(exc: ValidationError, limit: int = 5) -> str:
    """Flatten a pydantic error into a short, readable message."""
    parts: list[str] = []
    for error in exc.errors()[:limit]:
        location = ".".join(str(item) for item in error["loc"]) or "document"
        parts.append(f"{location}: {error['msg']}")
    remaining = exc.error_count() - limit
    if remaining > 0:
        parts.append(f"... and {remaining} more")
    return "; ".join(parts)


def parse_rule_set_from_json(content: str | bytes) -> ClassificationRuleSet:
    """
    Parse and validate a rule-set JSON document.

    This is the single gate for imported rule files: every category must
    be a non-empty list of well-typed rules with unique codes.

    Args:
        content: JSON text

    Returns:
        The validated rule set

    Raises:
        RuleSetValidationError: If the text is not valid JSON or breaks the schema
    """
    try:
        return ClassificationRuleSet.model_validate_json(content, strict=True)
    except ValidationError as exc:
        raise RuleSetValidationError(
            f"Invalid rule file: {format_validation_error(exc)}"
        ) from exc


def serialize_rule_set(rule_set: ClassificationRuleSet) -> str:
    """Serialize a rule set as 2-space indented JSON for diff-friendly export."""
    return rule_set.model_dump_json(by_alias=True, exclude_none=True, indent=2)


@lru_cache(maxsize=1)
def _default_rules_text() -> str:
    return (
        resources.files(DEFAULT_RULES_PACKAGE)
        .joinpath(DEFAULT_RULES_FILE)
        .read_text(encoding="utf-8")
    )


def load_default_rule_set() -> ClassificationRuleSet:
    """Load a fresh copy of the packaged default rule set."""
    return parse_rule_set_from_json(_default_rules_text())


class RuleSetStore:
    """
    Holder of the single active rule set.

    The active set is only ever replaced wholesale. Readers receive the
    current snapshot and must treat it as read-only; editing goes through
    a deep copy (see ``RuleSetEditor``).
    """

    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        storage_key: str = RULE_STORAGE_KEY,
        default_rule_set: ClassificationRuleSet | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            storage: Persistence port; None keeps the rule set in memory only
            storage_key: Key the rule set is persisted under
            default_rule_set: Rule set used when nothing valid is stored
        """
        self.storage = storage
        self.storage_key = storage_key
        self._default = (
            default_rule_set.model_copy(deep=True)
            if default_rule_set is not None
            else load_default_rule_set()
        )
        self._lock = threading.Lock()
        self._active = self._load_stored() or self._default.model_copy(deep=True)

    def _load_stored(self) -> ClassificationRuleSet | None:
        if self.storage is None:
            return None
        raw = self.storage.get(self.storage_key)
        if not raw:
            return None
        try:
            return parse_rule_set_from_json(raw)
        except RuleSetValidationError as exc:
            logger.warning("Ignoring stored classification rules: %s", exc)
            return None

    def _persist(self, rule_set: ClassificationRuleSet) -> None:
        if self.storage is None:
            return
        self.storage.set(self.storage_key, serialize_rule_set(rule_set))

    def get(self) -> ClassificationRuleSet:
        """Return the active rule-set snapshot."""
        return self._active

    @property
    def version(self) -> str:
        return self._active.version

    def set(self, rule_set: ClassificationRuleSet, persist: bool = True) -> None:
        """
        Replace the active rule set.

        Args:
            rule_set: New rule set (deep-copied before activation)
            persist: Write the new rule set to storage
        """
        snapshot = rule_set.model_copy(deep=True)
        with self._lock:
            self._active = snapshot
            if persist:
                self._persist(snapshot)
        logger.info("Activated classification rules version=%s", snapshot.version)

    def reset(self) -> None:
        """Restore the default rule set."""
        self.set(self._default)

    def import_json(self, content: str | bytes, persist: bool = True) -> ClassificationRuleSet:
        """
        Validate and activate a rule-set document.

        The active rule set is left unchanged when validation fails.
        """
        try:
            rule_set = parse_rule_set_from_json(content)
        except RuleSetValidationError as exc:
            logger.warning("Rejected rule-set import: %s", exc)
            raise
        self.set(rule_set, persist=persist)
        return self.get()

    def export_json(self) -> str:
        """Serialize the active rule set."""
        return serialize_rule_set(self._active)
