"""
Draft editing of classification rule sets.
All edits apply to a private deep copy; the active rule set is never touched.
"""

import itertools
import logging
import re
from typing import Any

from pydantic import ValidationError

from ..core.rule_store import RuleSetValidationError, format_validation_error
from ..core.rules import (
    ClassificationRule,
    ClassificationRuleSet,
    FlagRule,
    RuleCategory,
    fallback_rule,
)

logger = logging.getLogger(__name__)

LIST_FIELDS = ("keywords", "synonyms", "excludes")
DEFAULT_NEW_RULE_PRIORITY = 10
MAX_CONFLICTS_PER_CATEGORY = 5
WHITESPACE_PATTERN = re.compile(r"\s+")


def parse_list(value: str | list[str] | None) -> list[str]:
    """Split a comma-separated string (or clean a list) into trimmed, non-empty terms."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [item.strip() for item in items if item and item.strip()]


def normalize_code(value: str) -> str:
    """Rule codes are lower-case with whitespace replaced by underscores."""
    return WHITESPACE_PATTERN.sub("_", value).lower()


def _to_number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(number) if number.is_integer() else number


class RuleSetEditor:
    """
    Editable draft of a rule set.

    Mirrors the rule management workflow: tweak rules, preview the effect,
    then hand ``build()`` to ``RuleSetStore.set``.
    """

    def __init__(self, rule_set: ClassificationRuleSet) -> None:
        self.draft = rule_set.model_copy(deep=True)
        self._sequence = itertools.count(1)

    def rules(self, category: RuleCategory | str) -> list[ClassificationRule]:
        return self.draft.rules_for(category)

    def update_rule(self, category: RuleCategory | str, index: int, **changes: Any) -> ClassificationRule:
        """
        Change fields of one taxonomy rule.

        List fields accept a list or a comma-separated string; ``priority``
        falls back to 0 when it is not numeric; ``code`` is normalized.
        """
        rule = self.rules(category)[index]
        for name, value in changes.items():
            if name in LIST_FIELDS:
                value = parse_list(value)
            elif name == "priority":
                value = _to_number(value)
            elif name == "code":
                value = normalize_code(value)
            elif name not in ("label", "is_fallback"):
                raise AttributeError(f"Unknown rule field: {name}")
            setattr(rule, name, value)
        return rule

    def rename_rule_code(self, category: RuleCategory | str, index: int, code: str) -> str:
        rule = self.rules(category)[index]
        rule.code = normalize_code(code)
        return rule.code

    def _new_code(self, prefix: str) -> str:
        existing = {rule.code for category in RuleCategory for rule in self.rules(category)}
        existing.update(flag.id for flag in self.draft.flags)
        while True:
            candidate = f"{prefix}_new_{next(self._sequence)}"
            if candidate not in existing:
                return candidate

    def add_rule(
        self,
        category: RuleCategory | str,
        label: str = "New rule",
        keywords: str | list[str] | None = None,
        priority: float = DEFAULT_NEW_RULE_PRIORITY,
    ) -> ClassificationRule:
        """Insert a new rule just before the category's fallback."""
        category = RuleCategory(category)
        rules = self.rules(category)
        rule = ClassificationRule(
            code=self._new_code(category.value),
            label=label,
            keywords=parse_list(keywords),
            priority=priority,
        )
        position = rules.index(fallback_rule(rules))
        rules.insert(position, rule)
        return rule

    def remove_rule(self, category: RuleCategory | str, index: int) -> bool:
        """
        Remove a rule.

        Returns:
            False (and changes nothing) for the fallback or the last remaining rule
        """
        rules = self.rules(category)
        if len(rules) <= 1 or not 0 <= index < len(rules):
            return False
        if rules[index] is fallback_rule(rules):
            logger.info("Refusing to remove fallback rule %s", rules[index].code)
            return False
        del rules[index]
        return True

    def update_severity(
        self,
        index: int,
        keywords: str | list[str] | None = None,
        cost_threshold: float | str | None = None,
    ) -> None:
        """Edit a severity rule; an empty threshold clears it."""
        rule = self.draft.severity[index]
        if keywords is not None:
            rule.keywords = parse_list(keywords)
        if cost_threshold is not None:
            rule.cost_threshold = _to_number(cost_threshold) if str(cost_threshold).strip() else None

    def add_flag(self, label: str = "New Flag", keywords: str | list[str] | None = None) -> FlagRule:
        flag = FlagRule(id=self._new_code("flag"), label=label, keywords=parse_list(keywords))
        self.draft.flags.append(flag)
        return flag

    def remove_flag(self, index: int) -> bool:
        if not 0 <= index < len(self.draft.flags):
            return False
        del self.draft.flags[index]
        return True

    def update_flag(
        self,
        index: int,
        label: str | None = None,
        keywords: str | list[str] | None = None,
        flag_id: str | None = None,
    ) -> FlagRule:
        flag = self.draft.flags[index]
        if label is not None:
            flag.label = label
        if keywords is not None:
            flag.keywords = parse_list(keywords)
        if flag_id is not None:
            flag.id = normalize_code(flag_id)
        return flag

    def duplicate_keyword_warnings(self) -> list[str]:
        """
        Report terms claimed by rules with different labels.

        One warning per category, listing at most five conflicting terms.
        """
        warnings: list[str] = []
        for category in RuleCategory:
            owners: dict[str, dict[str, None]] = {}
            for rule in self.rules(category):
                for term in dict.fromkeys(rule.terms()):
                    if term:
                        owners.setdefault(term, {})[rule.label] = None
            conflicts = [
                f"{term} ({', '.join(labels)})"
                for term, labels in owners.items()
                if len(labels) > 1
            ]
            if conflicts:
                shown = "; ".join(conflicts[:MAX_CONFLICTS_PER_CATEGORY])
                warnings.append(f"[{category.value}] duplicate keywords: {shown}")
        return warnings

    def build(self, version: str | None = None) -> ClassificationRuleSet:
        """
        Validate the draft and return a fresh rule set.

        Raises:
            RuleSetValidationError: If the edits broke the schema (e.g. duplicate codes)
        """
        payload = self.draft.model_dump()
        if version:
            payload["version"] = version
        try:
            return ClassificationRuleSet.model_validate(payload)
        except ValidationError as exc:
            raise RuleSetValidationError(
                f"Invalid rule draft: {format_validation_error(exc)}"
            ) from exc
