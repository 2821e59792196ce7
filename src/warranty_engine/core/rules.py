"""
Classification rule-set models.
The rule set is the complete, swappable policy document used by the rule engine.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Claim criticality levels."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class RuleCategory(str, Enum):
    """Taxonomies that select exactly one rule per claim."""

    PHENOMENA = "phenomena"
    CAUSES = "causes"
    CONTAMINATIONS = "contaminations"


class RuleModel(BaseModel):
    """Base model for interchange documents (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class ClassificationRule(RuleModel):
    """Keyword rule for one phenomenon, cause or contamination label."""

    code: str
    label: str
    keywords: list[str]
    synonyms: list[str] | None = None
    excludes: list[str] | None = None
    priority: int | float | None = None
    is_fallback: bool | None = None

    @property
    def effective_priority(self) -> float:
        return self.priority or 0

    def terms(self) -> list[str]:
        """Keywords and synonyms, case-folded."""
        return [term.lower() for term in [*self.keywords, *(self.synonyms or [])]]


class SeverityRule(RuleModel):
    """Severity rule matched by keyword or cost threshold."""

    label: Severity
    keywords: list[str] | None = None
    cost_threshold: int | float | None = None


class FlagRule(RuleModel):
    """Non-exclusive tag attached whenever any keyword occurs."""

    id: str
    label: str
    keywords: list[str]


class ClassificationRuleSet(RuleModel):
    """Versioned rule set covering every taxonomy, severity and flags."""

    version: str
    phenomena: list[ClassificationRule]
    causes: list[ClassificationRule]
    contaminations: list[ClassificationRule]
    severity: list[SeverityRule]
    flags: list[FlagRule]

    @model_validator(mode="after")
    def check_categories(self) -> "ClassificationRuleSet":
        for category in RuleCategory:
            rules = self.rules_for(category)
            if not rules:
                raise ValueError(f"'{category.value}' must contain at least one rule")
            seen: set[str] = set()
            for rule in rules:
                if rule.code in seen:
                    raise ValueError(
                        f"duplicate rule code '{rule.code}' in '{category.value}'"
                    )
                seen.add(rule.code)
        return self

    def rules_for(self, category: RuleCategory | str) -> list[ClassificationRule]:
        """Return the rule list for a taxonomy."""
        return getattr(self, RuleCategory(category).value)

    def fallback_for(self, category: RuleCategory | str) -> ClassificationRule:
        """
        Return the fallback rule of a taxonomy.

        The last rule flagged ``isFallback`` wins; without a flag the last
        element of the list is the fallback.
        """
        return fallback_rule(self.rules_for(category))


def fallback_rule(rules: list[ClassificationRule]) -> ClassificationRule:
    """Pick the designated fallback from a rule list."""
    flagged = [rule for rule in rules if rule.is_fallback]
    return flagged[-1] if flagged else rules[-1]
