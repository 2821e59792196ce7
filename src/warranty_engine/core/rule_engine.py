"""
Keyword rule engine for claim classification.
Evaluates a versioned rule set against normalized claim text.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from .models import ClassificationResult, CleanedClaim
from .rules import (
    ClassificationRule,
    ClassificationRuleSet,
    FlagRule,
    RuleCategory,
    Severity,
    SeverityRule,
    fallback_rule,
)
from .text import normalize_for_match

if TYPE_CHECKING:
    from .rule_store import RuleSetStore


def build_match_text(description: str | None, part_name: str | None = None) -> str:
    """Join description and part name into the text rules are matched against."""
    combined = " ".join(part for part in (description, part_name) if part)
    return normalize_for_match(combined)


def text_matches_rule(text: str, rule: ClassificationRule) -> bool:
    """
    Check a taxonomy rule against match text.

    At least one keyword or synonym must occur and no exclude term may occur.
    """
    terms = rule.terms()
    if not terms:
        return False
    if not any(term in text for term in terms):
        return False
    if rule.excludes:
        return not any(term.lower() in text for term in rule.excludes)
    return True


def sort_rules_by_priority(rules: Iterable[ClassificationRule]) -> list[ClassificationRule]:
    """Order rules by priority (highest first), keeping list order for ties."""
    return sorted(rules, key=lambda rule: -rule.effective_priority)


def find_rule_match(text: str, rules: list[ClassificationRule]) -> ClassificationRule:
    """Select the best matching rule, or the list's fallback when nothing matches."""
    for rule in sort_rules_by_priority(rules):
        if text_matches_rule(text, rule):
            return rule
    return fallback_rule(rules)


def matches_severity(text: str, cost: float, rule: SeverityRule) -> bool:
    if rule.keywords and any(keyword.lower() in text for keyword in rule.keywords):
        return True
    if rule.cost_threshold is not None and cost >= rule.cost_threshold:
        return True
    return False


def determine_severity(text: str, cost: float, rules: list[SeverityRule]) -> str:
    """First severity rule (in declared order) that matches; Low otherwise."""
    for rule in rules:
        if matches_severity(text, cost, rule):
            return rule.label
    return Severity.LOW.value


def collect_flags(text: str, rules: list[FlagRule]) -> list[str]:
    """Labels of every flag rule with a keyword hit."""
    return [
        rule.label
        for rule in rules
        if any(keyword.lower() in text for keyword in rule.keywords)
    ]


def classify_claim(
    description: str | None,
    part_name: str | None,
    cost: float | None,
    rule_set: ClassificationRuleSet,
) -> ClassificationResult:
    """
    Classify one claim against a rule set.

    Pure function of its inputs: the rule set is never modified and no
    state is kept between calls.

    Args:
        description: Claim description text
        part_name: Optional part name, appended to the match text
        cost: Claim cost used by severity thresholds
        rule_set: Rule set to evaluate

    Returns:
        Phenomenon, cause, contamination, severity and flags
    """
    text = build_match_text(description, part_name)

    phenomenon = find_rule_match(text, rule_set.rules_for(RuleCategory.PHENOMENA))
    cause = find_rule_match(text, rule_set.rules_for(RuleCategory.CAUSES))
    contamination = find_rule_match(text, rule_set.rules_for(RuleCategory.CONTAMINATIONS))

    return ClassificationResult(
        phenomenon=phenomenon.label,
        cause=cause.label,
        contamination=contamination.label,
        severity=determine_severity(text, cost or 0, rule_set.severity),
        flags=collect_flags(text, rule_set.flags),
    )


def apply_rules_to_claims(
    claims: Iterable[CleanedClaim], rule_set: ClassificationRuleSet
) -> list[CleanedClaim]:
    """Re-classify claims, returning updated copies (inputs are untouched)."""
    reclassified: list[CleanedClaim] = []
    for claim in claims:
        result = classify_claim(claim.description, claim.part_name, claim.cost, rule_set)
        reclassified.append(claim.model_copy(update=result.model_dump()))
    return reclassified


class RuleEngine:
    """
    Classification front-end bound to a rule-set store.

    Every call either uses an explicit rule set (live preview) or takes
    the store's active snapshot once at entry, so re-classification can
    run alongside read-only aggregation.
    """

    def __init__(self, store: "RuleSetStore") -> None:
        self.store = store

    def resolve(self, rule_set: ClassificationRuleSet | None = None) -> ClassificationRuleSet:
        """Return the override if given, else the active snapshot."""
        return rule_set if rule_set is not None else self.store.get()

    def classify(
        self,
        description: str | None,
        part_name: str | None = None,
        cost: float | None = None,
        rule_set: ClassificationRuleSet | None = None,
    ) -> ClassificationResult:
        """Classify one claim with the active (or overriding) rule set."""
        return classify_claim(description, part_name, cost, self.resolve(rule_set))

    def apply_to_claims(
        self,
        claims: Iterable[CleanedClaim],
        rule_set: ClassificationRuleSet | None = None,
    ) -> list[CleanedClaim]:
        """Re-classify a claim collection."""
        return apply_rules_to_claims(claims, self.resolve(rule_set))

    def list_rules(self, rule_set: ClassificationRuleSet | None = None) -> list[dict[str, Any]]:
        """List taxonomy rules with their effective priority and fallback status."""
        snapshot = self.resolve(rule_set)
        listing: list[dict[str, Any]] = []
        for category in RuleCategory:
            rules = snapshot.rules_for(category)
            fallback = fallback_rule(rules)
            for rule in rules:
                listing.append(
                    {
                        "category": category.value,
                        "code": rule.code,
                        "label": rule.label,
                        "priority": rule.effective_priority,
                        "fallback": rule is fallback,
                        "terms": len(rule.terms()),
                    }
                )
        return listing
