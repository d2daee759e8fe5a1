"""Rule-table intent classifier: keyword/pattern scoring, no model calls."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Sequence, Union

from kisanai.orchestrator.types import (
    MUTATION_INTENTS,
    VIEW_INTENTS,
    ClassificationResult,
    Confidence,
    IntentType,
)

logger = logging.getLogger(__name__)

Predicate = Union[Pattern[str], Callable[[str], bool]]


@dataclass(frozen=True)
class IntentRule:
    """A named list of predicates; the score is how many of them match."""

    intent: IntentType
    predicates: Sequence[Predicate]

    def score(self, text: str) -> int:
        total = 0
        for predicate in self.predicates:
            if isinstance(predicate, re.Pattern):
                matched = predicate.search(text) is not None
            else:
                matched = bool(predicate(text))
            if matched:
                total += 1
        return total


def _p(pattern: str) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


CONFIRM_PATTERN = _p(r"^(yes|yeah|yep|yup|ok|okay|sure|confirm|do it|go ahead|proceed|haan|ha)[!.\s]*$")
REJECT_PATTERN = _p(r"^(no|nope|nah|cancel|stop|dont|abort|nahin|nahi)[!.\s]*$")

DEFAULT_RULES: Sequence[IntentRule] = (
    IntentRule(IntentType.VIEW_LOTS, (
        _p(r"\b(my\s+)?crops?\b"),
        _p(r"\b(stored|storage)\s+(crops?|produce|items?)\b"),
        _p(r"\blots?\b"),
        _p(r"\bproduce\b"),
        _p(r"\bwhat('s| is)\s+(stored|in\s+storage)\b"),
        _p(r"\bshelf\s*life\b"),
        _p(r"\bsell\s*by\b"),
        _p(r"\bspoil"),
        _p(r"\bat\s*risk\b"),
        _p(r"\bcondition\b"),
    )),
    IntentRule(IntentType.VIEW_WAREHOUSES, (
        _p(r"\b(show|list|view|see)\s+(my\s+)?warehouse"),
        _p(r"\bmy\s+warehouse"),
        _p(r"\bgodown"),
        _p(r"\bstorage\s*(facility|unit|space|capacity)"),
        _p(r"\bhow\s+much\s+space\b"),
        _p(r"\b(warehouse|storage)\s+capacity\b"),
    )),
    IntentRule(IntentType.VIEW_CONDITIONS, (
        _p(r"\btemp(erature)?\b"),
        _p(r"\bhumidity\b"),
        _p(r"\bconditions?\b"),
        _p(r"\bcheck\s+(my\s+)?(warehouse|storage)"),
        _p(r"\bis\s+(my\s+)?(warehouse|storage)\s+safe"),
        _p(r"\bhow\s+(is|are)\s+(the\s+)?(storage|warehouse)\s+conditions?\b"),
        _p(r"\bsensor"),
        _p(r"\bmonitor"),
    )),
    IntentRule(IntentType.VIEW_ALERTS, (
        _p(r"\balerts?\b"),
        _p(r"\bwarning"),
        _p(r"\bnotif"),
        _p(r"\bspoilage\b"),
        _p(r"\bbreach"),
        _p(r"\brisk"),
        _p(r"\bexpir"),
        _p(r"\boverdue\b"),
    )),
    IntentRule(IntentType.VIEW_SUMMARY, (
        _p(r"\bsummary\b"),
        _p(r"\boverview\b"),
        _p(r"\bdashboard\b"),
        _p(r"\bstatus\b"),
        _p(r"\bhow('s| is)\s+(my|everything)\b"),
        _p(r"\btotal\b"),
        _p(r"\breport\b"),
    )),
    IntentRule(IntentType.ADD_LOT, (
        _p(r"\badd\s+.{1,30}\s+(lot|crop|produce|quintals?|qtl)\b"),
        _p(r"\bstore\s+\d+\s+\w+"),
        _p(r"\b(create|register|log)\s+(a\s+)?(new\s+)?(lot|crop|produce)\b"),
        _p(r"\bput\s+\d+\s*(quintals?|qtl|kg)\b"),
        _p(r"\badd\s+\d+\s*(quintals?|qtl)"),
    )),
    IntentRule(IntentType.ADD_WAREHOUSE, (
        _p(r"\b(add|create|register|new)\s+(a\s+)?warehouse\b"),
        _p(r"\bopen\s+(a\s+)?new\s+(warehouse|godown|storage)\b"),
        _p(r"\bset\s+up\s+(a\s+)?(warehouse|storage)\b"),
    )),
    IntentRule(IntentType.UPDATE_LOT_STATUS, (
        _p(r"\bmark\s+.{1,40}\s+as\s+(sold|spoiled?|at.?risk|good|harvested?)\b"),
        _p(r"\bupdate\s+.{0,30}\s+(status|condition|lot)\b"),
        _p(r"\bchange\s+.{0,30}\s+(status|condition)\b"),
        _p(r"\bset\s+.{0,30}\s+(status|condition)\s+to\b"),
        _p(r"\blot\s+.{0,20}\s+(is\s+)?(sold|spoiled?|at.?risk|done)\b"),
    )),
    IntentRule(IntentType.DELETE_LOT, (
        _p(r"\b(delete|remove|destroy|dispose|discard)\s+(the\s+)?.{0,30}(lot|crop|produce)\b"),
        _p(r"\b(delete|remove)\s+lot\b"),
        _p(r"\b(remove|delete)\s+(crop|produce|lot)\s+(from|in|at)\b"),
        _p(r"\b(remove|delete|discard)\b"),
        _p(r"\b(remove|delete).*(lot|crop)\b"),
    )),
)


def is_mutation_intent(intent: IntentType) -> bool:
    return intent in MUTATION_INTENTS


def is_view_intent(intent: IntentType) -> bool:
    return intent in VIEW_INTENTS


class IntentClassifier:
    """Scores a message against a rule table and returns the single best intent.

    Confirm/reject phrases are tested first and short-circuit with high
    confidence. Otherwise the highest score wins; ties go to a mutation
    intent when one is tied, else to the first tied rule in table order.
    """

    def __init__(
        self,
        rules: Optional[Sequence[IntentRule]] = None,
        *,
        confirm_pattern: Pattern[str] = CONFIRM_PATTERN,
        reject_pattern: Pattern[str] = REJECT_PATTERN,
    ) -> None:
        self._rules: List[IntentRule] = list(rules if rules is not None else DEFAULT_RULES)
        self._confirm = confirm_pattern
        self._reject = reject_pattern

    @property
    def rules(self) -> List[IntentRule]:
        return list(self._rules)

    def classify(self, message: str) -> ClassificationResult:
        text = message.strip().lower()

        if self._confirm.search(text):
            return ClassificationResult(IntentType.CONFIRM, Confidence.HIGH)
        if self._reject.search(text):
            return ClassificationResult(IntentType.REJECT, Confidence.HIGH)

        scored = [(rule.intent, rule.score(text)) for rule in self._rules]
        best = max((score for _, score in scored), default=0)
        if best == 0:
            return ClassificationResult(IntentType.GENERAL, Confidence.LOW)

        tied = [intent for intent, score in scored if score == best]
        winner = next((i for i in tied if is_mutation_intent(i)), tied[0])
        confidence = Confidence.HIGH if best >= 2 else Confidence.MEDIUM
        logger.debug(
            "IntentClassifier: %s (score=%d, tied=%s)",
            winner.value, best, [i.value for i in tied],
        )
        return ClassificationResult(winner, confidence, score=best)
