"""Pattern-based intent classifier.

Rules are plain data: an ordered list of ``(predicate, intent)`` pairs
evaluated first-match-wins.  Anything no rule claims is a
:attr:`~parley.models.enums.Intent.STATEMENT`, which never triggers
generation.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from parley.intent.base import IntentClassifier, IntentResult
from parley.models.enums import Intent

logger = logging.getLogger("parley.intent")

MIN_CHARS = 10
MIN_WORDS = 2
MIN_WORDS_FOR_QUESTION = 3
MIN_WORDS_FOR_EXPLAIN = 6

_END = r"[\s.,!?]*$"


@dataclass(frozen=True)
class IntentInput:
    """Normalized views of one utterance shared by all rule predicates."""

    text: str
    lower: str
    word_count: int
    body: str
    """Lowercased text with leading discourse markers removed."""


@dataclass(frozen=True)
class IntentRule:
    """One classification rule."""

    name: str
    intent: Intent
    predicate: Callable[[IntentInput], bool]


def _any(patterns: Sequence[re.Pattern[str]], text: str) -> bool:
    return any(p.search(text) for p in patterns)


_DISCOURSE_PREFIX = re.compile(
    r"^(?:(?:so|and|but|or|well|okay|ok|yeah|like|um+|uh+)[\s,]+)*"
    r"(?:(?:basically|actually|honestly|essentially|generally|obviously)[\s,]+)?"
)

_CONTINUE_START = [
    re.compile(r"^(what i mean is|what i('m| am) (saying|trying to say) is)\b"),
    re.compile(r"^(in other words|to clarify|let me explain|let me rephrase)\b"),
    re.compile(r"^(and (also|then)|but (also|then)|or (maybe|perhaps))\s"),
]

_CONTINUE_END = [
    re.compile(r"\b(and|but|or|so|because|since|although|plus)[\s,.…]*$"),
    re.compile(r"\b(what i mean is|in other words|for example|such as)[\s,.…]*$"),
]

_FILLER = [
    re.compile(r"^(uh+|um+|hmm+|ah+|er+|oh+)([\s,]+(uh+|um+|hmm+|ah+|er+|oh+))*" + _END),
    re.compile(r"^(you know|i mean|basically|actually|honestly|literally)" + _END),
    re.compile(r"^(let me think|let me see|give me a (second|moment|sec|minute))" + _END),
]

_THINKING = [
    re.compile(
        r"^(that'?s a (good|great|interesting) (question|point)|interesting|good question"
        r"|great question)" + _END
    ),
    re.compile(r"^(hmm+|well+)" + _END),
    re.compile(
        r"^(let me think about (that|this|it)|i need to think about (that|this|it))" + _END
    ),
]

_ACKNOWLEDGE = [
    re.compile(
        r"^((yes|yeah|yep|no|nope|sure|right|correct|exactly|got it|i see|understood"
        r"|makes sense|thank you|thanks|great|good|perfect|awesome|okay|ok)[\s.,!?]*)+$"
    ),
]

_CLARIFY = [
    re.compile(
        r"^(sorry|pardon)( me)?[\s,.!?]*($|what\b|can you\b|could you\b|say that\b)"
    ),
    re.compile(
        r"^(what do you mean|can you repeat|could you repeat"
        r"|i didn'?t (catch|hear|understand))"
    ),
    re.compile(r"^(could you clarify|can you clarify|what was that|come again)"),
]

_EXPLICIT_REQUEST = re.compile(
    r"\b(tell me|show me|explain|describe|help me|walk me through|give me|need to know"
    r"|want to know|wondering|curious about|can you|could you|would you)\b"
)

_WH_WORD = re.compile(r"\b(what|how|why|when|where|who|which)\b")

_EMBEDDED_QUESTION = re.compile(
    r"\b(what|how|why|when|where|who|which) "
    r"(is|are|was|were|do|does|did|can|could|would|should)\b"
)

_STATEMENT = [
    re.compile(
        r"^(it|this|that|they|these|those|he|she|we|i|you)\s+"
        r"(is|are|was|were|has|have|had|can|could|will|would|should|think|believe|used)\b"
    ),
    re.compile(
        r"^(used for|primarily used|mainly used|designed for|built for|made for|intended for"
        r"|known for)\b"
    ),
    re.compile(
        r"^(using|running|working|building|creating|developing|implementing|providing"
        r"|supporting|enabling)\b"
    ),
    re.compile(
        r"^(?!(what|how|why|when|where|who|which|whose|can|could|would|should|will|do|does"
        r"|did|is|are|was|were|have|has|tell|explain|describe|give|show|walk|please)\b)"
        r"(?:[a-z][\w+#'-]*\s+){1,3}(is|are|was|were|has|have)\b"
    ),
]

_EXPLAIN_REQUEST = [
    re.compile(
        r"^(tell me|explain|describe|walk me through|talk me through|elaborate|give me"
        r"|show me)\b"
    ),
    re.compile(
        r"^(can|could|would|will) you (please )?(explain|describe|tell me|walk me through"
        r"|elaborate|talk about|give me|show me)\b"
    ),
]

_QUESTION = [
    re.compile(r"\?$"),
    re.compile(r"^(what|how|why|when|where|who|which|whose)\b"),
    re.compile(r"^(can|could|would|will|do|did|does|have|has|are|is|was|were|should)\s+\w+"),
    _EMBEDDED_QUESTION,
]


def _too_short(u: IntentInput) -> bool:
    return len(u.text) < MIN_CHARS or u.word_count < MIN_WORDS


def _is_continuation(u: IntentInput) -> bool:
    return _any(_CONTINUE_START, u.lower) or _any(_CONTINUE_END, u.lower)


def _is_statement(u: IntentInput) -> bool:
    if u.text.endswith("?") or _EXPLICIT_REQUEST.search(u.lower):
        return False
    if _EMBEDDED_QUESTION.search(u.lower):
        return False
    return _any(_STATEMENT, u.body)


def _is_explain_request(u: IntentInput) -> bool:
    return u.word_count >= MIN_WORDS_FOR_QUESTION and _any(_EXPLAIN_REQUEST, u.lower)


def _is_question(u: IntentInput) -> bool:
    return u.word_count >= MIN_WORDS_FOR_QUESTION and _any(_QUESTION, u.lower)


def _is_long_request(u: IntentInput) -> bool:
    return u.word_count >= MIN_WORDS_FOR_EXPLAIN and bool(
        _EXPLICIT_REQUEST.search(u.lower) or _WH_WORD.search(u.lower)
    )


DEFAULT_RULES: tuple[IntentRule, ...] = (
    IntentRule("too short", Intent.FILLER, _too_short),
    IntentRule("continuation marker", Intent.CONTINUE, _is_continuation),
    IntentRule("filler", Intent.FILLER, lambda u: _any(_FILLER, u.lower)),
    IntentRule("thinking aloud", Intent.THINKING, lambda u: _any(_THINKING, u.lower)),
    IntentRule("acknowledgment", Intent.ACKNOWLEDGE, lambda u: _any(_ACKNOWLEDGE, u.lower)),
    IntentRule("clarification request", Intent.CLARIFY, lambda u: _any(_CLARIFY, u.lower)),
    IntentRule("declarative statement", Intent.STATEMENT, _is_statement),
    IntentRule("explicit request", Intent.EXPLAIN, _is_explain_request),
    IntentRule("interrogative", Intent.QUESTION, _is_question),
    IntentRule("long request", Intent.EXPLAIN, _is_long_request),
)


def normalize(text: str) -> IntentInput:
    trimmed = text.strip()
    lower = trimmed.lower()
    return IntentInput(
        text=trimmed,
        lower=lower,
        word_count=len(trimmed.split()),
        body=_DISCOURSE_PREFIX.sub("", lower),
    )


class PatternIntentClassifier(IntentClassifier):
    """Ordered regex rules; the first matching rule decides the intent."""

    def __init__(
        self,
        rules: Sequence[IntentRule] = DEFAULT_RULES,
        *,
        fallback: Intent = Intent.STATEMENT,
    ) -> None:
        self._rules = tuple(rules)
        self._fallback = fallback

    @property
    def name(self) -> str:
        return "patterns"

    @property
    def rules(self) -> tuple[IntentRule, ...]:
        return self._rules

    def match(self, text: str) -> IntentRule | None:
        """Return the first rule matching *text*, or None."""
        u = normalize(text)
        for rule in self._rules:
            if rule.predicate(u):
                return rule
        return None

    def classify(self, text: str) -> Intent:
        rule = self.match(text)
        return rule.intent if rule is not None else self._fallback

    def describe(self, text: str) -> IntentResult:
        rule = self.match(text)
        if rule is None:
            result = IntentResult.for_intent(self._fallback, "no rule matched")
        else:
            result = IntentResult.for_intent(rule.intent, rule.name)
        logger.debug("Intent %s for %r (%s)", result.intent, text[:50], result.reason)
        return result


_default = PatternIntentClassifier()


def classify_intent(text: str) -> Intent:
    """Classify *text* with the default rule set."""
    return _default.classify(text)
