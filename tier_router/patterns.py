"""Pattern tables used by the classifiers.

Each table is an ordered tuple of matchers. Order matters: classifiers take
the first match and report its label in the decision reason.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Matcher:
    """A compiled pattern and the label reported when it matches."""

    pattern: re.Pattern[str]
    label: str

    def test(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _m(regex: str, label: str) -> Matcher:
    return Matcher(re.compile(regex, re.IGNORECASE), label)


def first_match(matchers: tuple[Matcher, ...], text: str) -> Matcher | None:
    """Return the first matcher that accepts ``text``, or None."""
    for matcher in matchers:
        if matcher.test(text):
            return matcher
    return None


# Signals that the prompt needs the user's data or an external action.
# Any match routes to quality. Overbroad matches are acceptable, misses are not.
TOOL_SIGNALS: tuple[Matcher, ...] = (
    _m(r"\b(?:my|mine|our|ours)\b", "possessive reference"),
    _m(
        r"\b(?:is there|are there|do i have|do we have|did i|have i|did we|"
        r"status of|is (?:it|the \w+) (?:running|up|down|working|done))\b",
        "state question",
    ),
    _m(
        r"\b(?:send|check|read|search|run|delete|create|open|fetch|download|upload|"
        r"install|deploy|schedule|remind|remove|restart|book|look up|browse)\b",
        "action verb",
    ),
    _m(
        r"\b(?:email|emails|inbox|calendar|slack|github|gmail|discord|telegram|"
        r"whatsapp|cron|crontab|notion|jira|spreadsheet|database|server|repo|"
        r"repository|reminders?|todos?)\b",
        "integration",
    ),
    _m(
        r"^\s*(?:hi|hello|hey|yo|thanks|thank you|good (?:morning|afternoon|evening|night))\b",
        "conversational",
    ),
    _m(
        r"\b(?:today|tomorrow|yesterday|tonight|right now|this (?:week|month|morning|"
        r"afternoon|evening)|next (?:week|month)|last (?:week|night|month)|latest|"
        r"currently|recently)\b",
        "time-relative",
    ),
)

# Optional politeness before the verb.
_LEAD = r"^\s*(?:please\s+|can you\s+|could you\s+)?"

# Multi-item summaries need more reasoning than a single-text summary.
_MULTI = r"(?:these|multiple|all|each|both|several)\b"

# Pure text operations on inline content.
SIMPLE_TRANSFORMS: tuple[Matcher, ...] = (
    _m(_LEAD + r"translate\b", "translate"),
    _m(_LEAD + r"(?:summari[sz]e\b(?!\s+" + _MULTI + r")|tl;?dr\b)", "summarize"),
    _m(_LEAD + r"(?:rewrite|rephrase|paraphrase|reword)\b", "rewrite"),
    _m(_LEAD + r"format\b", "format"),
    _m(_LEAD + r"convert\b", "convert"),
    _m(_LEAD + r"(?:classify|categori[sz]e)\b", "classify"),
    _m(_LEAD + r"extract\b", "extract"),
    _m(r"^\s*(?:is|are|does|do)\s+(?:this|these|the following|it)\b", "yes/no question"),
    _m(_LEAD + r"(?:shorten|simplify|expand|condense)\b", "shorten/simplify/expand"),
    _m(
        _LEAD + r"(?:fix|correct)\s+(?:the\s+)?(?:spelling|grammar|typos?)\b|"
        + _LEAD + r"proofread\b",
        "fix spelling/grammar",
    ),
)

# Text operations that need more reasoning.
MEDIUM_TRANSFORMS: tuple[Matcher, ...] = (
    _m(_LEAD + r"(?:compare|contrast)\b", "compare"),
    _m(_LEAD + r"analy[sz]e\b", "analyze"),
    _m(_LEAD + r"explain\b", "explain"),
    _m(_LEAD + r"summari[sz]e\s+" + _MULTI, "multi-item summarize"),
    _m(_LEAD + r"(?:outline|give me an overview|overview of|break down|walk me through)\b", "outline"),
)


# --- Legacy keyword tables (substring matching on the lowercased prompt) ---

SIMPLE_KEYWORDS: tuple[str, ...] = (
    "summarize",
    "classify",
    "format",
    "extract",
    "list",
    "rewrite",
    "translate",
    "yes or no",
    "true or false",
    "count",
    "convert",
    "simplify",
    "shorten",
    "expand",
    "paraphrase",
)

COMPLEX_INDICATORS: tuple[str, ...] = (
    "step by step",
    "first...then",
    "first,",
    "then,",
    "analyze and",
    "compare and",
    "write code",
    "implement",
    "debug",
    "refactor",
    "explain why",
    "explain how",
    "reason about",
    "think through",
    "pros and cons",
    "advantages and disadvantages",
    "evaluate",
    "critique",
    "review this code",
    "fix this code",
    "create a",
    "build a",
    "design a",
    "architect",
    "optimize",
    "improve",
)

MEDIUM_INDICATORS: tuple[str, ...] = (
    "summarize multiple",
    "summarize these",
    "compare these",
    "compare the",
    "analyze this",
    "analyze the",
    "explain this",
    "explain the",
    "review this",
    "review the",
    "what does this mean",
    "describe the",
    "outline the",
    "list the differences",
    "break down",
    "walk me through",
    "give me an overview",
)


def find_substring(needles: tuple[str, ...], haystack: str) -> str | None:
    """Return the first needle contained in ``haystack``."""
    for needle in needles:
        if needle in haystack:
            return needle
    return None
