"""Rule-based prompt classification.

Three classifiers live here:

- ``classify``: the primary three-tier classifier. Tool signals force the
  quality tier, recognised text transforms with inline content go to the
  local or cheap tier, everything else defaults to quality.
- ``classify_task``: legacy two-tier (local/cloud) keyword classifier.
- ``classify_task_three_tier``: legacy keyword classifier with length-based
  defaults.

All of them are pure: no I/O, no state, and they never raise.
"""

from __future__ import annotations

import re

from tier_router.models import Confidence, Decision, Destination, RoutingDecision, Tier
from tier_router.patterns import (
    COMPLEX_INDICATORS,
    MEDIUM_INDICATORS,
    MEDIUM_TRANSFORMS,
    SIMPLE_KEYWORDS,
    SIMPLE_TRANSFORMS,
    TOOL_SIGNALS,
    find_substring,
    first_match,
)

DEFAULT_MAX_LOCAL_PROMPT_LENGTH = 500
DEFAULT_THREE_TIER_MAX_LOCAL_PROMPT_LENGTH = 2000

# Inline-content thresholds.
COMMAND_WINDOW = 100
MIN_INLINE_CHARS = 20

# Length defaults for the legacy three-tier classifier.
SHORT_PROMPT_CHARS = 300
MEDIUM_PROMPT_CHARS = 2000

NO_PATTERN_REASON = "no clear transform pattern — default to full capability"

_QUOTED = re.compile(r'["“`]([^"”`]{%d,})["”`]' % MIN_INLINE_CHARS)


def _colon_index(prompt: str) -> int:
    """Index of the first colon inside the command window, or -1."""
    idx = prompt.find(":")
    return idx if 0 <= idx < COMMAND_WINDOW else -1


def has_inline_content(prompt: str) -> bool:
    """True if the prompt carries text for a transform to act on."""
    colon = _colon_index(prompt)
    if colon >= 0 and len(prompt[colon + 1:]) > MIN_INLINE_CHARS:
        return True
    if _QUOTED.search(prompt):
        return True
    return len(prompt) > COMMAND_WINDOW


def command_portion(prompt: str) -> str:
    """The instruction part of a transform prompt, without its payload.

    Cut at the colon or the quoted text, whichever starts first.
    """
    cuts = []
    colon = _colon_index(prompt)
    if colon >= 0:
        cuts.append(colon)
    quoted = _QUOTED.search(prompt)
    if quoted:
        cuts.append(quoted.start())
    if cuts:
        return prompt[:min(cuts)]
    return prompt[:COMMAND_WINDOW]


def classify(prompt: str, max_local_prompt_length: int = DEFAULT_THREE_TIER_MAX_LOCAL_PROMPT_LENGTH) -> Decision:
    """Classify a prompt into local, cheap or quality."""
    prompt_length = len(prompt)
    inline = has_inline_content(prompt)

    simple = first_match(SIMPLE_TRANSFORMS, prompt) if inline else None
    medium = first_match(MEDIUM_TRANSFORMS, prompt) if inline and simple is None else None

    # Payload text must not trip tool signals on its own.
    checked = command_portion(prompt) if (simple or medium) else prompt

    signal = first_match(TOOL_SIGNALS, checked)
    if signal is not None:
        return Decision(Tier.QUALITY, f"Tool signal: {signal.label}", prompt_length, Confidence.HIGH)

    if simple is not None:
        if prompt_length <= max_local_prompt_length:
            return Decision(
                Tier.LOCAL,
                f"Simple transform with inline content: {simple.label}",
                prompt_length,
                Confidence.HIGH,
            )
        return Decision(
            Tier.CHEAP,
            f"Simple transform but too long for local ({prompt_length} > {max_local_prompt_length}): {simple.label}",
            prompt_length,
            Confidence.MEDIUM,
        )

    if medium is not None:
        return Decision(
            Tier.CHEAP,
            f"Medium transform with inline content: {medium.label}",
            prompt_length,
            Confidence.MEDIUM,
        )

    return Decision(Tier.QUALITY, NO_PATTERN_REASON, prompt_length, Confidence.HIGH)


def classify_task(prompt: str, max_local_prompt_length: int = DEFAULT_MAX_LOCAL_PROMPT_LENGTH) -> RoutingDecision:
    """Legacy two-tier classification: local or cloud."""
    normalized = prompt.lower().strip()
    prompt_length = len(prompt)

    # Conservative: any complex indicator means cloud
    indicator = find_substring(COMPLEX_INDICATORS, normalized)
    if indicator:
        return RoutingDecision(
            Destination.CLOUD, f'Contains complex indicator: "{indicator}"', prompt_length, Confidence.HIGH,
        )

    keyword = find_substring(SIMPLE_KEYWORDS, normalized)
    fits = prompt_length <= max_local_prompt_length

    if fits and keyword:
        return RoutingDecision(
            Destination.LOCAL, f'Short prompt with simple keyword: "{keyword}"', prompt_length, Confidence.HIGH,
        )
    if fits:
        return RoutingDecision(
            Destination.LOCAL, "Short prompt without complex indicators", prompt_length, Confidence.MEDIUM,
        )
    if keyword:
        return RoutingDecision(
            Destination.LOCAL, f'Long prompt but has simple keyword: "{keyword}"', prompt_length, Confidence.LOW,
        )
    return RoutingDecision(
        Destination.CLOUD, "Long prompt without simple task indicators", prompt_length, Confidence.MEDIUM,
    )


def classify_task_three_tier(
    prompt: str, max_local_prompt_length: int = DEFAULT_MAX_LOCAL_PROMPT_LENGTH,
) -> Decision:
    """Legacy keyword three-tier classification with length-based defaults.

    Priority: complex indicator, simple keyword within the length limit,
    medium indicator, then prompt length (<=300 local, <=2000 cheap, else quality).
    """
    normalized = prompt.lower().strip()
    prompt_length = len(prompt)

    indicator = find_substring(COMPLEX_INDICATORS, normalized)
    if indicator:
        return Decision(Tier.QUALITY, f'Complex task: "{indicator}"', prompt_length, Confidence.HIGH)

    if prompt_length <= max_local_prompt_length:
        keyword = find_substring(SIMPLE_KEYWORDS, normalized)
        if keyword:
            return Decision(Tier.LOCAL, f'Simple task with keyword: "{keyword}"', prompt_length, Confidence.HIGH)

    indicator = find_substring(MEDIUM_INDICATORS, normalized)
    if indicator:
        return Decision(Tier.CHEAP, f'Medium complexity: "{indicator}"', prompt_length, Confidence.MEDIUM)

    if prompt_length <= SHORT_PROMPT_CHARS:
        return Decision(Tier.LOCAL, "Short prompt", prompt_length, Confidence.MEDIUM)
    if prompt_length <= MEDIUM_PROMPT_CHARS:
        return Decision(Tier.CHEAP, "Medium-length prompt", prompt_length, Confidence.LOW)
    return Decision(Tier.QUALITY, "Long/complex prompt", prompt_length, Confidence.LOW)
