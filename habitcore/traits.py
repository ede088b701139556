"""Onboarding trait derivation.

Maps the goals, capacity and preferred times a user picks during onboarding
to the four personality axes used to tune how the app talks to them:

    tone            warm / direct / playful / neutral
    focus           wins / patterns / actionable / balanced
    verbosity       concise / detailed
    accountability  gentle / honest / tough

Runs once, when onboarding completes.
"""

from __future__ import annotations

from typing import Any

from habitcore.errors import InvalidArgumentError
from habitcore.models import OnboardingAnswers, TraitProfile

SOFT_GOALS = ("mindfulness", "social")
HARD_GOALS = ("productivity", "learning")
CREATIVE_GOALS = ("creative",)


def derive_traits(answers: OnboardingAnswers | dict[str, Any] | None = None) -> TraitProfile:
    """Derive a TraitProfile from onboarding answers.

    Unknown goals are ignored. The preferred-times tiebreak only applies
    when the goals left tone and focus fully ambiguous (warm + balanced).
    """
    if answers is None:
        answers = OnboardingAnswers()
    elif isinstance(answers, dict):
        answers = OnboardingAnswers.from_dict(answers)
    elif not isinstance(answers, OnboardingAnswers):
        raise InvalidArgumentError(f"Onboarding answers must be a mapping, got {type(answers).__name__}")

    capacity = answers.capacity
    goals = answers.goals

    if capacity == "light":
        accountability = "gentle"
    elif capacity == "full":
        accountability = "tough"
    else:
        accountability = "honest"

    verbosity = "detailed" if capacity == "full" else "concise"

    soft = [g for g in SOFT_GOALS if g in goals]
    hard = [g for g in HARD_GOALS if g in goals]
    creative = [g for g in CREATIVE_GOALS if g in goals]

    if creative and not soft and not hard:
        tone = "playful"
    elif len(hard) > len(soft):
        tone = "direct"
    else:
        tone = "warm"

    if len(hard) > len(soft):
        focus = "patterns"
    elif len(soft) > len(hard):
        focus = "wins"
    else:
        focus = "balanced"

    # Morning-only users lean towards structure.
    if tone == "warm" and focus == "balanced" and list(answers.preferred_times) == ["morning"]:
        tone = "direct"

    return TraitProfile(tone=tone, focus=focus, verbosity=verbosity, accountability=accountability)
