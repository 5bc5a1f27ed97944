"""Motivational quotes shown beside the live timer."""

from __future__ import annotations

import random
from typing import NamedTuple


class Quote(NamedTuple):
    text: str
    author: str


QUOTES: tuple[Quote, ...] = (
    Quote("The way to get started is to quit talking and begin doing.", "Walt Disney"),
    Quote("Don't watch the clock; do what it does. Keep going.", "Sam Levenson"),
    Quote("The future depends on what you do today.", "Mahatma Gandhi"),
    Quote("Focus on being productive instead of busy.", "Tim Ferriss"),
    Quote("Until we can manage time, we can manage nothing else.", "Peter Drucker"),
    Quote("Lost time is never found again.", "Benjamin Franklin"),
    Quote(
        "The key is not to prioritize what's on your schedule, "
        "but to schedule your priorities.",
        "Stephen Covey",
    ),
    Quote("The only way around is through.", "Robert Frost"),
    Quote(
        "The most difficult thing is the decision to act, "
        "the rest is merely tenacity.",
        "Amelia Earhart",
    ),
)


def random_quote(rng: random.Random | None = None) -> Quote:
    return (rng or random).choice(QUOTES)
