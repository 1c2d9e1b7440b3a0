from __future__ import annotations

import random
from dataclasses import dataclass

from .types import Card, Rank, Suit

TWOS_THREES = frozenset({Rank.TWO, Rank.THREE})
FOURS_SIXES = frozenset({Rank.FOUR, Rank.FIVE, Rank.SIX})
SEVENS_TENS = frozenset({Rank.SEVEN, Rank.EIGHT, Rank.NINE, Rank.TEN})
FACE_CARDS = frozenset({Rank.JACK, Rank.QUEEN, Rank.KING})
ACES = frozenset({Rank.ACE})


@dataclass
class DeckPiles:
    twos_threes: list[Card]
    fours_sixes: list[Card]
    sevens_tens: list[Card]
    face_cards: list[Card]
    aces: list[Card]

    def all_cards(self) -> list[Card]:
        return [*self.twos_threes, *self.fours_sixes, *self.sevens_tens, *self.face_cards, *self.aces]


def full_deck() -> list[Card]:
    return [Card(suit=s, rank=r, is_face_up=False) for s in Suit for r in Rank]


def build_deck(rng: random.Random) -> DeckPiles:
    """Create the 52 cards and split them into the five rank-tier piles.

    Each pile is shuffled independently with `rng`.
    """
    cards = full_deck()
    piles = DeckPiles(
        twos_threes=[c for c in cards if c.rank in TWOS_THREES],
        fours_sixes=[c for c in cards if c.rank in FOURS_SIXES],
        sevens_tens=[c for c in cards if c.rank in SEVENS_TENS],
        face_cards=[c for c in cards if c.rank in FACE_CARDS],
        aces=[c for c in cards if c.rank in ACES],
    )
    for pile in (piles.twos_threes, piles.fours_sixes, piles.sevens_tens, piles.face_cards, piles.aces):
        rng.shuffle(pile)
    return piles
