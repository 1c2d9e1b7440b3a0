from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Suit(Enum):
    CLUBS = "Clubs"
    DIAMONDS = "Diamonds"
    HEARTS = "Hearts"
    SPADES = "Spades"


class Rank(Enum):
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"


class Color(Enum):
    RED = "red"
    BLACK = "black"


class Phase(Enum):
    ATTACK = "attack"
    WEAKEN_OPPONENT = "weaken_opponent"
    PURCHASE = "purchase"
    HEART_BONUS = "heart_bonus"


RANK_VALUES: dict[Rank, int] = {
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 10,
    Rank.QUEEN: 10,
    Rank.KING: 10,
    Rank.ACE: 1,
}

SUIT_COLORS: dict[Suit, Color] = {
    Suit.CLUBS: Color.BLACK,
    Suit.DIAMONDS: Color.RED,
    Suit.HEARTS: Color.RED,
    Suit.SPADES: Color.BLACK,
}

SUIT_SYMBOLS: dict[Suit, str] = {
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
    Suit.SPADES: "♠",
}

# Presentation order only; valuation uses RANK_VALUES.
SUIT_ORDER: tuple[Suit, ...] = (Suit.CLUBS, Suit.DIAMONDS, Suit.HEARTS, Suit.SPADES)
RANK_ORDER: tuple[Rank, ...] = tuple(Rank)


@dataclass
class Card:
    """A single playing card. Identity is (suit, rank); only the face flag changes."""

    suit: Suit
    rank: Rank
    is_face_up: bool = False

    @property
    def id(self) -> str:
        return card_id(self.suit, self.rank)

    @property
    def color(self) -> Color:
        return SUIT_COLORS[self.suit]

    @property
    def value(self) -> int:
        return RANK_VALUES[self.rank]

    def label(self) -> str:
        return f"{self.rank.value}{SUIT_SYMBOLS[self.suit]}"


def card_id(suit: Suit, rank: Rank) -> str:
    return f"{rank.value}-of-{suit.value}"


def parse_card_id(cid: str) -> tuple[Suit, Rank]:
    rank_raw, _, suit_raw = cid.partition("-of-")
    try:
        return Suit(suit_raw), Rank(rank_raw)
    except ValueError as e:
        raise ValueError(f"Not a card id: {cid!r}") from e


def rank_value(card: Card | None) -> int:
    if card is None:
        return 0
    return RANK_VALUES[card.rank]


def village_sort_key(card: Card) -> tuple[int, int]:
    # suit ascending, rank descending
    return (SUIT_ORDER.index(card.suit), -RANK_ORDER.index(card.rank))
