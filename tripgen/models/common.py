"""Common types and enums shared across all models."""

from enum import Enum


class Tier(str, Enum):
    """Subscription tier of an account."""

    TRIAL = "TRIAL"
    PASS = "PASS"
    YEARLY = "YEARLY"
    TOPUP = "TOPUP"

    @classmethod
    def parse(cls, value: str | None) -> "Tier":
        """Parse a stored tier string, treating unknown values as TRIAL."""
        if not value:
            return cls.TRIAL
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.TRIAL


class TravelStyle(str, Enum):
    """Pacing/spending style of the trip."""

    backpacker = "backpacker"
    balanced = "balanced"
    luxury = "luxury"


class TransportMode(str, Enum):
    """Preferred way of getting around at the destination."""

    public_transit = "public_transit"
    car = "car"
    walking = "walking"
    taxi = "taxi"
    mixed = "mixed"


class Purpose(str, Enum):
    """Trip purpose used to weight time allocation."""

    sightseeing = "sightseeing"
    shopping = "shopping"
    food = "food"
    relax = "relax"
    nature = "nature"
    history = "history"
