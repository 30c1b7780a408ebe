"""Per-session rule configuration."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, TypeVar

from cardplay.dealer import DealerRuleset
from cardplay.exceptions import ConfigurationError
from cardplay.outcome import PayoutRuleset

E = TypeVar("E", bound=Enum)

# Accepted spellings for each option.
_KEY_ALIASES = {
    "decks": "decks",
    "num_decks": "decks",
    "numberOfDecks": "decks",
    "dealer_ruleset": "dealer_ruleset",
    "dealerRuleset": "dealer_ruleset",
    "payout_ruleset": "payout_ruleset",
    "payoutRuleset": "payout_ruleset",
}


def _coerce_enum(enum_type: type[E], value: Any, option: str) -> E:
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_type:
            if normalized in (member.value, member.name.lower()):
                return member
    choices = ", ".join(member.value for member in enum_type)
    raise ConfigurationError(f"{option} must be one of: {choices} (got {value!r})")


@dataclass(frozen=True)
class SessionConfig:
    """
    Rules chosen when a game session is created.

    Invalid values are rejected here rather than replaced with defaults.
    """

    decks: int = 6
    dealer_ruleset: DealerRuleset = DealerRuleset.STANDARD
    payout_ruleset: PayoutRuleset = PayoutRuleset.STANDARD

    def __post_init__(self) -> None:
        """Validate and normalize option values."""
        if isinstance(self.decks, bool) or not isinstance(self.decks, int):
            raise ConfigurationError(f"decks must be an integer (got {self.decks!r})")
        if self.decks < 1:
            raise ConfigurationError(f"decks must be at least 1 (got {self.decks})")

        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(
            self,
            "dealer_ruleset",
            _coerce_enum(DealerRuleset, self.dealer_ruleset, "dealer_ruleset"),
        )
        object.__setattr__(
            self,
            "payout_ruleset",
            _coerce_enum(PayoutRuleset, self.payout_ruleset, "payout_ruleset"),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SessionConfig":
        """
        Build a config from ``{decks, dealerRuleset, payoutRuleset}``.

        Snake_case keys are accepted too. Unknown keys are an error.
        """
        options: dict[str, Any] = {}
        for key, value in data.items():
            if key not in _KEY_ALIASES:
                raise ConfigurationError(f"Unknown session option: {key!r}")
            options[_KEY_ALIASES[key]] = value
        return cls(**options)

    @classmethod
    def for_mode(
        cls,
        mode: str,
        decks: int = 6,
        dealer_ruleset: Any = None,
        payout_ruleset: Any = None,
    ) -> "SessionConfig":
        """
        Rules for one of the named game modes.

        Rulesets given explicitly override the preset.
        """
        presets = {
            "classic": (DealerRuleset.CONSERVATIVE, PayoutRuleset.EASY),
            "standard": (DealerRuleset.STANDARD, PayoutRuleset.STANDARD),
            "high_stakes": (DealerRuleset.STANDARD, PayoutRuleset.STANDARD),
            "tournaments": (DealerRuleset.STANDARD, PayoutRuleset.STANDARD),
            "challenges": (DealerRuleset.STANDARD, PayoutRuleset.STANDARD),
            "all_in": (DealerRuleset.AGGRESSIVE, PayoutRuleset.HARD),
        }
        key = mode.strip().lower().replace("-", "_")
        if key not in presets:
            raise ConfigurationError(
                f"Unknown game mode {mode!r}; expected one of: {', '.join(presets)}"
            )
        preset_dealer, preset_payout = presets[key]
        return cls(
            decks=decks,
            dealer_ruleset=preset_dealer if dealer_ruleset is None else dealer_ruleset,
            payout_ruleset=preset_payout if payout_ruleset is None else payout_ruleset,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "decks": self.decks,
            "dealer_ruleset": self.dealer_ruleset.value,
            "payout_ruleset": self.payout_ruleset.value,
        }
