"""Engine error types."""


class CardPlayError(Exception):
    """Base class for card-play engine errors."""

    pass


class EmptyShoeError(CardPlayError):
    """Raised when a card is dealt from an exhausted shoe.

    This is an invariant violation: round-boundary reshuffling should make it
    impossible. The only valid recovery is to abort the round.
    """

    pass


class ConfigurationError(CardPlayError, ValueError):
    """Raised when a session or shoe is constructed with malformed settings."""

    pass
