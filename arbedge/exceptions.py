"""Exception types raised outside the arbitrage engine."""


class ArbitrageEdgeError(Exception):
    """Base class for service errors."""


class UnknownSportError(ArbitrageEdgeError, ValueError):
    """Requested sport is not supported."""

    def __init__(self, sport: str):
        self.sport = sport
        super().__init__(f"Invalid sport: {sport}")


class OddsFeedError(ArbitrageEdgeError):
    """The upstream odds source could not deliver matches."""


class OddsFeedNotConfiguredError(OddsFeedError):
    """No API key is configured for the upstream odds source."""
