"""Registry for tournament formats."""

from ..models import TournamentFormat
from .base import TournamentFormatStrategy
from .bracket import BracketFormat
from .championship import ChampionshipFormat
from .king_of_the_hill import KingOfTheHillFormat


class FormatRegistry:
    """Registry for managing available tournament formats."""

    def __init__(
        self,
        match_debate_rounds: int = 3,
        finals_debate_rounds: int = 3,
        elimination_fraction: float = 0.25,
    ):
        self._formats: dict[str, TournamentFormatStrategy] = {}
        self._register_built_in_formats(
            match_debate_rounds, finals_debate_rounds, elimination_fraction
        )

    def _register_built_in_formats(
        self,
        match_debate_rounds: int,
        finals_debate_rounds: int,
        elimination_fraction: float,
    ):
        """Register the built-in tournament formats."""
        self.register(BracketFormat(match_debate_rounds))
        self.register(ChampionshipFormat(match_debate_rounds))
        self.register(
            KingOfTheHillFormat(
                match_debate_rounds,
                elimination_fraction=elimination_fraction,
                finals_debate_rounds=finals_debate_rounds,
            )
        )

    def register(self, strategy: TournamentFormatStrategy) -> None:
        """Register a tournament format strategy."""
        self._formats[strategy.name] = strategy

    def get_format(self, name: str | TournamentFormat) -> TournamentFormatStrategy:
        """Get the strategy for a format."""
        if isinstance(name, TournamentFormat):
            name = name.value
        if name not in self._formats:
            raise ValueError(
                f"Unknown format: {name}. Available: {list(self._formats.keys())}"
            )
        return self._formats[name]

    def list_formats(self) -> list[str]:
        """List all available format names."""
        return list(self._formats.keys())

    def get_format_descriptions(self) -> dict[str, dict[str, str]]:
        """Get format names, display names, and descriptions."""
        return {
            name: {
                "display_name": strategy.display_name,
                "description": strategy.description,
            }
            for name, strategy in self._formats.items()
        }


# Global registry instance
format_registry = FormatRegistry()
