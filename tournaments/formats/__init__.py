"""Tournament format definitions and implementations."""

from .base import (
    EliminationResult,
    PlannedMatch,
    RoundContext,
    TournamentFormatStrategy,
)
from .bracket import BracketFormat
from .championship import ChampionshipFormat
from .king_of_the_hill import KingOfTheHillFormat
from .registry import FormatRegistry, format_registry

__all__ = [
    'EliminationResult',
    'PlannedMatch',
    'RoundContext',
    'TournamentFormatStrategy',
    'BracketFormat',
    'ChampionshipFormat',
    'KingOfTheHillFormat',
    'FormatRegistry',
    'format_registry'
]
