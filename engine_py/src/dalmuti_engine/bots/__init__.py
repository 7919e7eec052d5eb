"""
AI players: candidate discovery and difficulty-tiered play selection.
"""

from .base import BotAction, find_playable_sets, lead_set
from .strategy import choose_action, choose_tax_cards, select_tax_cards

__all__ = [
    "BotAction",
    "choose_action",
    "choose_tax_cards",
    "find_playable_sets",
    "lead_set",
    "select_tax_cards",
]
