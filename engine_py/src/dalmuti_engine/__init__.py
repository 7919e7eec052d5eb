"""
Dalmuti game engine: deck, rules, state machine, AI and room coordination.
"""

__version__ = "1.0.0"
