"""
Hugoland - Trivia Combat Progression Engine

A deterministic, local game state engine for a single-player trivia RPG.
The engine owns the player's progress and provides:
- A serializable state model
- Pure transition functions dispatched through a reducer
- Combat, economy, research and achievement rules
- A session store that mirrors state to persistence
"""

__version__ = "0.1.0"
