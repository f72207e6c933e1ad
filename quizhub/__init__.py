"""
Local Quiz Hub.

Grading and adaptive question selection for JSON question banks:
- questions: Question bank schema, validation and registry
- grading: Type-dispatched answer grading with fuzzy text matching
- adaptive: Elo skill estimation and weighted question selection
- session: Quiz session lifecycle and grading
- profile: Per-user history and skill levels
"""

__version__ = "1.0.0"
