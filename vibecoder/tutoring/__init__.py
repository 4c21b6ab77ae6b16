#!/usr/bin/env python3
"""
Tutoring state machine: judges the kid's prompts, simulates runs of the
generated code and tracks curriculum progress.
"""

from .state import (
    GuideFocus,
    TutoringPhase,
    TutoringState,
    ChatMessage,
    VisualState,
    SessionSnapshot,
    LevelProgress,
)
from .engine import TutoringEngine, CallTicket, NEXT_STEP_DELAY

__all__ = [
    'GuideFocus',
    'TutoringPhase',
    'TutoringState',
    'ChatMessage',
    'VisualState',
    'SessionSnapshot',
    'LevelProgress',
    'TutoringEngine',
    'CallTicket',
    'NEXT_STEP_DELAY',
]
