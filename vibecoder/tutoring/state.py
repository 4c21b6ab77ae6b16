#!/usr/bin/env python3
"""
State management for the tutoring session.
Tracks level/step progress, chat history, guide focus, the code buffer and
the visual history.
"""

import itertools
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
from enum import Enum

from ..contracts import DrawingCommand
from ..curriculum import Level, Step


class GuideFocus(Enum):
    """Which control should attract the user next"""
    AWAITING_INPUT = 'input'          # Chat box
    AWAITING_EXECUTION = 'run'        # Run button
    AWAITING_FINISH = 'finish'        # Finish button


class TutoringPhase(Enum):
    """Phases of one play session"""
    IDLE = 'idle'
    AWAITING_JUDGEMENT = 'awaiting_judgement'
    JUDGED_COMPLETE = 'judged_complete'
    JUDGED_INCOMPLETE = 'judged_incomplete'
    EXECUTING = 'executing'
    EXECUTION_SUCCEEDED = 'execution_succeeded'
    EXECUTION_FAILED = 'execution_failed'
    FINISHED = 'finished'


_message_ids = itertools.count(1)


@dataclass(frozen=True)
class ChatMessage:
    """A single chat message"""
    role: str                            # user|model
    text: str
    code: Optional[str] = None           # Code synthesized by the tutor
    is_correct: Optional[bool] = None    # Did this message solve the step?
    visual_action: Optional[str] = None
    id: int = field(default_factory=lambda: next(_message_ids))


class VisualState:
    """Append-only history of complete-frame batches"""

    def __init__(self):
        self._batches: List[Tuple[DrawingCommand, ...]] = []

    def append(self, commands: Sequence[DrawingCommand]) -> None:
        self._batches.append(tuple(commands))

    @property
    def batches(self) -> Tuple[Tuple[DrawingCommand, ...], ...]:
        return tuple(self._batches)

    def latest(self) -> Optional[Tuple[DrawingCommand, ...]]:
        return self._batches[-1] if self._batches else None

    def __len__(self) -> int:
        return len(self._batches)


@dataclass
class TutoringState:
    """Mutable state of one play session (owned by the engine)"""
    level: Level
    step_index: int = 0
    phase: TutoringPhase = TutoringPhase.IDLE
    guide_focus: GuideFocus = GuideFocus.AWAITING_INPUT
    messages: List[ChatMessage] = field(default_factory=list)
    code: str = ''
    console_output: str = ''
    visual: VisualState = field(default_factory=VisualState)

    # Re-entrancy guards
    judging: bool = False
    running: bool = False

    @property
    def current_step(self) -> Step:
        return self.level.steps[self.step_index]

    @property
    def step_count(self) -> int:
        return self.level.step_count

    @property
    def is_last_step(self) -> bool:
        return self.step_index >= self.step_count - 1

    @property
    def finished(self) -> bool:
        return self.phase == TutoringPhase.FINISHED

    def advance_step(self) -> bool:
        """Move to the next step. Returns False if this was the last one."""
        if self.is_last_step:
            return False
        self.step_index += 1
        return True

    def add_message(self, role: str, text: str, **kwargs) -> ChatMessage:
        message = ChatMessage(role=role, text=text, **kwargs)
        self.messages.append(message)
        return message

    def append_code(self, code: str) -> None:
        self.code = f"{self.code}\n{code}" if self.code else code


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a play session handed to the presentation layer"""
    level_id: int
    level_title: str
    step_index: int
    step_count: int
    instruction: str
    phase: TutoringPhase
    guide_focus: GuideFocus
    messages: Tuple[ChatMessage, ...]
    code: str
    console_output: str
    batches: Tuple[Tuple[DrawingCommand, ...], ...]
    is_judging: bool
    is_running: bool

    @property
    def finished(self) -> bool:
        return self.phase == TutoringPhase.FINISHED

    @classmethod
    def of(cls, state: TutoringState) -> 'SessionSnapshot':
        return cls(
            level_id=state.level.id,
            level_title=state.level.title,
            step_index=state.step_index,
            step_count=state.step_count,
            instruction=state.current_step.instruction,
            phase=state.phase,
            guide_focus=state.guide_focus,
            messages=tuple(state.messages),
            code=state.code,
            console_output=state.console_output,
            batches=state.visual.batches,
            is_judging=state.judging,
            is_running=state.running,
        )


@dataclass
class LevelProgress:
    """Stars earned per level, kept for the lifetime of the process"""
    stars: Dict[int, int] = field(default_factory=dict)

    def record_completion(self, level_id: int, stars: int = 3) -> None:
        self.stars[level_id] = max(stars, self.stars.get(level_id, 0))

    def is_completed(self, level_id: int) -> bool:
        return self.stars.get(level_id, 0) > 0

    def is_unlocked(self, level_id: int) -> bool:
        """Level 1 is always open; level N needs level N-1 completed"""
        if level_id <= 1:
            return True
        return self.is_completed(level_id - 1)

    def total_stars(self) -> int:
        return sum(self.stars.values())
