#!/usr/bin/env python3
"""
TutoringEngine - Main orchestrator for the tutoring loop.

Turns the kid's prompts into tutor judgements, simulated runs into step
progress, and keeps the chat, code buffer, guide focus and visual history of
the active level. Presentation code talks to it through commands and reads
frozen snapshots; it never touches the state directly.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from ..config import DEFAULT_MODEL
from ..contracts import (
    TutorJudgement,
    ExecutionResult,
    TUTOR_JUDGEMENT_SCHEMA,
    EXECUTION_RESULT_SCHEMA,
    decode_tutor_judgement,
    decode_execution_result,
)
from ..curriculum import Level, get_levels
from ..errors import LLMError, LevelLockedError, UnknownLevelError
from ..i18n import BOT_NAME, t
from ..llm import BaseLLMClient, ConversationTurn, ModelRequest
from .state import (
    ChatMessage,
    GuideFocus,
    LevelProgress,
    SessionSnapshot,
    TutoringPhase,
    TutoringState,
)
from . import prompts

logger = logging.getLogger(__name__)

# Pause between a successful run and the "next step" message
NEXT_STEP_DELAY = 1.0

Listener = Callable[[Optional[SessionSnapshot]], None]


@dataclass(frozen=True)
class CallTicket:
    """Identity of the step an outstanding model call was issued for"""
    session: int
    level_id: int
    step_index: int
    request: int


class TutoringEngine:
    """Orchestrates the tutoring flow for one learner"""

    def __init__(
        self,
        llm_client: Optional[BaseLLMClient],
        model: str = DEFAULT_MODEL,
        language: str = 'en',
        progress: Optional[LevelProgress] = None,
        next_step_delay: float = NEXT_STEP_DELAY,
        levels: Optional[List[Level]] = None,
    ):
        self.llm = llm_client
        self.model = model
        self.language = language
        self.progress = progress or LevelProgress()
        self.next_step_delay = next_step_delay
        self._levels = levels

        self.state: Optional[TutoringState] = None
        self._session = 0
        self._request_ids = itertools.count(1)
        self._listeners: List[Listener] = []
        self._pending: Set[asyncio.Task] = set()

    # =========================================================================
    # Menu
    # =========================================================================

    def levels(self) -> List[Level]:
        if self._levels is not None:
            return list(self._levels)
        return get_levels(self.language)

    def find_level(self, level_id: int) -> Level:
        for level in self.levels():
            if level.id == level_id:
                return level
        raise UnknownLevelError(level_id)

    def is_level_unlocked(self, level_id: int) -> bool:
        return self.progress.is_unlocked(level_id)

    def is_active(self) -> bool:
        """True while a level is being played"""
        return self.state is not None

    def set_language(self, language: str) -> None:
        """Applies to new messages now and to level content on the next select"""
        self.language = language
        self._notify()

    def select_level(self, level_id: int) -> SessionSnapshot:
        """Start a fresh play session for a level"""
        level = self.find_level(level_id)
        if not self.is_level_unlocked(level_id):
            raise LevelLockedError(level_id)

        self._reset_context()

        state = TutoringState(
            level=level,
            console_output=t('console_waiting', self.language),
        )
        greeting = t('initial_greeting', self.language, bot=BOT_NAME, title=level.title)
        state.add_message(
            'model',
            f"{greeting}\n\n{t('first_task', self.language)} {level.steps[0].instruction}",
        )
        self.state = state

        logger.info("Level %s selected (%d steps)", level.id, level.step_count)
        self._notify()
        return SessionSnapshot.of(state)

    def return_to_menu(self) -> None:
        """Drop the play session; level progress is kept"""
        self._reset_context()
        self._notify()

    def finish_level(self) -> Optional[int]:
        """Collect the stars for a finished level and go back to the menu.

        Returns the stars recorded, or None if the level is not finished.
        """
        state = self.state
        if state is None or not state.finished:
            return None

        stars = state.level.max_stars
        self.progress.record_completion(state.level.id, stars)
        logger.info("Level %s completed with %d stars", state.level.id, stars)
        self.return_to_menu()
        return stars

    def _reset_context(self) -> None:
        for task in self._pending:
            task.cancel()
        self._pending.clear()
        self.state = None
        self._session += 1

    # =========================================================================
    # Editor helpers
    # =========================================================================

    def set_code(self, code: str) -> None:
        """Replace the code buffer (the kid edited it)"""
        if self.state is None:
            return
        self.state.code = code
        self._notify()

    def current_hint(self) -> Optional[str]:
        if self.state is None:
            return None
        return self.state.current_step.hint

    # =========================================================================
    # Presentation binding
    # =========================================================================

    def snapshot(self) -> Optional[SessionSnapshot]:
        if self.state is None:
            return None
        return SessionSnapshot.of(self.state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register for snapshots after every change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # =========================================================================
    # Tutoring loop
    # =========================================================================

    async def submit_prompt(self, text: str) -> Optional[ChatMessage]:
        """
        Ask the tutor to judge a prompt for the current step.

        Returns the tutor's reply, or None when the prompt was ignored or the
        reply arrived for a step that is no longer current.
        """
        state = self.state
        if state is None or state.finished or state.judging:
            return None
        if not text or not text.strip():
            return None

        text = text.strip()
        history = [ConversationTurn(m.role, m.text) for m in state.messages]
        state.add_message('user', text)
        state.judging = True
        state.phase = TutoringPhase.AWAITING_JUDGEMENT
        ticket = self._ticket(state)
        self._notify()

        try:
            judgement: Optional[TutorJudgement] = await self._judge(state, text, history)
        except LLMError as e:
            logger.warning("Tutor judgement failed: %s", e)
            judgement = None
        finally:
            state.judging = False

        if not self._is_current(ticket):
            logger.info(
                "Discarding stale judgement #%d for level %s step %d",
                ticket.request, ticket.level_id, ticket.step_index + 1,
            )
            if state is self.state:
                self._notify()
            return None

        if judgement is None:
            reply = state.add_message('model', t('tutor_unavailable', self.language))
            state.phase = TutoringPhase.IDLE
        elif judgement.step_complete:
            reply = state.add_message(
                'model',
                judgement.message,
                code=judgement.code,
                is_correct=True,
                visual_action=judgement.visual_action,
            )
            state.phase = TutoringPhase.JUDGED_COMPLETE
            if judgement.code:
                state.append_code(judgement.code)
                state.guide_focus = GuideFocus.AWAITING_EXECUTION
        else:
            reply_text = judgement.message
            if judgement.correction and judgement.correction not in reply_text:
                reply_text = f"{reply_text}\n\n{judgement.correction}"
            reply = state.add_message('model', reply_text, is_correct=False)
            state.phase = TutoringPhase.JUDGED_INCOMPLETE

        self._notify()
        return reply

    async def run_code(self) -> Optional[ExecutionResult]:
        """
        Simulate running the code buffer against the current step.

        Returns the decoded result, or None when the run was ignored, failed,
        or arrived for a step that is no longer current.
        """
        state = self.state
        if state is None or state.finished or state.running:
            return None
        if not state.code.strip():
            return None

        code = state.code
        state.running = True
        state.phase = TutoringPhase.EXECUTING
        state.console_output = t('running', self.language)
        ticket = self._ticket(state)
        self._notify()

        try:
            try:
                result: Optional[ExecutionResult] = await self._simulate(state, code)
            except LLMError as e:
                logger.warning("Code simulation failed: %s", e)
                result = None

            if not self._is_current(ticket):
                logger.info(
                    "Discarding stale run result #%d for level %s step %d",
                    ticket.request, ticket.level_id, ticket.step_index + 1,
                )
                return None

            if result is None:
                state.console_output = t('execution_error', self.language)
                state.guide_focus = GuideFocus.AWAITING_INPUT
                state.phase = TutoringPhase.EXECUTION_FAILED
                return None

            state.console_output = result.console_output
            if result.is_success:
                state.visual.append(result.drawing_commands)

            if result.is_success and result.is_objective_met:
                self._complete_step(state)
                return result

            state.guide_focus = GuideFocus.AWAITING_INPUT
            state.phase = TutoringPhase.EXECUTION_FAILED
            self._notify()

            explanation = await self._explain(code, result.console_output)
            if not self._is_current(ticket):
                logger.info("Discarding stale explanation #%d for level %s", ticket.request, ticket.level_id)
                return result
            state.add_message('model', explanation or t('error_detected', self.language))
            return result

        finally:
            state.running = False
            if state is self.state:
                self._notify()

    def _complete_step(self, state: TutoringState) -> None:
        if state.advance_step():
            state.guide_focus = GuideFocus.AWAITING_INPUT
            state.phase = TutoringPhase.EXECUTION_SUCCEEDED
            self._schedule_next_step_message(state.step_index)
        else:
            state.phase = TutoringPhase.FINISHED
            state.guide_focus = GuideFocus.AWAITING_FINISH
            state.add_message('model', t('all_steps_done', self.language))

    def _schedule_next_step_message(self, step_index: int) -> None:
        task = asyncio.get_running_loop().create_task(
            self._announce_next_step(self._session, step_index)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _announce_next_step(self, session: int, step_index: int) -> None:
        await asyncio.sleep(self.next_step_delay)

        state = self.state
        if state is None or session != self._session or state.step_index != step_index:
            return

        state.add_message(
            'model',
            f"{t('execution_success', self.language)}! "
            f"{t('next_step', self.language)} {state.current_step.instruction}",
        )
        self._notify()

    async def settle(self) -> None:
        """Wait for pending delayed messages (used by the REPL and tests)"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # =========================================================================
    # Call identity
    # =========================================================================

    def _ticket(self, state: TutoringState) -> CallTicket:
        return CallTicket(
            session=self._session,
            level_id=state.level.id,
            step_index=state.step_index,
            request=next(self._request_ids),
        )

    def _is_current(self, ticket: CallTicket) -> bool:
        state = self.state
        return (
            state is not None
            and ticket.session == self._session
            and ticket.level_id == state.level.id
            and ticket.step_index == state.step_index
            and not state.finished
        )

    # =========================================================================
    # Model calls
    # =========================================================================

    def _language_name(self) -> str:
        return prompts.LANGUAGE_NAMES.get(self.language, 'English')

    async def _send(self, request: ModelRequest) -> str:
        if self.llm is None:
            raise LLMError("No model client configured")
        return await self.llm.send(self.model, request)

    async def _judge(
        self,
        state: TutoringState,
        prompt: str,
        history: List[ConversationTurn],
    ) -> TutorJudgement:
        step = state.current_step
        system_instruction = prompts.TUTOR_SYSTEM_PROMPT.format(
            bot=BOT_NAME,
            language=self._language_name(),
            level_title=state.level.title,
            instruction=step.instruction,
            expected_action=step.expected_action,
            reference_code=step.reference_code,
        )
        request = ModelRequest(
            turns=history + [ConversationTurn('user', prompt)],
            system_instruction=system_instruction,
            output_schema=TUTOR_JUDGEMENT_SCHEMA,
        )
        return decode_tutor_judgement(await self._send(request))

    async def _simulate(self, state: TutoringState, code: str) -> ExecutionResult:
        step = state.current_step
        system_instruction = prompts.EXECUTION_SYSTEM_PROMPT.format(
            instruction=step.instruction,
            expected_action=step.expected_action,
            language=self._language_name(),
        )
        request = ModelRequest(
            turns=[ConversationTurn('user', code)],
            system_instruction=system_instruction,
            output_schema=EXECUTION_RESULT_SCHEMA,
        )
        return decode_execution_result(await self._send(request))

    async def _explain(self, code: str, console_output: str) -> Optional[str]:
        """Best effort: None if the explanation call fails too"""
        request = ModelRequest(
            turns=[ConversationTurn('user', prompts.EXPLAIN_ERROR_USER_PROMPT.format(
                code=code,
                console_output=console_output,
            ))],
            system_instruction=prompts.EXPLAIN_ERROR_SYSTEM_PROMPT.format(
                bot=BOT_NAME,
                language=self._language_name(),
            ),
        )
        try:
            text = await self._send(request)
        except LLMError as e:
            logger.warning("Error explanation failed: %s", e)
            return None
        return text.strip() or None
