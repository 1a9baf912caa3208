"""Quiz flow state machine: one question at a time, idle -> correct | wrong."""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Dict, Optional, Set

from quiz_backend.client.sources import QuestionSource

logger = logging.getLogger(__name__)

AUTO_ADVANCE_DELAY = 1.0  # seconds


class QuizStatus(str, Enum):
    IDLE = "idle"
    CORRECT = "correct"
    WRONG = "wrong"


class QuizSession:
    def __init__(self, source: QuestionSource, *, advance_delay: float = AUTO_ADVANCE_DELAY):
        self._source = source
        self.advance_delay = advance_delay

        self.question: Optional[Dict] = None
        self.loading = False
        self.selected: Optional[int] = None
        self.status = QuizStatus.IDLE
        self.error: Optional[str] = None

        self._advance: Optional[asyncio.Future] = None
        self._tasks: Set[asyncio.Task] = set()

    async def load_next(self) -> None:
        self.loading = True
        self.selected = None
        self.status = QuizStatus.IDLE
        self.error = None
        try:
            self.question = await self._source.next_question()
        except Exception as e:
            logger.warning(f"Loading question failed: {e}")
            self.error = str(e)
            self.question = None
        finally:
            self.loading = False

    async def choose(self, option_id: int) -> Optional[Dict]:
        if not self.question:
            return None
        self.selected = option_id

        try:
            result = await self._source.submit(self.question, option_id)
        except Exception as e:
            logger.error(f"Submitting answer failed: {e}")
            self.error = str(e)
            # A failed submission still shows the explanation panel
            self.status = QuizStatus.WRONG
            return {"correct": False, "correctOptionId": None, "explanation": None}

        self.status = QuizStatus.CORRECT if result.get("correct") else QuizStatus.WRONG
        if self.status is QuizStatus.CORRECT:
            self._schedule_advance()
        return result

    async def wait_for_advance(self) -> None:
        """Wait until a scheduled auto-advance has loaded the next question."""
        if self._advance is not None:
            await self._advance

    def _schedule_advance(self) -> None:
        # Fire-and-forget: a second correct answer schedules another load
        loop = asyncio.get_running_loop()
        done = loop.create_future()
        self._advance = done
        loop.call_later(self.advance_delay, self._start_advance, done)

    def _start_advance(self, done: asyncio.Future) -> None:
        task = asyncio.ensure_future(self.load_next())
        self._tasks.add(task)

        def _finished(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if not done.done():
                done.set_result(None)

        task.add_done_callback(_finished)
