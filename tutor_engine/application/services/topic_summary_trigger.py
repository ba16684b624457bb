"""
Archivist task runner.

Summaries are produced off the critical path: ``launch`` schedules a task on the
running event loop and returns at once. A semaphore bounds how many archivist jobs
run concurrently, and a (student, topic) pair already queued or running is not
scheduled twice. Failures are logged with the stage they happened in and never
propagate to the caller. There are no retries.
"""
import asyncio
from typing import Optional, Set, Tuple

import structlog

from tutor_engine.domain.interfaces.model_client import IModelClient
from tutor_engine.domain.repositories import IChatHistoryRepository, ITopicSummaryRepository
from tutor_engine.domain.schemas import TopicSummary
from tutor_engine.domain.tutoring import compose_archivist_prompt, parse_archivist_summary

logger = structlog.get_logger(__name__)

SummaryKey = Tuple[str, str]


class TopicSummaryTrigger:
    def __init__(
        self,
        history_repository: IChatHistoryRepository,
        summary_repository: ITopicSummaryRepository,
        model_client: IModelClient,
        max_concurrency: int = 2,
        transcript_max_chars: Optional[int] = None,
    ):
        self.history_repository = history_repository
        self.summary_repository = summary_repository
        self.model_client = model_client
        self.transcript_max_chars = transcript_max_chars
        self._semaphore = asyncio.Semaphore(max(1, int(max_concurrency)))
        self._tasks: Set[asyncio.Task] = set()
        self._in_flight: Set[SummaryKey] = set()

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    def launch(self, student_id: str, topic_id: str) -> bool:
        """Schedules the archivist job without waiting for it. Returns False when skipped."""
        key = (student_id, topic_id)
        if key in self._in_flight:
            logger.info("summary_trigger_deduplicated", student_id=student_id, topic_id=topic_id)
            return False

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("summary_trigger_no_event_loop", student_id=student_id, topic_id=topic_id)
            return False

        self._in_flight.add(key)
        task = loop.create_task(
            self._run_with_slot(student_id, topic_id),
            name=f"topic-summary:{student_id}:{topic_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(lambda done, key=key: self._on_done(done, key))
        logger.info("summary_trigger_launched", student_id=student_id, topic_id=topic_id)
        return True

    async def drain(self) -> None:
        """Waits for every scheduled archivist job; used on shutdown."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_done(self, task: asyncio.Task, key: SummaryKey) -> None:
        self._tasks.discard(task)
        self._in_flight.discard(key)
        if task.cancelled():
            logger.warning("summary_task_cancelled", student_id=key[0], topic_id=key[1])

    async def _run_with_slot(self, student_id: str, topic_id: str) -> Optional[TopicSummary]:
        async with self._semaphore:
            return await self.run(student_id, topic_id)

    async def run(self, student_id: str, topic_id: str) -> Optional[TopicSummary]:
        stage = "load_transcript"
        try:
            transcript = await self.history_repository.get_chat_history(student_id, topic_id)
            if not transcript:
                logger.warning("summary_skipped_empty_transcript", student_id=student_id, topic_id=topic_id)
                return None

            stage = "model_call"
            prompt = compose_archivist_prompt(transcript, max_chars=self.transcript_max_chars)
            raw_reply = await self.model_client.generate(prompt)

            stage = "parse"
            payload = parse_archivist_summary(raw_reply)
            summary = TopicSummary.from_archivist(student_id, topic_id, payload)

            stage = "persist"
            await self.summary_repository.save_summary(summary)
        except Exception as exc:
            logger.error(
                "summary_failed",
                stage=stage,
                student_id=student_id,
                topic_id=topic_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return None

        logger.info(
            "summary_saved",
            student_id=student_id,
            topic_id=topic_id,
            engagement_level=summary.engagement_level,
        )
        return summary
