from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sse_fanout.models import Event
from sse_fanout.services.broadcaster import Broadcaster


logger = logging.getLogger(__name__)


@dataclass
class PeriodicJob:
    id: str
    interval: float
    event: Optional[Event] = None
    status: str = "running"  # running|stopped|failed
    ticks: int = 0
    last_count: Optional[int] = None
    last_error: Optional[str] = None
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None
    _task: Optional[asyncio.Task] = None

    @property
    def kind(self) -> str:
        return "heartbeat" if self.event is None else "event"


class JobManager:
    """Timer-driven callers of a ``Broadcaster``.

    Each job sends either a heartbeat or a fixed event every ``interval``
    seconds. The broadcaster itself never schedules anything.
    """

    def __init__(self, hub: Broadcaster) -> None:
        self.hub = hub
        self._jobs: Dict[str, PeriodicJob] = {}

    def start(self, interval: float, event: Optional[Event] = None) -> PeriodicJob:
        if interval <= 0:
            raise ValueError("interval must be positive")
        job = PeriodicJob(id=uuid.uuid4().hex[:8], interval=interval, event=event)
        self._jobs[job.id] = job
        job._task = asyncio.get_running_loop().create_task(self._run(job))
        logger.info("Started %s job %s every %ss", job.kind, job.id, interval)
        return job

    async def _run(self, job: PeriodicJob) -> None:
        try:
            while True:
                await asyncio.sleep(job.interval)
                if job.event is None:
                    job.last_count = await self.hub.heartbeat()
                else:
                    job.last_count = await self.hub.broadcast(job.event)
                job.ticks += 1
        except asyncio.CancelledError:
            job.status = "stopped"
            raise
        except Exception as e:
            logger.exception("Job %s failed", job.id)
            job.status = "failed"
            job.last_error = str(e)
        finally:
            job.finished_at = time.time()

    def status(self, job_id: str) -> Optional[PeriodicJob]:
        return self._jobs.get(job_id)

    async def stop(self, job_id: str) -> bool:
        job = self._jobs.get(job_id)
        if not job or job._task is None:
            return False
        if not job._task.done():
            job._task.cancel()
            try:
                await job._task
            except asyncio.CancelledError:
                pass
        # a task cancelled before its first step never reaches _run's handlers
        if job.status == "running":
            job.status = "stopped"
            job.finished_at = job.finished_at or time.time()
        return True

    async def stop_all(self) -> None:
        for job_id in list(self._jobs):
            await self.stop(job_id)

    def list_recent(self, limit: int = 5) -> List[PeriodicJob]:
        jobs = list(self._jobs.values())
        jobs.sort(key=lambda j: j.started_at, reverse=True)
        return jobs[:limit]
