"""
Submit -> poll -> resolve state machine for a single Pearch search task.

A task moves through ``submitting`` and ``polling`` and ends in exactly one
of ``succeeded``, ``failed`` or ``timed_out``. Only a ``succeeded`` task
returns a value; the other two terminal states raise.
"""

import asyncio
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional
from prometheus_client import Counter, Histogram
from pearch_gateway.api.schemas import Credentials, PollConfig, SearchRequest, TaskHandle
from pearch_gateway.errors import (
    MissingTaskIdError,
    TaskFailedError,
    TaskTimeoutError,
    TransportError,
)
from pearch_gateway.services.transport import PearchTransport
from pearch_gateway.utils.logger import logger

SUBMIT_PATH = "/v2/search/submit"
STATUS_PATH = "/v2/search/status/{task_id}"

SUCCESS_STATUSES = frozenset({"completed", "done"})
FAILURE_STATUSES = frozenset({"failed", "error"})

STATUS_POLLS = Counter(
    "pearch_status_polls_total",
    "Total number of status polls by reported outcome",
    ["outcome"]
)

TASKS_FINISHED = Counter(
    "pearch_tasks_total",
    "Total number of tasks by terminal state",
    ["state"]
)

TASK_DURATION = Histogram(
    "pearch_task_duration_seconds",
    "Histogram of time from submit to terminal state"
)


class TaskState(str, Enum):
    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def extract_task_handle(response: Dict[str, Any]) -> TaskHandle:
    task_id = response.get("task_id") or response.get("id")
    if task_id is None or str(task_id).strip() == "":
        raise MissingTaskIdError("No task ID received from submit response")
    return TaskHandle(task_id=str(task_id))


def classify_status(response: Dict[str, Any]) -> TaskState:
    """Maps a status response onto the next state. Unknown values keep polling."""
    status = response.get("status")
    if not isinstance(status, str):
        return TaskState.POLLING
    if status in SUCCESS_STATUSES:
        return TaskState.SUCCEEDED
    if status in FAILURE_STATUSES:
        return TaskState.FAILED
    return TaskState.POLLING


class TaskPoller:
    def __init__(
        self,
        transport: PearchTransport,
        credentials: Credentials,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        self.transport = transport
        self.credentials = credentials
        self._sleep = sleep
        self._clock = clock
        self.state: Optional[TaskState] = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.credentials.api_key}",
        }

    async def submit(self, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.credentials.base_url}{SUBMIT_PATH}"
        logger.info("Submitting search task query=%s", body.get("query"))
        try:
            return await self.transport.request("POST", url, self._headers(), body)
        except TransportError as e:
            raise TransportError(
                f"Failed to submit search task: {e.message}",
                status_code=e.status_code
            ) from e

    async def get_status(self, task_id: str) -> Dict[str, Any]:
        url = f"{self.credentials.base_url}{STATUS_PATH.format(task_id=task_id)}"
        try:
            return await self.transport.request("GET", url, self._headers())
        except TransportError as e:
            raise TransportError(
                f"Failed to get status of task {task_id}: {e.message}",
                status_code=e.status_code,
                task_id=task_id
            ) from e

    async def submit_and_wait(self, request: SearchRequest, poll: PollConfig) -> Dict[str, Any]:
        started = self._clock()
        try:
            result = await self._run(request, poll)
        except TaskTimeoutError:
            self._finish(TaskState.TIMED_OUT, started)
            raise
        except Exception:
            self._finish(TaskState.FAILED, started)
            raise
        self._finish(TaskState.SUCCEEDED, started)
        return result

    async def _run(self, request: SearchRequest, poll: PollConfig) -> Dict[str, Any]:
        self.state = TaskState.SUBMITTING
        handle = extract_task_handle(await self.submit(request.to_body()))
        task_id = handle.task_id

        self.state = TaskState.POLLING
        logger.info("Polling task %s every %ss for up to %ss", task_id, poll.interval_seconds, poll.max_wait_seconds)
        deadline = self._clock() + poll.max_wait_seconds
        attempt = 0

        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise TaskTimeoutError(
                    f"Search task {task_id} did not complete within {poll.max_wait_seconds} seconds",
                    max_wait_seconds=poll.max_wait_seconds,
                    task_id=task_id
                )

            attempt += 1
            response = await self.get_status(task_id)
            next_state = classify_status(response)

            if next_state is TaskState.SUCCEEDED:
                STATUS_POLLS.labels(outcome="completed").inc()
                logger.info("Task %s completed after %s status checks", task_id, attempt)
                return response

            if next_state is TaskState.FAILED:
                STATUS_POLLS.labels(outcome="failed").inc()
                status = response.get("status")
                raise TaskFailedError(
                    f"Search task {task_id} failed with status: {status}",
                    status=status,
                    task_id=task_id
                )

            STATUS_POLLS.labels(outcome="pending").inc()
            logger.debug("Task %s status=%s (check %s)", task_id, response.get("status"), attempt)
            # never sleep past the deadline
            await self._sleep(max(0.0, min(poll.interval_seconds, deadline - self._clock())))

    def _finish(self, state: TaskState, started: float) -> None:
        self.state = state
        TASKS_FINISHED.labels(state=state.value).inc()
        TASK_DURATION.observe(self._clock() - started)
        if state is not TaskState.SUCCEEDED:
            logger.warning("Search task ended in state %s", state.value)
