import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from chefgpt.core.errors import ChefGPTError

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


@dataclass(frozen=True)
class Outcome(Generic[ResultT]):
    request_id: int
    value: ResultT | None = None
    error: ChefGPTError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SubmissionState(Generic[ResultT]):
    request_id: int = 0
    busy: bool = False
    last_result: ResultT | None = None
    last_error: ChefGPTError | None = None


class SubmissionTracker(Generic[ResultT]):
    """Owns the display state of one form: submit -> pending -> success | failure.

    Every submission is tagged with a monotonic request id. A newer submission
    cancels the one still in flight, and a result whose id is no longer the
    latest is discarded, so a slow earlier call never overwrites a later one.
    A failure keeps the previous successful result.
    """

    def __init__(self, generate: Callable[[Any], Awaitable[ResultT]]) -> None:
        self._generate = generate
        self._task: asyncio.Task[ResultT] | None = None
        self.state: SubmissionState[ResultT] = SubmissionState()

    async def submit(self, payload: Any) -> Outcome[ResultT] | None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

        self.state.request_id += 1
        request_id = self.state.request_id
        self.state.busy = True
        task = asyncio.ensure_future(self._generate(payload))
        self._task = task

        try:
            value = await task
        except asyncio.CancelledError:
            if task.cancelled() and request_id != self.state.request_id:
                logger.info("submission_superseded", extra={"request_id": request_id})
                return None
            raise
        except ChefGPTError as exc:
            return self._settle(Outcome(request_id=request_id, error=exc))
        finally:
            # Cancellation and unexpected errors leave the form usable again.
            if request_id == self.state.request_id:
                self.state.busy = False
        return self._settle(Outcome(request_id=request_id, value=value))

    def _settle(self, outcome: Outcome[ResultT]) -> Outcome[ResultT] | None:
        if outcome.request_id != self.state.request_id:
            logger.info("submission_stale", extra={"request_id": outcome.request_id})
            return None

        self.state.busy = False
        if outcome.ok:
            self.state.last_result = outcome.value
            self.state.last_error = None
        else:
            self.state.last_error = outcome.error
        return outcome
