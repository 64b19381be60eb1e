import asyncio
import copy
import time
from typing import Any, Awaitable, Callable, Dict, List, Sequence
from pearch_gateway.api.schemas import BatchItem, ItemResult, Operation
from pearch_gateway.errors import PearchError, SearchValidationError
from pearch_gateway.services.credentials import CredentialProvider
from pearch_gateway.services.poller import TaskPoller
from pearch_gateway.services.request_builder import build_search_request, build_poll_config
from pearch_gateway.services.transport import PearchTransport
from pearch_gateway.utils.logger import logger


class BatchRunner:
    """
    Runs one operation over an ordered list of items, strictly one after another.

    Every item gets its own request, credentials lookup and poller. A failing
    item either aborts the batch or, with ``continue_on_fail``, is returned
    with its original json and the error attached.
    """

    def __init__(
        self,
        transport: PearchTransport,
        credential_provider: CredentialProvider,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        self.transport = transport
        self.credential_provider = credential_provider
        self._sleep = sleep
        self._clock = clock

    async def run(
        self,
        items: Sequence[BatchItem],
        operation: Operation = Operation.SUBMIT_AND_WAIT,
        continue_on_fail: bool = False
    ) -> List[ItemResult]:
        logger.info("Running %s over %s items (continue_on_fail=%s)", operation.value, len(items), continue_on_fail)
        results: List[ItemResult] = []

        for index, item in enumerate(items):
            try:
                payload = await self._process(operation, item)
            except Exception as e:
                error = e if isinstance(e, PearchError) else PearchError(str(e))
                error.item_index = index
                logger.error("Item %s failed: %s", index, error.message, extra={"item_index": index, "task_id": error.task_id})
                if not continue_on_fail:
                    if error is e:
                        raise
                    raise error from e
                results.append(ItemResult(json=copy.deepcopy(item.json_), error=error.to_dict(), paired_item=index))
                continue

            results.append(ItemResult(json=payload, paired_item=index))

        return results

    async def _process(self, operation: Operation, item: BatchItem) -> Dict[str, Any]:
        parameters = item.parameters

        if operation is Operation.STATUS:
            task_id = parameters.get("taskId") or parameters.get("task_id")
            if not task_id:
                raise SearchValidationError("Task ID is required for status operation")
            poller = self._poller()
            return await poller.get_status(str(task_id))

        request = build_search_request(parameters)
        if operation is Operation.SUBMIT:
            poller = self._poller()
            return await poller.submit(request.to_body())

        poll = build_poll_config(parameters)
        poller = self._poller()
        return await poller.submit_and_wait(request, poll)

    def _poller(self) -> TaskPoller:
        return TaskPoller(
            self.transport,
            self.credential_provider.resolve(),
            sleep=self._sleep,
            clock=self._clock
        )
