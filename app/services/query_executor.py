"""
Query Executor - concurrent repository access for metric computations

Runs a named batch of independent repository queries concurrently, waits for
all of them (join-then-compute barrier) and enforces one bounded timeout for
the whole batch. Failures are mapped onto the analytics error taxonomy:
- a timeout becomes a retryable QueryTimeoutError
- any repository error becomes a ComputationFailure carrying the query name
- cancellation of the caller cancels every in-flight query
"""
import asyncio
import logging
from typing import Any, Awaitable, Dict, Optional

from app.core.analytics_config import analytics_settings
from app.core.exceptions import AnalyticsError, ComputationFailure, QueryTimeoutError

logger = logging.getLogger(__name__)


class QueryExecutor:
    """Executes batches of repository queries under a shared timeout"""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else analytics_settings.QUERY_TIMEOUT_SECONDS

    async def gather(self, operation: str, queries: Dict[str, Awaitable[Any]]) -> Dict[str, Any]:
        """
        Await every query in `queries` and return their results under the
        same names. No partial result is ever returned.
        """
        if not queries:
            return {}

        tasks = {name: asyncio.ensure_future(query) for name, query in queries.items()}
        try:
            results = await asyncio.wait_for(asyncio.gather(*tasks.values()), timeout=self.timeout)
            return dict(zip(tasks.keys(), results))

        except asyncio.TimeoutError as e:
            # wait_for has already cancelled the stragglers by now
            pending = [name for name, task in tasks.items() if task.cancelled() or not task.done()]
            logger.error(f"⏱️ {operation}: queries timed out after {self.timeout}s (pending: {', '.join(pending)})")
            raise QueryTimeoutError(self.timeout, query=", ".join(pending) or None) from e

        except asyncio.CancelledError:
            logger.warning(f"{operation}: cancelled, abandoning {len(tasks)} queries")
            raise

        except AnalyticsError:
            raise

        except Exception as e:
            failed = self._failed_query(tasks, e)
            logger.error(f"❌ {operation}: query '{failed}' failed: {e}")
            raise ComputationFailure(query=failed) from e

        finally:
            for task in tasks.values():
                if not task.done():
                    task.cancel()
            self._drain(tasks)

    @staticmethod
    def _failed_query(tasks: Dict[str, "asyncio.Future"], error: BaseException) -> Optional[str]:
        failed = [
            name for name, task in tasks.items()
            if task.done() and not task.cancelled() and task.exception() is not None
        ]
        # gather raises the first exception to occur, which is not necessarily the first listed
        for name in failed:
            if tasks[name].exception() is error:
                return name
        return failed[0] if failed else None

    @staticmethod
    def _drain(tasks: Dict[str, "asyncio.Future"]) -> None:
        # Retrieve exceptions of finished tasks so asyncio does not report them as unhandled
        for task in tasks.values():
            if task.done() and not task.cancelled():
                task.exception()

