"""Tests for concurrent query execution: timeout, failure mapping and cancellation."""
import asyncio

import pytest

from app.core.exceptions import ComputationFailure, NotFoundError, QueryTimeoutError
from app.services.query_executor import QueryExecutor


async def value(result, delay=0.0):
    await asyncio.sleep(delay)
    return result


async def boom():
    raise RuntimeError("connection reset")


def test_results_keep_their_names():
    results = asyncio.run(QueryExecutor(1.0).gather("test", {"a": value(1, 0.01), "b": value(2)}))

    assert results == {"a": 1, "b": 2}


def test_queries_run_concurrently():
    async def scenario():
        loop = asyncio.get_running_loop()
        started = loop.time()
        await QueryExecutor(1.0).gather("test", {n: value(n, 0.1) for n in "abcde"})
        return loop.time() - started

    assert asyncio.run(scenario()) < 0.4


def test_empty_batch():
    assert asyncio.run(QueryExecutor(1.0).gather("test", {})) == {}


def test_timeout_is_retryable():
    with pytest.raises(QueryTimeoutError) as exc_info:
        asyncio.run(QueryExecutor(0.05).gather("test", {"fast": value(1), "slow": value(2, 5)}))

    error = exc_info.value
    assert error.retryable is True
    assert error.status_code == 503
    assert error.query == "slow"


def test_repository_error_becomes_computation_failure():
    with pytest.raises(ComputationFailure) as exc_info:
        asyncio.run(QueryExecutor(1.0).gather("test", {"ok": value(1), "payments": boom()}))

    error = exc_info.value
    assert error.query == "payments"
    assert error.status_code == 500
    assert error.message == "Server Error"
    assert not isinstance(error, QueryTimeoutError)


def test_failure_names_the_query_that_raised_first():
    async def late_failure():
        # fails one loop step later, before the batch error is handled
        await asyncio.sleep(0)
        raise RuntimeError("late")

    with pytest.raises(ComputationFailure) as exc_info:
        asyncio.run(QueryExecutor(1.0).gather("test", {"slow_fail": late_failure(), "fast_fail": boom()}))

    assert exc_info.value.query == "fast_fail"


def test_domain_errors_pass_through():
    async def missing():
        raise NotFoundError("Brand not found")

    with pytest.raises(NotFoundError):
        asyncio.run(QueryExecutor(1.0).gather("test", {"brand": missing()}))


def test_failure_abandons_in_flight_queries():
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    async def scenario():
        with pytest.raises(ComputationFailure):
            await QueryExecutor(1.0).gather("test", {"slow": slow(), "bad": boom()})
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert cancelled == [True]


def test_caller_cancellation_cancels_queries():
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    async def scenario():
        task = asyncio.ensure_future(QueryExecutor(10.0).gather("test", {"a": slow(), "b": slow()}))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert cancelled == [True, True]
