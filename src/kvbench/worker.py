# =============================================================================
# Benchmark worker: drives a fixed number of requests over one client and
# returns a private Result.
# =============================================================================

import logging
import random
import time

from kvbench.client import Request
from kvbench.config import MIXED
from kvbench.errors import ConsistencyViolation
from kvbench.protocol import GET, MISS, SET
from kvbench.result import Result

logger = logging.getLogger(__name__)

VALUE_FILLER = "v"


# --- Request Generation ---

def make_key(worker_id, count, i, key_space, rng):
    """Random key in [0, key_space) when bounded, else a key no other worker uses."""
    if key_space > 0:
        return rng.randrange(key_space)
    return worker_id * count + i


def make_value(value_size, key):
    return f"{VALUE_FILLER * value_size}{key}"


def choose_op(operation, rng):
    if operation == MIXED:
        return GET if rng.randrange(2) == 1 else SET
    return operation


def build_request(op, key, value):
    expected = value if op == GET else None
    return Request(op, str(key), value, expected=expected)


# --- Response Classification ---

def classify(request):
    """
    Returns the counter a finished request belongs to, or None if it was never
    sent. An empty GET or an error reply is a miss; any other GET payload must
    equal the expected value.
    """
    outcome = request.outcome
    if outcome is None:
        return None
    if request.op != GET:
        return request.op
    if outcome.is_error or not outcome.payload:
        return MISS
    actual = outcome.payload.decode("utf-8", errors="replace")
    if actual != request.expected:
        raise ConsistencyViolation(request.key, request.expected, actual)
    return GET


def _record(result, request, duration_ns):
    classification = classify(request)
    if classification is not None:
        result.record_duration(duration_ns, classification)


# --- Execution ---

def run_single(client, request, result):
    start = time.perf_counter_ns()
    client.execute_one(request)
    elapsed = time.perf_counter_ns() - start
    _record(result, request, elapsed)


def run_pipeline(client, requests, result):
    """Every request in the batch is charged the wall-clock time of the whole batch."""
    start = time.perf_counter_ns()
    client.execute_pipeline(requests)
    elapsed = time.perf_counter_ns() - start
    for request in requests:
        _record(result, request, elapsed)


def run_worker(worker_id, count, config, client, rng=None):
    if rng is None:
        seed = None if config.seed is None else config.seed + worker_id
        rng = random.Random(seed)

    result = Result()
    batch = []
    for i in range(count):
        key = make_key(worker_id, count, i, config.key_space, rng)
        request = build_request(
            choose_op(config.operation, rng), key, make_value(config.value_size, key)
        )
        if config.pipeline > 1:
            batch.append(request)
            if len(batch) == config.pipeline:
                logger.debug("[worker %d] process pipeline of %d", worker_id, len(batch))
                run_pipeline(client, batch, result)
                batch = []
        else:
            run_single(client, request, result)

    if batch:
        logger.debug("[worker %d] flush trailing pipeline of %d", worker_id, len(batch))
        run_pipeline(client, batch, result)

    logger.info("[worker %d] done: %r", worker_id, result)
    return result
