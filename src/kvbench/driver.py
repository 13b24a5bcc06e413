# =============================================================================
# Benchmark driver: one thread and one connection per worker, results handed
# back over a bounded queue and merged once every worker has reported.
# =============================================================================

import logging
import queue
import threading
import time

from kvbench.client import new_client
from kvbench.result import Result
from kvbench.worker import run_worker

logger = logging.getLogger(__name__)


def _default_factory(config):
    return new_client(config.client_type, config.host, config.port, timeout=config.timeout)


def operate(worker_id, count, config, client_factory, results):
    """
    Thread body. Puts exactly one item on `results`: the worker's Result, or
    the exception that stopped it so the driver can re-raise it.
    """
    client = None
    try:
        client = client_factory(config)
        results.put(run_worker(worker_id, count, config, client))
    except Exception as e:
        logger.error("[worker %d] failed: %s", worker_id, e)
        results.put(e)
    finally:
        if client is not None:
            client.close()


def run_benchmark(config, client_factory=None):
    """
    Runs the configured workload and returns (merged Result, elapsed seconds).

    Blocks until every worker has reported. The first worker failure is raised
    as soon as it is received; the remaining daemon threads are abandoned.
    """
    if client_factory is None:
        client_factory = _default_factory

    count = config.per_worker
    results = queue.Queue(maxsize=config.threads)
    merged = Result()

    start = time.perf_counter()
    for worker_id in range(config.threads):
        t = threading.Thread(
            target=operate,
            args=(worker_id, count, config, client_factory, results),
            name=f"kvbench-worker-{worker_id:03d}",
            daemon=True,
        )
        t.start()

    for _ in range(config.threads):
        item = results.get()
        if isinstance(item, Exception):
            raise item
        merged.merge(item)
    elapsed = time.perf_counter() - start

    logger.info("all %d workers finished in %.3fs", config.threads, elapsed)
    return merged, elapsed
