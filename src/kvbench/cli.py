#!/usr/bin/env python3
"""
kvbench command line entry point.

    kvbench --host 127.0.0.1 -n 100000 -d 64 -c 8 -t mixed -r 10000 -p 16
"""

import argparse
import logging
import sys

from kvbench import config as cfg
from kvbench.client import CLIENT_TYPES, DEFAULT_PORT
from kvbench.driver import run_benchmark
from kvbench.errors import BenchmarkError, ConsistencyViolation
from kvbench.report import print_report

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_MISMATCH = 2


def build_arg_parser():
    parser = argparse.ArgumentParser(description="Key-value protocol benchmark client")
    parser.add_argument("--type", dest="client_type", choices=sorted(CLIENT_TYPES),
                        default=cfg.DEFAULT_TYPE, help="cache server type")
    parser.add_argument("--host", default=cfg.DEFAULT_HOST, help="cache server address")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="cache server port")
    parser.add_argument("-n", dest="total", type=int, default=cfg.DEFAULT_TOTAL,
                        help="total number of requests")
    parser.add_argument("-d", dest="value_size", type=int, default=cfg.DEFAULT_VALUE_SIZE,
                        help="data size of SET/GET value in bytes")
    parser.add_argument("-c", dest="threads", type=int, default=cfg.DEFAULT_THREADS,
                        help="number of parallel connections")
    parser.add_argument("-t", dest="operation", choices=cfg.OPERATIONS,
                        default=cfg.DEFAULT_OPERATION, help="test set, could be get/set/mixed")
    parser.add_argument("-r", dest="key_space", type=int, default=cfg.DEFAULT_KEY_SPACE,
                        help="key space len, use random keys from 0 to (key-space-len - 1)")
    parser.add_argument("-p", dest="pipeline", type=int, default=cfg.DEFAULT_PIPELINE,
                        help="pipeline length")
    parser.add_argument("--timeout", type=float, default=None, help="socket timeout in seconds")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for key and operation selection")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="log verbosity")
    return parser


def config_from_args(args):
    return cfg.BenchConfig(
        client_type=args.client_type,
        host=args.host,
        port=args.port,
        total=args.total,
        value_size=args.value_size,
        threads=args.threads,
        operation=args.operation,
        key_space=args.key_space,
        pipeline=args.pipeline,
        timeout=args.timeout,
        seed=args.seed,
    )


def main(argv=None):
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
    )

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    for line in config.banner():
        print(line)

    try:
        result, elapsed = run_benchmark(config)
    except ConsistencyViolation as e:
        logging.error("fatal: %s", e)
        return EXIT_MISMATCH
    except (BenchmarkError, NotImplementedError) as e:
        logging.error("benchmark failed: %s", e)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user.")
        return 130

    print_report(result, elapsed, config.value_size)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
