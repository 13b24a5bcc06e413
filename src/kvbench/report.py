import sys

NS_PER_US = 1_000


def format_report(result, elapsed, value_size):
    """Builds the end-of-run summary lines for a merged Result."""
    total = result.total
    lines = [
        f"{result.get_count} records get",
        f"{result.miss_count} records missing",
        f"{result.set_count} records were set",
        f"{result.del_count} records deleted",
        f"{total} records total",
    ]

    # cumulative latency distribution
    count_sum = 0
    time_sum = 0
    for b, bucket in enumerate(result.buckets):
        if bucket.count == 0:
            continue
        count_sum += bucket.count
        time_sum += bucket.time_ns
        lines.append(f"{count_sum * 100 // total}% requests < {b + 1} ms")

    avg_us = time_sum // NS_PER_US // count_sum if count_sum else 0
    lines.append(f"{avg_us} usec average for each request")

    if elapsed > 0:
        throughput = (result.get_count + result.set_count) * value_size / 1e6 / elapsed
        rps = total / elapsed
    else:
        throughput = rps = 0.0
    lines.append(f"throughput is {throughput:f} MB/s")
    lines.append(f"rps is {rps:f}")
    return lines


def print_report(result, elapsed, value_size, out=None):
    out = out or sys.stdout
    for line in format_report(result, elapsed, value_size):
        print(line, file=out)
