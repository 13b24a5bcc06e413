# =============================================================================
# Latency histogram and per-category counters.
#
# Durations are integer nanoseconds. Bucket b holds every duration d with
# d // 1ms == b, so merging two results is plain integer addition and the
# order in which workers finish never changes the merged numbers.
# =============================================================================

from kvbench.protocol import DEL, GET, MISS, SET

NS_PER_MS = 1_000_000


class Bucket:
    __slots__ = ("count", "time_ns")

    def __init__(self, count=0, time_ns=0):
        self.count = count
        self.time_ns = time_ns

    def __eq__(self, other):
        if not isinstance(other, Bucket):
            return NotImplemented
        return self.count == other.count and self.time_ns == other.time_ns

    def __repr__(self):
        return f"Bucket(count={self.count}, time_ns={self.time_ns})"


class Result:
    def __init__(self):
        self.get_count = 0
        self.miss_count = 0
        self.set_count = 0
        self.del_count = 0
        self.buckets = []

    def _bucket(self, index):
        """Grows the bucket list so that `index` exists. Never shrinks it."""
        if index >= len(self.buckets):
            self.buckets.extend(Bucket() for _ in range(index + 1 - len(self.buckets)))
        return self.buckets[index]

    def record_duration(self, duration_ns, classification):
        if duration_ns < 0:
            raise ValueError(f"negative duration: {duration_ns}")
        if classification == GET:
            self.get_count += 1
        elif classification == MISS:
            self.miss_count += 1
        elif classification == SET:
            self.set_count += 1
        elif classification == DEL:
            self.del_count += 1
        else:
            raise ValueError(f"unknown classification: {classification}")

        bucket = self._bucket(duration_ns // NS_PER_MS)
        bucket.count += 1
        bucket.time_ns += duration_ns

    def merge(self, other):
        for index, src in enumerate(other.buckets):
            dst = self._bucket(index)
            dst.count += src.count
            dst.time_ns += src.time_ns
        self.get_count += other.get_count
        self.miss_count += other.miss_count
        self.set_count += other.set_count
        self.del_count += other.del_count
        return self

    @property
    def total(self):
        return self.get_count + self.miss_count + self.set_count + self.del_count

    @property
    def total_time_ns(self):
        return sum(b.time_ns for b in self.buckets)

    def __eq__(self, other):
        if not isinstance(other, Result):
            return NotImplemented
        return (
            self.get_count == other.get_count
            and self.miss_count == other.miss_count
            and self.set_count == other.set_count
            and self.del_count == other.del_count
            and self.buckets == other.buckets
        )

    def __repr__(self):
        return (f"Result(get={self.get_count}, miss={self.miss_count}, "
                f"set={self.set_count}, del={self.del_count}, "
                f"buckets={len(self.buckets)})")
