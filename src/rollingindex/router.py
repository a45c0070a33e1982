# Bucket routing: writes go to a time-bucketed index, reads go to the alias

import re
from datetime import datetime, timezone

# Truncation plus key format per granularity
_POLICIES = {
	"minute-of-day": ({"second": 0, "microsecond": 0}, "%H:%M"),
	"minute": ({"second": 0, "microsecond": 0}, "%Y-%m-%d-%H:%M"),
	"hour": ({"minute": 0, "second": 0, "microsecond": 0}, "%Y-%m-%d-%H"),
	"day": ({"hour": 0, "minute": 0, "second": 0, "microsecond": 0}, "%Y-%m-%d"),
}

# Anything outside this set is illegal (or awkward) in an index name
_UNSAFE_CHARS = re.compile(r"[^a-z0-9_.+-]")


def sanitize_index_token(value: str) -> str:
	"""Lowercase and replace characters that cannot appear in an index name."""
	return _UNSAFE_CHARS.sub("-", value.lower())


class BucketRouter:
	"""Computes the bucket index for a write and the alias for reads."""

	def __init__(self, prefix, alias=None, granularity="minute-of-day"):
		if granularity not in _POLICIES:
			raise ValueError(f"Unknown granularity: {granularity!r}")
		self.prefix = prefix
		self.alias = alias or prefix
		self.granularity = granularity

	def bucket_key(self, now: datetime) -> str:
		truncation, fmt = _POLICIES[self.granularity]
		# Equal instants must share a bucket whatever offset they carry
		if now.tzinfo is not None:
			try:
				now = now.astimezone(timezone.utc)
			except OverflowError:
				# Beyond datetime.min/max once shifted to UTC; keep the given offset
				pass
		return sanitize_index_token(now.replace(**truncation).strftime(fmt))

	def resolve_write_target(self, now: datetime) -> str:
		"""Return the bucket index name for a write at *now*."""
		return sanitize_index_token(f"{self.prefix}-{self.bucket_key(now)}")

	def search_target(self) -> str:
		return self.alias
