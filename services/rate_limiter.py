"""Per-client fixed-window request counters."""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, Dict, Optional

from models.analysis_models import RateLimitDecision, RateLimitEntry


class RateLimitStore:
	"""Counter store interface; implementations must make `hit` atomic per key."""

	def hit(self, key: str, limit: int, window: float) -> RateLimitDecision:
		raise NotImplementedError


class InMemoryRateLimitStore(RateLimitStore):
	"""Process-local counters, suitable for a single-process deployment only."""

	def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
		self._entries: Dict[str, RateLimitEntry] = {}
		self._lock = threading.Lock()
		self._clock = clock or time.monotonic

	def hit(self, key: str, limit: int, window: float) -> RateLimitDecision:
		"""Count one request for `key` and decide whether it may proceed.

		Args:
			key: Client identifier (forwarded-for value or `unknown`).
			limit: Maximum requests per window.
			window: Window length in seconds.

		Returns:
			A decision; rejected decisions carry whole seconds until the window resets.
		"""
		with self._lock:
			now = self._clock()
			entry = self._entries.get(key)
			if entry is None or now >= entry.reset_time:
				self._entries[key] = RateLimitEntry(count=1, reset_time=now + window)
				return RateLimitDecision(allowed=True, remaining=max(limit - 1, 0))
			if entry.count >= limit:
				retry_after = max(math.ceil(entry.reset_time - now), 1)
				return RateLimitDecision(allowed=False, retry_after=retry_after)
			entry.count += 1
			return RateLimitDecision(allowed=True, remaining=max(limit - entry.count, 0))

	def get(self, key: str) -> Optional[RateLimitEntry]:
		"""Return the current entry for `key`, if one exists."""
		with self._lock:
			return self._entries.get(key)
