"""
Deferred execution helpers.
TickScheduler queues callbacks for the "next tick" so that state is never
mutated from inside the update that produced it; Debouncer restarts a timer
on every call and only fires the latest one.
"""

import threading
from collections import deque
from typing import Any, Callable, Deque, Optional, Tuple

from loguru import logger


class TickScheduler:
	"""
	A minimal cooperative queue. `call_soon` never runs anything; the owner of
	the loop (a request handler, a UI rerun) drains it with `run_pending`.
	Callbacks scheduled while draining run on the following tick.
	"""

	def __init__(self):
		self._queue: Deque[Tuple[Callable[..., Any], tuple]] = deque()
		self._lock = threading.Lock()

	def call_soon(self, callback: Callable[..., Any], *args) -> None:
		with self._lock:
			self._queue.append((callback, args))

	def pending(self) -> int:
		with self._lock:
			return len(self._queue)

	def run_pending(self) -> int:
		"""Run everything queued before this call. Returns how many callbacks ran."""
		with self._lock:
			batch = list(self._queue)
			self._queue.clear()

		for callback, args in batch:
			try:
				callback(*args)
			except Exception as e:
				# keep draining; a failing subscriber is logged only
				logger.exception(f"[Scheduler] Deferred callback {callback!r} failed: {e}")
		return len(batch)


class Debouncer:
	"""
	Calls `callback` once `delay` seconds have passed without another `trigger`.
	`timer_factory` matches threading.Timer's signature and can be swapped in tests.
	"""

	def __init__(self, delay: float, callback: Callable[..., Any], timer_factory=threading.Timer):
		self.delay = delay
		self.callback = callback
		self._timer_factory = timer_factory
		self._timer: Optional[Any] = None
		self._lock = threading.Lock()

	def trigger(self, *args) -> None:
		with self._lock:
			if self._timer is not None:
				self._timer.cancel()  # superseded keystroke
			self._timer = self._timer_factory(self.delay, self._fire, args=args)
			self._timer.daemon = True
			self._timer.start()

	def cancel(self) -> None:
		with self._lock:
			if self._timer is not None:
				self._timer.cancel()
				self._timer = None

	def _fire(self, *args) -> None:
		with self._lock:
			self._timer = None
		self.callback(*args)
