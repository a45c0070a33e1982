# Logging handler that writes log records into the rolling index

import logging
import threading
import time
from datetime import datetime, timezone

from .schema import Message


class RollingIndexHandler(logging.Handler):
	"""Logging handler that saves each record as a message in the current bucket.

	Records are routed by their creation time, so a record lands in the bucket
	of the moment it was logged, not the moment it was indexed.
	"""
	# Circuit breaker state shared across all instances
	_circuit_open = False
	_circuit_open_until = 0.0
	_circuit_breaker_duration = 60.0  # seconds to wait before retrying
	_last_error_printed = 0.0
	_error_print_interval = 10.0  # only print errors every 10 seconds

	def __init__(self, repository, level=logging.DEBUG):
		super().__init__(level)
		self.repository = repository
		self._local = threading.local()

	def emit(self, record):
		# Records logged while saving (by this package or the store client) would recurse
		if getattr(self._local, "emitting", False):
			return

		# Circuit breaker: skip indexing while the store is known to be down
		current_time = time.time()
		if RollingIndexHandler._circuit_open and current_time < RollingIndexHandler._circuit_open_until:
			return

		self._local.emitting = True
		try:
			message = self.format_record(record)
			self.repository.save(message, now=message.timestamp)
			# Success - close circuit breaker if it was open
			if RollingIndexHandler._circuit_open:
				RollingIndexHandler._circuit_open = False
				print("[rollingindex] Connection restored, resuming indexing")
		except Exception as e:
			RollingIndexHandler._circuit_open = True
			RollingIndexHandler._circuit_open_until = current_time + RollingIndexHandler._circuit_breaker_duration

			# Only print error occasionally to avoid log spam
			if current_time - RollingIndexHandler._last_error_printed > RollingIndexHandler._error_print_interval:
				print(f"[rollingindex] Failed to index log, pausing indexing for {RollingIndexHandler._circuit_breaker_duration}s: {e}")
				RollingIndexHandler._last_error_printed = current_time
		finally:
			self._local.emitting = False

	def format_record(self, record):
		timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
		return Message(message=self.format(record), timestamp=timestamp)
