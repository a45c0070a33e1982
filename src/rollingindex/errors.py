# Error taxonomy for the rolling index core


class RollingIndexError(Exception):
	"""Base exception for rolling index operations."""
	pass


class ProvisionError(RollingIndexError):
	"""Raised when the index template cannot be checked or installed.

	Fatal at startup: without the template, new bucket indices would be
	created without mapping types or alias membership.
	"""
	pass


class WriteError(RollingIndexError):
	"""Raised when the store rejects a save."""
	pass


class ReadError(RollingIndexError):
	"""Raised when the store rejects a search."""
	pass
