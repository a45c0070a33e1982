# OpenSearch client factory - using stdlib urllib for fast imports

import json
import urllib.request
import urllib.error
from base64 import b64encode
from urllib.parse import quote

from ..config import load_config


class OpenSearchError(Exception):
	"""Base exception for OpenSearch errors with user-friendly messages."""
	pass


class ConnectionFailedError(OpenSearchError):
	"""Raised when OpenSearch is not reachable."""
	pass


class IndexNotFoundError(OpenSearchError):
	"""Raised when the specified index or alias does not exist."""
	pass


class AuthenticationError(OpenSearchError):
	"""Raised when authentication fails."""
	pass


class QueryError(OpenSearchError):
	"""Raised when OpenSearch rejects a request."""

	def __init__(self, message, status=None, body=None):
		super().__init__(message)
		self.status = status
		self.body = body


def _error_reason(raw):
	"""Pull the most useful reason out of an OpenSearch error body."""
	try:
		payload = json.loads(raw)
	except ValueError:
		return raw.strip() or None
	error = payload.get("error") if isinstance(payload, dict) else None
	if isinstance(error, dict):
		return error.get("reason") or error.get("type")
	if error:
		return str(error)
	return None


class LightweightOpenSearchClient:
	"""Minimal OpenSearch client using stdlib urllib for fast imports."""

	def __init__(self, host, port, user, password, timeout=5, scheme="http"):
		self.base_url = f"{scheme}://{host}:{port}"
		self.timeout = timeout
		# Pre-compute auth header
		credentials = b64encode(f"{user}:{password}".encode()).decode('ascii')
		self.headers = {
			"Authorization": f"Basic {credentials}",
			"Content-Type": "application/json",
		}
		self.indices = _IndicesClient(self)

	def _request(self, method, path, body=None):
		"""Make HTTP request to OpenSearch. Returns None on 404."""
		url = f"{self.base_url}{path}"
		data = json.dumps(body).encode('utf-8') if body is not None else None
		req = urllib.request.Request(url, data=data, headers=self.headers, method=method)
		try:
			with urllib.request.urlopen(req, timeout=self.timeout) as resp:
				raw = resp.read().decode('utf-8')
				if not raw:
					return {}
				return json.loads(raw)
		except urllib.error.HTTPError as e:
			if e.code == 401:
				raise AuthenticationError("Authentication failed (HTTP 401)")
			if e.code == 404:
				return None
			raw = e.read().decode('utf-8', errors='replace') if e.fp else ""
			reason = _error_reason(raw) or e.reason
			raise QueryError(f"OpenSearch error: HTTP {e.code} - {reason}", status=e.code, body=raw)
		except urllib.error.URLError as e:
			raise ConnectionFailedError(f"Cannot connect: {e.reason}")

	def info(self):
		"""Get cluster info (used for connection check)."""
		return self._request("GET", "/")

	def search(self, index, body):
		"""Search an index or alias."""
		return self._request("POST", f"/{quote(index)}/_search", body)

	def index(self, index, body, id=None, refresh=None):
		"""Index a document. Without an id, OpenSearch assigns one."""
		path = f"/{quote(index)}/_doc"
		method = "POST"
		if id:
			path += f"/{quote(str(id), safe='')}"
			method = "PUT"
		if refresh is not None:
			path += f"?refresh={'true' if refresh else 'false'}"
		return self._request(method, path, body)


class _IndicesClient:
	"""Minimal indices operations."""

	def __init__(self, client):
		self._client = client

	def delete(self, index):
		"""Delete an index."""
		return self._client._request("DELETE", f"/{quote(index)}")

	def get_alias(self, name):
		"""Return {index: {"aliases": {...}}} for every index carrying the alias."""
		return self._client._request("GET", f"/_alias/{quote(name)}")

	def exists_template(self, name):
		"""Check if a legacy index template exists."""
		return self._client._request("HEAD", f"/_template/{quote(name)}") is not None

	def put_template(self, name, body):
		"""Create or update a legacy index template."""
		return self._client._request("PUT", f"/_template/{quote(name)}", body)

	def delete_template(self, name):
		"""Delete a legacy index template."""
		return self._client._request("DELETE", f"/_template/{quote(name)}")

	def exists_index_template(self, name):
		"""Check if a composable index template exists."""
		return self._client._request("HEAD", f"/_index_template/{quote(name)}") is not None

	def put_index_template(self, name, body):
		"""Create or update a composable index template."""
		return self._client._request("PUT", f"/_index_template/{quote(name)}", body)

	def refresh(self, index):
		"""Refresh an index to make recent changes searchable."""
		return self._client._request("POST", f"/{quote(index)}/_refresh")


def get_opensearch_client(cfg=None):
	cfg = cfg or load_config()
	return LightweightOpenSearchClient(
		host=cfg.opensearch_host,
		port=cfg.opensearch_port,
		user=cfg.opensearch_user,
		password=cfg.opensearch_pass,
		timeout=cfg.opensearch_timeout,
		scheme=cfg.opensearch_scheme,
	)


def check_connection(client, cfg=None):
	"""Check if OpenSearch is reachable. Raises ConnectionFailedError if not."""
	cfg = cfg or load_config()
	try:
		client.info()
	except ConnectionFailedError:
		raise ConnectionFailedError(
			f"Cannot connect to OpenSearch at {cfg.opensearch_host}:{cfg.opensearch_port}\n"
			f"Make sure OpenSearch is running and accessible."
		)
	except AuthenticationError:
		raise AuthenticationError(
			f"Authentication failed for OpenSearch at {cfg.opensearch_host}:{cfg.opensearch_port}\n"
			f"Check ROLLINGINDEX_OPENSEARCH_USER and ROLLINGINDEX_OPENSEARCH_PASS in your .env file."
		)
