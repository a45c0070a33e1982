import fnmatch
import os
import sys
import uuid

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
	sys.path.insert(0, SRC_DIR)


class FakeIndices:
	def __init__(self, client):
		self._client = client
		self.templates = {}
		self.index_templates = {}
		self.put_calls = 0

	def exists_template(self, name):
		return name in self.templates

	def put_template(self, name, body):
		self.put_calls += 1
		self.templates[name] = body
		return {"acknowledged": True}

	def exists_index_template(self, name):
		return name in self.index_templates

	def put_index_template(self, name, body):
		self.put_calls += 1
		self.index_templates[name] = body
		return {"acknowledged": True}

	def refresh(self, index):
		return {}


class FakeOpenSearch:
	"""In-memory stand-in that creates indices on first write and applies index templates."""

	def __init__(self):
		self.indices = FakeIndices(self)
		self.docs = {}
		self.aliases = {}
		self.mappings = {}
		self.index_calls = []
		self.search_calls = []

	def _create_index(self, index):
		self.docs[index] = {}
		# Composable templates nest mappings and aliases under "template"
		bodies = list(self.indices.templates.values())
		for body in self.indices.index_templates.values():
			bodies.append(dict(body.get("template", {}), index_patterns=body["index_patterns"]))
		for body in bodies:
			if any(fnmatch.fnmatch(index, pattern) for pattern in body["index_patterns"]):
				self.mappings[index] = body.get("mappings")
				for alias in body.get("aliases", {}):
					self.aliases.setdefault(alias, []).append(index)

	def index(self, index, body, id=None, refresh=None):
		self.index_calls.append({"index": index, "body": body, "id": id, "refresh": refresh})
		if index not in self.docs:
			self._create_index(index)
		doc_id = id or uuid.uuid4().hex
		result = "updated" if doc_id in self.docs[index] else "created"
		self.docs[index][doc_id] = dict(body)
		return {"_index": index, "_id": doc_id, "result": result}

	def search(self, index, body):
		self.search_calls.append({"index": index, "body": body})
		if index in self.aliases:
			targets = self.aliases[index]
		elif index in self.docs:
			targets = [index]
		else:
			return None
		query = body.get("query", {})
		text = query.get("match", {}).get("message")
		hits = []
		for target in targets:
			for doc_id, source in self.docs[target].items():
				if text and text.lower() not in source.get("message", "").lower():
					continue
				hits.append({"_index": target, "_id": doc_id, "_score": 1.0, "_source": dict(source)})
		hits = hits[:body.get("size", 10)]
		return {"hits": {"total": {"value": len(hits), "relation": "eq"}, "max_score": 1.0 if hits else None, "hits": hits}}


@pytest.fixture
def fake_client():
	return FakeOpenSearch()


@pytest.fixture
def opensearch_client():
	"""Live client for integration tests; skips when OpenSearch is not reachable."""
	from rollingindex.opensearch.client import OpenSearchError, check_connection, get_opensearch_client
	from rollingindex.config import load_config

	cfg = load_config()
	client = get_opensearch_client(cfg)
	try:
		check_connection(client, cfg)
	except OpenSearchError as e:
		pytest.skip(f"OpenSearch not available: {e}")
	return client
