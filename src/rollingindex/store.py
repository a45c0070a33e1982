# Generic document store operations on top of an OpenSearch-style client

from typing import Any, Dict, Optional

from .opensearch.client import IndexNotFoundError
from .opensearch.mappings import build_template_body
from .opensearch.queries import build_search_body


class DocumentStore:
	"""The four store operations the rolling index core relies on.

	The store's put-template must be overwriting rather than exclusive-create,
	so two processes that both see "absent" and both create are harmless.
	"""

	def __init__(self, client, template_api="legacy"):
		self.client = client
		self.template_api = template_api

	def template_exists(self, name: str) -> bool:
		if self.template_api == "composable":
			return bool(self.client.indices.exists_index_template(name=name))
		return bool(self.client.indices.exists_template(name=name))

	def create_template(self, name: str, index_pattern: str, mapping: Dict[str, Any], alias_rule: Dict[str, Any]) -> None:
		body = build_template_body(index_pattern, mapping, alias_rule, api=self.template_api)
		if self.template_api == "composable":
			self.client.indices.put_index_template(name=name, body=body)
		else:
			self.client.indices.put_template(name=name, body=body)

	def save(self, document: Dict[str, Any], index_name: str, id: Optional[str] = None, refresh: Optional[bool] = None) -> Dict[str, Any]:
		"""Write a document into a concrete index; the store assigns an id when none is given."""
		response = self.client.index(index=index_name, body=document, id=id, refresh=refresh)
		if not isinstance(response, dict) or not response.get("_id"):
			raise ValueError(f"OpenSearch index into '{index_name}' returned {response!r}")
		return response

	def search(self, target: str, query: Dict[str, Any], size: int) -> Dict[str, Any]:
		"""Search an alias or index. Raises IndexNotFoundError if the target does not exist."""
		response = self.client.search(index=target, body=build_search_body(query, size))
		if response is None:
			raise IndexNotFoundError(f"Index or alias '{target}' does not exist.")
		if not isinstance(response, dict):
			raise ValueError(f"OpenSearch search returned {type(response).__name__}")
		return response

	def refresh(self, target: str) -> None:
		self.client.indices.refresh(index=target)
