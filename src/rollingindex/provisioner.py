# Index template provisioning: install the bucket template once, idempotently

import logging

from .errors import ProvisionError
from .opensearch.client import OpenSearchError
from .opensearch.mappings import alias_rule

logger = logging.getLogger(__name__)


class TemplateProvisioner:
	"""Ensures the template for bucket indices exists in the store.

	The template carries the mapping derived from the document schema and an
	alias rule, so every bucket index the store creates on first write gets
	the right field types and joins the read alias. The template lives in the
	store and outlives the process; nothing is kept locally.

	An existing template is left as is, even if its mapping no longer matches
	the schema.
	"""

	def __init__(self, store, schema, template_name=None, index_pattern=None):
		self.store = store
		self.schema = schema
		self.template_name = template_name or f"{schema.name}-template"
		self.index_pattern = index_pattern or f"{schema.name}-*"

	def build_template(self):
		"""Return (mapping, alias_rule) for the current schema."""
		return self.schema.build_mapping(), alias_rule(self.schema.alias)

	def ensure_template(self) -> bool:
		"""Install the template if absent. Returns True if it was installed."""
		try:
			if self.store.template_exists(self.template_name):
				logger.info("Index template '%s' already present", self.template_name)
				return False
			mapping, aliases = self.build_template()
			self.store.create_template(self.template_name, self.index_pattern, mapping, aliases)
		except (OpenSearchError, ValueError) as e:
			raise ProvisionError(f"Cannot provision index template '{self.template_name}': {e}") from e
		logger.info(
			"Installed index template '%s' for pattern '%s' with alias '%s'",
			self.template_name, self.index_pattern, self.schema.alias,
		)
		return True
