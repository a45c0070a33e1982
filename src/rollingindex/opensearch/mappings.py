# OpenSearch index template bodies

from typing import Any, Dict, Optional


def alias_rule(alias_name: str) -> Dict[str, Any]:
	"""Alias assignment applied by the store to every index the template matches."""
	return {alias_name: {}}


def build_template_body(index_pattern: str, mapping: Dict[str, Any], aliases: Dict[str, Any], api: str = "legacy", settings: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
	"""Build a template body for either the legacy or the composable template API."""
	if api == "legacy":
		body: Dict[str, Any] = {
			"index_patterns": [index_pattern],
			"mappings": mapping,
			"aliases": aliases,
		}
		if settings:
			body["settings"] = settings
		return body
	if api == "composable":
		template: Dict[str, Any] = {"mappings": mapping, "aliases": aliases}
		if settings:
			template["settings"] = settings
		return {
			"index_patterns": [index_pattern],
			"template": template,
		}
	raise ValueError(f"Unknown template API: {api!r}")
