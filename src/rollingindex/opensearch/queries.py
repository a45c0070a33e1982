# Query bodies and hit parsing for message searches

from typing import Any, Dict, List


def match_all_query() -> Dict[str, Any]:
	return {"match_all": {}}


def message_query(text: str) -> Dict[str, Any]:
	return {"match": {"message": text}}


def build_search_body(query: Dict[str, Any], size: int) -> Dict[str, Any]:
	return {"query": query, "size": size}


def hits_of(response: Dict[str, Any]) -> List[Dict[str, Any]]:
	return response.get("hits", {}).get("hits", [])


def total_of(response: Dict[str, Any]) -> int:
	total = response.get("hits", {}).get("total", 0)
	# 7.x returns {"value": n, "relation": ...}, 6.x a bare integer
	if isinstance(total, dict):
		return int(total.get("value", 0))
	return int(total or 0)


def max_score_of(response: Dict[str, Any]):
	return response.get("hits", {}).get("max_score")

