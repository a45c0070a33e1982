# Configuration loading for rollingindex

import os

# Lazy load dotenv - only when config is first accessed
_dotenv_loaded = False
_custom_dotenv_path = None

GRANULARITIES = ("minute-of-day", "minute", "hour", "day")
TEMPLATE_APIS = ("legacy", "composable")


def _getenv(name, default):
	value = os.getenv(name)
	return value if value else default


def _choice(name, default, allowed):
	value = _getenv(name, default).strip().lower()
	if value not in allowed:
		raise ValueError(f"Invalid {name}: {value!r} (expected one of: {', '.join(allowed)})")
	return value


class RollingIndexConfig:
	"""Loads configuration from environment variables and provides defaults."""
	def __init__(self):
		self.opensearch_host = _getenv("ROLLINGINDEX_OPENSEARCH_HOST", "localhost")
		self.opensearch_port = int(_getenv("ROLLINGINDEX_OPENSEARCH_PORT", "9200"))
		self.opensearch_user = _getenv("ROLLINGINDEX_OPENSEARCH_USER", "admin")
		self.opensearch_pass = _getenv("ROLLINGINDEX_OPENSEARCH_PASS", "admin")
		self.opensearch_timeout = int(_getenv("ROLLINGINDEX_OPENSEARCH_TIMEOUT", "30"))
		self.opensearch_scheme = _choice("ROLLINGINDEX_OPENSEARCH_SCHEME", "http", ("http", "https"))
		# Logical document name: bucket prefix and read alias (index names are lowercase)
		self.index_name = _getenv("ROLLINGINDEX_INDEX_NAME", "msg").strip().lower()
		self.template_name = _getenv("ROLLINGINDEX_TEMPLATE_NAME", f"{self.index_name}-template")
		self.template_api = _choice("ROLLINGINDEX_TEMPLATE_API", "legacy", TEMPLATE_APIS)
		self.granularity = _choice("ROLLINGINDEX_GRANULARITY", "minute-of-day", GRANULARITIES)
		self.search_limit = int(_getenv("ROLLINGINDEX_SEARCH_LIMIT", "10000"))

	@property
	def index_pattern(self):
		return f"{self.index_name}-*"


def set_dotenv_path(path: str):
	"""Set a custom .env file path to load. Must be called before load_config()."""
	global _custom_dotenv_path, _dotenv_loaded
	_custom_dotenv_path = path
	_dotenv_loaded = False  # Reset to force reload with new path


def load_config() -> RollingIndexConfig:
	"""Return a config object with all settings loaded."""
	global _dotenv_loaded, _custom_dotenv_path
	if not _dotenv_loaded:
		from dotenv import load_dotenv, find_dotenv
		dotenv_path = os.getenv("DOTENV_PATH") or _custom_dotenv_path
		if dotenv_path:
			# Explicit file wins over the process environment
			load_dotenv(dotenv_path, override=True)
		else:
			# Search for .env file in current directory and parents
			dotenv_path = find_dotenv(usecwd=True)
			if dotenv_path:
				load_dotenv(dotenv_path)
		_dotenv_loaded = True
	return RollingIndexConfig()
