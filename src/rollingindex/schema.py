# Message document type and its field declarations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

DATE_FORMAT = "strict_date_optional_time||epoch_millis"


@dataclass(frozen=True)
class FieldSpec:
	name: str
	type: str
	format: Optional[str] = None

	def to_mapping(self) -> Dict[str, str]:
		mapping = {"type": self.type}
		if self.format:
			mapping["format"] = self.format
		return mapping


@dataclass(frozen=True)
class DocumentSchema:
	"""Logical document name plus the fields the store should map.

	The logical name doubles as the bucket prefix and the read alias.
	"""
	name: str
	fields: Tuple[FieldSpec, ...]

	@property
	def alias(self) -> str:
		return self.name

	def build_mapping(self) -> Dict[str, Any]:
		return {"properties": {field_spec.name: field_spec.to_mapping() for field_spec in self.fields}}


MESSAGE_FIELDS = (
	FieldSpec("message", "text"),
	FieldSpec("timestamp", "date", DATE_FORMAT),
)


def message_schema(name: str = "msg") -> DocumentSchema:
	return DocumentSchema(name=name, fields=MESSAGE_FIELDS)


def _to_iso(dt: Optional[datetime]) -> Optional[str]:
	if dt is None:
		return None
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: Any) -> Optional[datetime]:
	if value is None:
		return None
	if isinstance(value, datetime):
		return value
	if isinstance(value, (int, float)):
		return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
	if isinstance(value, str):
		clean = value.replace("Z", "+00:00")
		try:
			return datetime.fromisoformat(clean)
		except ValueError:
			return None
	return None


@dataclass(frozen=True)
class Message:
	"""A stored message. Instances are immutable; saving returns a copy with the id set."""
	message: str
	timestamp: Optional[datetime] = field(default_factory=lambda: datetime.now(timezone.utc))
	id: Optional[str] = None

	def to_source(self) -> Dict[str, Any]:
		source: Dict[str, Any] = {"message": self.message}
		# Documents stored without a usable timestamp are written back without one
		if self.timestamp is not None:
			source["timestamp"] = _to_iso(self.timestamp)
		return source

	@classmethod
	def from_source(cls, source: Dict[str, Any], id: Optional[str] = None) -> "Message":
		return cls(
			message=source.get("message") or "",
			timestamp=_parse_timestamp(source.get("timestamp")),
			id=id,
		)
