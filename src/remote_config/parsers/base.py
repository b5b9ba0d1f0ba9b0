"""Object parser contract."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..errors import ParseError

DEFAULT_DELIMITER = ":"


class ObjectParser(ABC):
    """Turns the raw bytes of a remote object into a flat string mapping.

    Implementations must be deterministic and side-effect free. Malformed
    input raises ``ParseError``.
    """

    @abstractmethod
    def parse(self, content: bytes) -> Dict[str, str]:
        """Parse raw object content.

        Args:
            content: Object body as downloaded from the store

        Returns:
            Flat mapping of configuration keys to string values

        Raises:
            ParseError: If the content is malformed
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class StructuredObjectParser(ObjectParser):
    """Base for parsers of nested documents (JSON, YAML, TOML).

    Subclasses decode text into a nested structure; the result is flattened
    into ``section:key`` style keys.
    """

    format_name = "structured"

    def __init__(self, delimiter: str = DEFAULT_DELIMITER, encoding: str = "utf-8"):
        self.delimiter = delimiter
        self.encoding = encoding

    @abstractmethod
    def load_document(self, text: str) -> Any:
        """Decode text into a nested structure."""
        pass

    def parse(self, content: bytes) -> Dict[str, str]:
        try:
            text = content.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise ParseError(f"{self.format_name} payload is not valid {self.encoding}", e) from e

        if text.startswith("\ufeff"):
            text = text[1:]
        if not text.strip():
            return {}

        try:
            document = self.load_document(text)
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(f"Malformed {self.format_name} payload: {e}", e) from e

        if document is None:
            return {}
        if not isinstance(document, dict):
            raise ParseError(
                f"{self.format_name} root must be a mapping, got {type(document).__name__}"
            )
        return flatten(document, self.delimiter)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(delimiter={self.delimiter!r})"


def flatten(document: Dict[str, Any], delimiter: str = DEFAULT_DELIMITER) -> Dict[str, str]:
    """Flatten a nested document into delimiter-joined keys.

    Lists are indexed by position, booleans render as ``true``/``false`` and
    nulls as empty strings. Empty containers produce no keys.

    >>> flatten({"db": {"hosts": ["a", "b"], "tls": True}})
    {'db:hosts:0': 'a', 'db:hosts:1': 'b', 'db:tls': 'true'}
    """
    result: Dict[str, str] = {}
    _flatten_into(result, document, "", delimiter)
    return result


def _flatten_into(result: Dict[str, str], value: Any, path: str, delimiter: str) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            key_path = f"{path}{delimiter}{key}" if path else str(key)
            _flatten_into(result, child, key_path, delimiter)
    elif isinstance(value, (list, tuple)):
        for index, child in enumerate(value):
            key_path = f"{path}{delimiter}{index}" if path else str(index)
            _flatten_into(result, child, key_path, delimiter)
    else:
        result[path] = _render(value)


def _render(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
