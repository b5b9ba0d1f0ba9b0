"""TOML object parser."""

from typing import Any

from .base import StructuredObjectParser


def _load_toml_module():
    try:
        import tomli
        return tomli
    except ImportError:
        try:
            import tomllib  # Python 3.11+
            return tomllib
        except ImportError:
            raise ImportError(
                "TOML support requires tomli. Install with: pip install remote-config-source[toml]"
            )


class TomlObjectParser(StructuredObjectParser):
    """Parses TOML documents."""

    format_name = "TOML"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._toml = _load_toml_module()

    def load_document(self, text: str) -> Any:
        return self._toml.loads(text)
