"""YAML object parser."""

from typing import Any

from .base import StructuredObjectParser


class YamlObjectParser(StructuredObjectParser):
    """Parses YAML documents with ``yaml.safe_load``."""

    format_name = "YAML"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        try:
            import yaml
        except ImportError:
            raise ImportError(
                "YAML support requires PyYAML. Install with: pip install remote-config-source[yaml]"
            )
        self._yaml = yaml

    def load_document(self, text: str) -> Any:
        return self._yaml.safe_load(text)
