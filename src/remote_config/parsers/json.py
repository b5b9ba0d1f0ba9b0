"""JSON object parser."""

import json
from typing import Any

from .base import StructuredObjectParser


class JsonObjectParser(StructuredObjectParser):
    """Parses JSON documents.

    ``{"Logging": {"Level": "debug"}}`` becomes ``{"Logging:Level": "debug"}``.
    """

    format_name = "JSON"

    def load_document(self, text: str) -> Any:
        return json.loads(text)
