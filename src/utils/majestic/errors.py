from typing import Any, Dict, List, Optional


class MajesticError(Exception):
    """Base class for every failure raised while serving a Majestic tool call"""


class ConfigError(MajesticError):
    """The Majestic API key is missing or empty"""


class ValidationError(MajesticError):
    """Tool arguments were rejected before any request was made"""

    def __init__(self, tool_name: str, errors: List[Dict[str, Any]]):
        self.tool_name = tool_name
        self.errors = errors
        self.fields = [
            ".".join(str(part) for part in error.get("loc", ())) or "arguments"
            for error in errors
        ]
        details = "; ".join(
            f"{field}: {error.get('msg', 'invalid value')}"
            for field, error in zip(self.fields, errors)
        )
        super().__init__(f"Invalid arguments for {tool_name}: {details}")


class TransportError(MajesticError):
    """The HTTP call did not complete or returned a non-success status"""

    def __init__(self, status_code: Optional[int], reason: str):
        self.status_code = status_code
        self.reason = reason
        if status_code is None:
            super().__init__(f"Majestic API error: {reason}")
        else:
            super().__init__(f"Majestic API error: {status_code} {reason}")


class ParseError(MajesticError):
    """The response body is not a JSON object"""


class ProviderError(MajesticError):
    """The envelope parsed but its Code is not OK"""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code
        super().__init__(f"Majestic API error: {message}")
