"""
Field schema definitions and validation helpers for settings profiles.

This module describes the fields edited by ``ccp configure``, validates profile and
backup names, and coerces raw command-line values into JSON values.
"""

from typing import Dict, Any, List, Optional
from dataclasses import dataclass
import json
import math

from .errors import InvalidName, TypeConflict


RESERVED_PREFIX = "."
FORBIDDEN_NAME_CHARS = ("/", "\\", "\0")


@dataclass
class FieldSchema:
    """Defines a configurable settings field and how to validate it."""

    path: str
    field_type: type
    description: str = ""
    secret: bool = False
    default: Any = None

    def validate(self, value: Any) -> Any:
        """Validate a value against this field schema."""
        if value is None:
            return self.default

        # bool is a subclass of int; keep them apart
        if self.field_type is not bool and isinstance(value, bool):
            raise TypeConflict(self.path, self.path.split('.')[-1],
                               f"expected {self.field_type.__name__}, got bool")
        if not isinstance(value, self.field_type):
            raise TypeConflict(self.path, self.path.split('.')[-1],
                               f"expected {self.field_type.__name__}, got {type(value).__name__}")
        return value

    def display(self, value: Any) -> str:
        """Render the current value for a prompt, masking secrets."""
        if value is None:
            return ""
        if self.secret and isinstance(value, str):
            return mask_secret(value)
        if isinstance(value, bool):
            return "yes" if value else "no"
        return str(value)


class ConfigSchema:
    """
    The set of fields offered by interactive configuration.

    Every other key in a profile is left untouched; these are only the fields
    most people change when pointing the application at another provider.
    """

    DEFAULT_FIELDS = [
        FieldSchema("model", str, description="Model"),
        FieldSchema("env.ANTHROPIC_BASE_URL", str, description="API Base URL (env.ANTHROPIC_BASE_URL)"),
        FieldSchema("env.ANTHROPIC_AUTH_TOKEN", str, description="API Token", secret=True),
        FieldSchema("alwaysThinkingEnabled", bool, description="Always thinking enabled?", default=False),
    ]

    def __init__(self, fields: Optional[List[FieldSchema]] = None):
        self.fields = list(fields) if fields is not None else list(self.DEFAULT_FIELDS)
        self._by_path: Dict[str, FieldSchema] = {f.path: f for f in self.fields}

    def get_field(self, path: str) -> Optional[FieldSchema]:
        return self._by_path.get(path)

    def validate_values(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate answers from a configure session.

        Args:
            values: Mapping of field path to new value; unknown paths are
                accepted as-is so callers can extend the session

        Returns:
            Dictionary of validated values

        Raises:
            TypeConflict: If a known field receives a value of the wrong type
        """
        validated = {}
        for path, value in values.items():
            field = self._by_path.get(path)
            # None means "remove this field" and is passed through unchanged
            if field is None or value is None:
                validated[path] = value
            else:
                validated[path] = field.validate(value)
        return validated


def mask_secret(value: str) -> str:
    if len(value) > 10:
        return f"{value[:6]}...{value[-4:]}"
    return value


def validate_name(name: str, kind: str = "profile") -> str:
    """
    Check that a profile or backup name maps to exactly one file.

    Raises:
        InvalidName: If the name is empty, contains a path separator, or starts
            with '.' (reserved for the current-pointer file and temp files)
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidName(str(name), f"{kind} name must not be empty")
    if name != name.strip():
        raise InvalidName(name, f"{kind} name must not start or end with whitespace")
    for char in FORBIDDEN_NAME_CHARS:
        if char in name:
            raise InvalidName(name, f"{kind} name must not contain {char!r}")
    if name.startswith(RESERVED_PREFIX):
        raise InvalidName(name, f"{kind} name must not start with '{RESERVED_PREFIX}'")
    return name


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"{text} is out of range")
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def parse_cli_value(raw: str) -> Any:
    """
    Interpret a command-line value as JSON, falling back to a plain string.

    NaN, Infinity and numbers that overflow a float are kept as strings, since
    they cannot be written back as JSON.
    """
    try:
        return json.loads(raw, parse_float=_finite_float, parse_constant=_reject_constant)
    except (ValueError, TypeError):
        return raw
