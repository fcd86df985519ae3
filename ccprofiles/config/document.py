"""
JSON document model for settings profiles.

This module provides the Document class, an in-memory JSON object with dotted-path
access (``env.ANTHROPIC_BASE_URL``), plus the structural diff used to compare two
documents leaf by leaf.
"""

from typing import Dict, Any, List, Optional, Union, NamedTuple
import json
import math
import copy

from .errors import PathNotFound, TypeConflict, InvalidPath, ParseError


class _Absent:
    """Marker for a path that is missing on one side of a diff."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


ABSENT = _Absent()


class DiffEntry(NamedTuple):
    path: str
    left: Any
    right: Any


def split_path(path: str) -> List[str]:
    """Split a dotted path into its segments, rejecting empty segments."""
    if not isinstance(path, str) or not path:
        raise InvalidPath(str(path))
    parts = path.split('.')
    if any(part == '' for part in parts):
        raise InvalidPath(path)
    return parts


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are accepted by the json module but are not JSON
    raise ValueError(f"{name} is not a valid JSON value")


def _check_json_value(value: Any, path: str) -> None:
    if isinstance(value, float) and not math.isfinite(value):
        raise TypeConflict(path, path.split('.')[-1], f"{value} is not a JSON value")
    if value is None or isinstance(value, (bool, int, float, str)):
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _check_json_value(item, path)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeConflict(path, str(key), f"object keys must be strings, got {type(key).__name__}")
            _check_json_value(item, path)
        return
    raise TypeConflict(path, path.split('.')[-1], f"{type(value).__name__} is not a JSON value")


class Document:
    """
    In-memory JSON object with dotted-path get/set/unset.

    The root is always a mapping. Values are plain Python JSON types
    (None, bool, int, float, str, list, dict); insertion order is kept in memory
    but serialization sorts keys so files stay stable under diff.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TypeConflict("", "", f"document root must be an object, got {type(data).__name__}")
        _check_json_value(data, "")
        self._data: Dict[str, Any] = copy.deepcopy(data)

    @classmethod
    def parse(cls, raw: Union[bytes, str], source: str = "<input>") -> 'Document':
        """
        Parse a JSON text into a Document.

        Args:
            raw: JSON text as bytes (UTF-8, BOM tolerated) or str
            source: Description of where the text came from, used in errors

        Returns:
            Document instance

        Raises:
            ParseError: If the text is not valid JSON or its root is not an object
        """
        if isinstance(raw, bytes):
            try:
                raw = raw.decode('utf-8-sig')
            except UnicodeDecodeError as e:
                raise ParseError(source, f"not valid UTF-8 ({e.reason})")
        try:
            data = json.loads(raw, parse_constant=_reject_constant)
        except json.JSONDecodeError as e:
            raise ParseError(source, f"{e.msg} at line {e.lineno} column {e.colno}")
        except ValueError as e:
            raise ParseError(source, str(e))
        if not isinstance(data, dict):
            raise ParseError(source, f"expected a JSON object at the top level, got {type(data).__name__}")
        try:
            return cls(data)
        except TypeConflict as e:
            # numbers such as 1e999 overflow to infinity
            raise ParseError(source, e.detail)

    def serialize(self) -> bytes:
        """Pretty-print with sorted keys and a trailing newline."""
        text = json.dumps(self._data, indent=2, sort_keys=True, ensure_ascii=False, allow_nan=False)
        return (text + "\n").encode('utf-8')

    def to_dict(self) -> Dict[str, Any]:
        """Get a deep copy of the underlying data."""
        return copy.deepcopy(self._data)

    def copy(self) -> 'Document':
        return Document(self._data)

    def get(self, path: str) -> Any:
        """
        Resolve a dotted path.

        Args:
            path: Dot-separated key path (e.g. 'env.ANTHROPIC_BASE_URL')

        Returns:
            A deep copy of the value stored at the path

        Raises:
            PathNotFound: If any segment is missing or crosses a non-object
        """
        current: Any = self._data
        for part in split_path(path):
            if not isinstance(current, dict) or part not in current:
                raise PathNotFound(path)
            current = current[part]
        return copy.deepcopy(current)

    def has(self, path: str) -> bool:
        try:
            self.get(path)
            return True
        except PathNotFound:
            return False

    def set(self, path: str, value: Any) -> None:
        """
        Set a value at a dotted path, creating intermediate objects as needed.

        Raises:
            TypeConflict: If an intermediate segment holds a non-object value,
                or the value itself is not representable as JSON
        """
        parts = split_path(path)
        _check_json_value(value, path)

        current = self._data
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            elif not isinstance(current[part], dict):
                raise TypeConflict(path, part)
            current = current[part]

        if isinstance(value, tuple):
            value = list(value)
        current[parts[-1]] = copy.deepcopy(value)

    def unset(self, path: str) -> bool:
        """
        Remove the value at a dotted path.

        Returns:
            True if a value was removed, False if the path was already absent
        """
        parts = split_path(path)
        current: Any = self._data
        for part in parts[:-1]:
            if not isinstance(current, dict) or part not in current:
                return False
            current = current[part]

        if isinstance(current, dict) and parts[-1] in current:
            del current[parts[-1]]
            return True
        return False

    def flatten(self) -> Dict[str, Any]:
        """
        Map every leaf path to its value.

        Scalars, arrays and empty objects are leaves; non-empty objects are
        descended into.
        """
        leaves: Dict[str, Any] = {}

        def walk(node: Dict[str, Any], prefix: str) -> None:
            for key, value in node.items():
                path = f"{prefix}.{key}" if prefix else key
                if isinstance(value, dict) and value:
                    walk(value, path)
                else:
                    leaves[path] = value

        walk(self._data, "")
        return leaves

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Document):
            return False
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Document(keys={list(self._data.keys())})"


def _same_value(left: Any, right: Any) -> bool:
    # compare as JSON text so that true and 1 stay distinct
    return json.dumps(left, sort_keys=True, allow_nan=False) == json.dumps(right, sort_keys=True, allow_nan=False)


def diff(left: Document, right: Document) -> List[DiffEntry]:
    """
    Compare two documents leaf by leaf.

    Args:
        left: First document
        right: Second document

    Returns:
        Sorted list of DiffEntry for every leaf path whose value differs.
        A path present on only one side reports ABSENT for the other side.
    """
    left_leaves = left.flatten()
    right_leaves = right.flatten()

    entries = []
    for path in sorted(set(left_leaves) | set(right_leaves)):
        left_value = left_leaves.get(path, ABSENT)
        right_value = right_leaves.get(path, ABSENT)
        if left_value is ABSENT or right_value is ABSENT or not _same_value(left_value, right_value):
            entries.append(DiffEntry(path, left_value, right_value))
    return entries
