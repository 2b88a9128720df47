"""Host document boundary.

Diagram sources never walk a document tree themselves. Attribute inheritance,
path normalization and text substitution are delegated to an object that
satisfies HostDocument. Document is a small in-memory implementation of that
protocol used by the CLI and by tests.
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

Inherit = Union[bool, str, None]

ATTRIBUTE_REFERENCE = re.compile(r"\\?\{([A-Za-z0-9_][A-Za-z0-9_-]*)\}")

SUB_ALIASES = {
    "a": "attributes",
    "c": "specialcharacters",
    "specialchars": "specialcharacters",
    "n": "normal",
}

NORMAL_SUBS = ["specialcharacters", "attributes"]

SPECIAL_CHARACTERS = {"&": "&amp;", "<": "&lt;", ">": "&gt;"}


class HostDocument(Protocol):
    """Operations a diagram source consumes from the surrounding document."""

    def attr(self, name: str, default: Any = None, inherit: Inherit = None) -> Any:
        ...

    def normalize_system_path(self, target: str, start: Optional[str] = None) -> str:
        ...

    def apply_subs(self, lines: Sequence[str], subs: Sequence[str]) -> List[str]:
        ...

    def resolve_block_subs(self, subs: str, default_subs: Optional[Sequence[str]], subject: str) -> List[str]:
        ...


class Document:
    """In-memory document scope with an optional parent scope.

    Args:
        attributes: Attributes defined on this scope
        parent: Enclosing scope consulted when inheritance is requested
        base_dir: Directory relative paths resolve against (defaults to the
            inherited 'docdir' attribute, then the current directory)
    """

    def __init__(
        self,
        attributes: Optional[Dict[str, Any]] = None,
        parent: Optional["Document"] = None,
        base_dir: Optional[str] = None,
    ):
        self.attributes: Dict[str, Any] = dict(attributes or {})
        self.parent = parent
        self._base_dir = base_dir

    @property
    def base_dir(self) -> str:
        if self._base_dir:
            return self._base_dir
        return self.attr("docdir", None, True) or os.getcwd()

    def attr(self, name: str, default: Any = None, inherit: Inherit = None) -> Any:
        value = self.attributes.get(name)
        if value is None and inherit and self.parent is not None:
            if isinstance(inherit, str):
                value = self.parent.attr(f"{inherit}-{name}", None, True)
            else:
                value = self.parent.attr(name, None, inherit)
        return default if value is None else value

    def normalize_system_path(self, target: str, start: Optional[str] = None) -> str:
        if os.path.isabs(target):
            return os.path.normpath(target)
        return os.path.normpath(os.path.join(start or self.base_dir, target))

    def resolve_block_subs(self, subs: str, default_subs: Optional[Sequence[str]], subject: str) -> List[str]:
        """Parse a comma-separated 'subs' attribute value into substitution names.

        Supports the '+name' (append), 'name+' (prepend) and '-name' (remove)
        modifiers relative to default_subs.
        """
        resolved: List[str] = []
        for entry in (part.strip() for part in subs.split(",")):
            if not entry:
                continue
            if entry.startswith("+"):
                if not resolved:
                    resolved = list(default_subs or [])
                resolved.extend(self._expand_sub(entry[1:]))
            elif entry.endswith("+"):
                if not resolved:
                    resolved = list(default_subs or [])
                resolved = self._expand_sub(entry[:-1]) + resolved
            elif entry.startswith("-"):
                if not resolved:
                    resolved = list(default_subs or [])
                removed = set(self._expand_sub(entry[1:]))
                resolved = [s for s in resolved if s not in removed]
            else:
                resolved.extend(self._expand_sub(entry))

        seen = set()
        return [s for s in resolved if not (s in seen or seen.add(s))]

    @staticmethod
    def _expand_sub(name: str) -> List[str]:
        name = SUB_ALIASES.get(name, name)
        if name == "none":
            return []
        if name == "normal":
            return list(NORMAL_SUBS)
        return [name]

    def apply_subs(self, lines: Sequence[str], subs: Sequence[str]) -> List[str]:
        result = list(lines)
        for sub in subs:
            if sub == "specialcharacters":
                result = [self._escape(line) for line in result]
            elif sub == "attributes":
                result = [self._substitute_attributes(line) for line in result]
        return result

    @staticmethod
    def _escape(line: str) -> str:
        return "".join(SPECIAL_CHARACTERS.get(ch, ch) for ch in line)

    def _substitute_attributes(self, line: str) -> str:
        def replace(match: "re.Match[str]") -> str:
            if match.group(0).startswith("\\"):
                return match.group(0)[1:]
            value = self.attr(match.group(1), None, True)
            # Unknown references are left untouched
            return match.group(0) if value is None else str(value)

        return ATTRIBUTE_REFERENCE.sub(replace, line)
