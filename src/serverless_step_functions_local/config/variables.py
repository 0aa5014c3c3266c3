"""
Variable Resolver

Resolves Serverless-style variable references embedded in configuration
strings:

- ``${self:provider.stage}``: dotted lookup into the configuration itself
- ``${opt:stage}``: command line options
- ``${env:HOME}``: environment variables
- ``${opt:stage, 'dev'}``: comma separated fallbacks (quoted strings,
  numbers or further ``source:address`` references)

A string made of a single reference takes the referenced value with its
type; references embedded in longer strings are stringified. Nested
references resolve inside-out. References that cannot be resolved and have
no usable fallback are left untouched.
"""

import copy
import logging
import os
import re
from typing import Any, Dict, List, Mapping, Optional, Set

logger = logging.getLogger(__name__)

# Innermost reference: no "$", "{" or "}" between the braces
VARIABLE_PATTERN = re.compile(r"\$\{([^${}]+)\}")
SOURCE_PATTERN = re.compile(r"^(self|opt|env):(.*)$")
NUMBER_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")

MAX_PASSES = 10
MAX_EXPANSIONS = 32

_UNRESOLVED = object()


def split_fallbacks(expression: str) -> List[str]:
    """Split a reference expression on commas that are not inside quotes."""
    parts = []
    current = []
    quote = None
    for char in expression:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == ",":
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return parts


class VariableResolver:
    """
    Resolves ``${source:address}`` references against options, environment
    and the configuration tree being resolved.
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None, environ: Optional[Mapping[str, str]] = None):
        self.options = dict(options or {})
        self.environ = os.environ if environ is None else environ

    def populate_object(self, tree: Any, options: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Return a resolved deep copy of ``tree``.

        Args:
            tree: Parsed configuration (dicts, lists, scalars)
            options: Replaces the resolver's options before resolving, when given
        """
        if options is not None:
            self.options = dict(options)
        return self._resolve_tree(copy.deepcopy(tree), tree, set(), 0)

    def populate_service(self, service, options: Optional[Mapping[str, Any]] = None) -> None:
        """
        Re-resolve a service's configuration blocks in place.

        ``self:`` references are looked up in the service's own configuration.
        """
        if options is not None:
            self.options = dict(options)
        root = service.to_dict()
        service.custom = self._resolve_tree(service.custom, root, set(), 0)
        service.provider = self._resolve_tree(service.provider, root, set(), 0)
        service.step_functions = self._resolve_tree(service.step_functions, root, set(), 0)

    def resolve_string(self, value: str, root: Any) -> Any:
        """Resolve every reference in ``value``; may return a non-string for whole-string references."""
        return self._resolve_string(value, root, set(), 0)

    def _resolve_tree(self, node: Any, root: Any, active: Set[int], expansions: int) -> Any:
        """Resolve strings anywhere in ``node``; ``active`` holds ids of containers on the current path."""
        if isinstance(node, (dict, list)):
            if id(node) in active:
                logger.warning("Skipping recursive configuration node while resolving variables")
                return node
            active.add(id(node))
            try:
                if isinstance(node, dict):
                    return {key: self._resolve_tree(value, root, active, expansions) for key, value in node.items()}
                return [self._resolve_tree(item, root, active, expansions) for item in node]
            finally:
                active.discard(id(node))
        if isinstance(node, str):
            return self._resolve_string(node, root, active, expansions)
        return node

    def _resolve_string(self, value: str, root: Any, active: Set[int], expansions: int) -> Any:
        for _ in range(MAX_PASSES):
            whole = VARIABLE_PATTERN.fullmatch(value)
            if whole:
                resolved = self._resolve_reference(whole.group(1), root)
                if resolved is _UNRESOLVED:
                    return value
                if isinstance(resolved, (dict, list)):
                    if expansions >= MAX_EXPANSIONS:
                        logger.warning("Gave up expanding %r after %d nested references", value, MAX_EXPANSIONS)
                        return value
                    return self._resolve_tree(copy.deepcopy(resolved), root, active, expansions + 1)
                if not isinstance(resolved, str) or not VARIABLE_PATTERN.search(resolved):
                    return resolved
                value = resolved
                continue

            substituted = VARIABLE_PATTERN.sub(lambda m: self._substitute(m, root), value)
            if substituted == value:
                return value
            value = substituted
        logger.warning("Gave up resolving variables in %r after %d passes", value, MAX_PASSES)
        return value

    def _substitute(self, match: "re.Match", root: Any) -> str:
        resolved = self._resolve_reference(match.group(1), root)
        if resolved is _UNRESOLVED:
            return match.group(0)
        return str(resolved)

    def _resolve_reference(self, expression: str, root: Any) -> Any:
        candidates = split_fallbacks(expression)
        for position, candidate in enumerate(candidates):
            resolved = self._resolve_candidate(candidate, root, is_fallback=position > 0)
            if resolved is not _UNRESOLVED:
                return resolved
        return _UNRESOLVED

    def _resolve_candidate(self, candidate: str, root: Any, is_fallback: bool = False) -> Any:
        if not candidate:
            return _UNRESOLVED
        if len(candidate) >= 2 and candidate[0] == candidate[-1] and candidate[0] in ("'", '"'):
            return candidate[1:-1]
        if NUMBER_PATTERN.match(candidate):
            return float(candidate) if "." in candidate else int(candidate)

        source = SOURCE_PATTERN.match(candidate)
        if not source:
            # Fallbacks may be values substituted from an inner reference
            if is_fallback:
                return candidate
            logger.debug("Unsupported variable reference: %s", candidate)
            return _UNRESOLVED

        kind, address = source.group(1), source.group(2).strip()
        if kind == "opt":
            found = self.options.get(address)
        elif kind == "env":
            found = self.environ.get(address)
        else:
            found = lookup_path(root, address)
        return _UNRESOLVED if found is None else found


def lookup_path(tree: Any, address: str) -> Any:
    """
    Look up a dotted path (``provider.stage``) in a configuration tree.

    List elements are addressed by index. Returns None when any segment is missing.
    """
    node = tree
    if not address:
        return node
    for segment in address.split("."):
        if isinstance(node, dict):
            node = node.get(segment)
        elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
            node = node[int(segment)]
        else:
            return None
        if node is None:
            return None
    return node


def resolve_variables(tree: Any, options: Optional[Dict[str, Any]] = None, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Shortcut for ``VariableResolver(options, environ).populate_object(tree)``."""
    return VariableResolver(options, environ).populate_object(tree)
