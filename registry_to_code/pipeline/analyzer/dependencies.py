"""
Dependency analysis and best-effort topological sort.

A container hard-depends on another when it embeds a reference to it in a
position whose layout must be known where the container is defined: a
direct field, a tuple element, an optional payload or a fixed-array
element. References held inside a sequence or a map are stored out of line
and never create a hard dependency.
"""

from __future__ import annotations

import heapq
import logging
from collections import defaultdict
from collections.abc import Collection, Iterator

from ...errors import UnfinalizedFormatError
from ..formats import (
    ContainerFormat,
    Enum,
    FixedArray,
    Format,
    Map,
    NewTypeStruct,
    NewTypeVariant,
    Option,
    Primitive,
    Registry,
    Seq,
    Struct,
    StructVariant,
    Tuple,
    TupleStruct,
    TupleVariant,
    TypeName,
    UnitStruct,
    UnitVariant,
    Variable,
)

logger = logging.getLogger(__name__)


def container_formats(container: ContainerFormat) -> Iterator[tuple[list[str], Format]]:
    """
    Yield every top-level format of a container with its qualified path.

    The path is relative to the container: [] for a newtype payload,
    [field] for struct fields, [variant] or [variant, field] for enums.
    """
    if isinstance(container, UnitStruct):
        return
    if isinstance(container, NewTypeStruct):
        yield [], container.format
    elif isinstance(container, TupleStruct):
        for format in container.formats:
            yield [], format
    elif isinstance(container, Struct):
        for field in container.fields:
            yield [field.name], field.value
    elif isinstance(container, Enum):
        for index in sorted(container.variants):
            variant = container.variants[index]
            value = variant.value
            if isinstance(value, UnitVariant):
                continue
            if isinstance(value, NewTypeVariant):
                yield [variant.name], value.format
            elif isinstance(value, TupleVariant):
                for format in value.formats:
                    yield [variant.name], format
            elif isinstance(value, StructVariant):
                for field in value.fields:
                    yield [variant.name, field.name], field.value
            else:
                raise TypeError(f"Unknown variant format {value!r}")
    else:
        raise TypeError(f"Unknown container format {container!r}")


def hard_references(format: Format) -> Iterator[str]:
    """Yield the container names referenced by a format in hard positions."""
    if isinstance(format, TypeName):
        yield format.name
    elif isinstance(format, Primitive):
        return
    elif isinstance(format, Option):
        yield from hard_references(format.format)
    elif isinstance(format, Tuple):
        for item in format.formats:
            yield from hard_references(item)
    elif isinstance(format, FixedArray):
        yield from hard_references(format.content)
    elif isinstance(format, (Seq, Map)):
        return
    elif isinstance(format, Variable):
        raise UnfinalizedFormatError()
    else:
        raise TypeError(f"Unknown format {format!r}")


def all_references(format: Format) -> Iterator[str]:
    """Yield every container name referenced by a format, in any position."""
    if isinstance(format, TypeName):
        yield format.name
    elif isinstance(format, Primitive):
        return
    elif isinstance(format, (Option, Seq)):
        yield from all_references(format.format)
    elif isinstance(format, Map):
        yield from all_references(format.key)
        yield from all_references(format.value)
    elif isinstance(format, Tuple):
        for item in format.formats:
            yield from all_references(item)
    elif isinstance(format, FixedArray):
        yield from all_references(format.content)
    elif isinstance(format, Variable):
        raise UnfinalizedFormatError()
    else:
        raise TypeError(f"Unknown format {format!r}")


def get_dependency_map(registry: Registry, external_names: Collection[str] = ()) -> dict[str, set[str]]:
    """
    Build the hard-dependency graph of a registry.

    Args:
        registry: The registry to analyze
        external_names: Names defined outside the generated output. They are
            neither nodes of the graph nor dependencies of any node.

    Returns:
        Mapping from container name to the set of names it hard-depends on
    """
    dependencies: dict[str, set[str]] = {}
    for name, container in registry.items():
        if name in external_names:
            continue
        targets = set()
        for path, format in container_formats(container):
            try:
                targets.update(hard_references(format))
            except UnfinalizedFormatError as e:
                raise UnfinalizedFormatError(".".join([name, *path])) from e
        dependencies[name] = {target for target in targets if target not in external_names}
    return dependencies


def strongly_connected_components(graph: dict[str, set[str]]) -> list[set[str]]:
    """
    Tarjan's algorithm, without recursion.

    Args:
        graph: Mapping from node to its successors; successors missing from
            the mapping are ignored

    Returns:
        The components, each successor component before its predecessors
    """
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    components: list[set[str]] = []

    def successors(node: str) -> Iterator[str]:
        return iter(sorted(target for target in graph[node] if target in graph))

    for root in sorted(graph):
        if root in index:
            continue
        index[root] = lowlink[root] = len(index)
        stack.append(root)
        on_stack.add(root)
        work = [(root, successors(root))]
        while work:
            node, children = work[-1]
            for child in children:
                if child not in index:
                    index[child] = lowlink[child] = len(index)
                    stack.append(child)
                    on_stack.add(child)
                    work.append((child, successors(child)))
                    break
                if child in on_stack:
                    lowlink[node] = min(lowlink[node], index[child])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])
                if lowlink[node] == index[node]:
                    component = set()
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.add(member)
                        if member == node:
                            break
                    components.append(component)
    return components


def cycle_breaking_candidates(dependencies: dict[str, set[str]], remaining: set[str]) -> set[str]:
    """
    Names that may be emitted first when no remaining name is ready.

    These are the members of the strongly connected components of the
    remaining graph whose dependencies all stay inside the component. Names
    that merely wait on a cycle are never candidates.
    """
    graph = {name: {target for target in dependencies[name] if target in remaining} for name in remaining}
    candidates: set[str] = set()
    for component in strongly_connected_components(graph):
        if all(graph[member] <= component for member in component):
            candidates |= component
    return candidates


def best_effort_topological_sort(dependencies: dict[str, set[str]]) -> list[str]:
    """
    Order names so that each comes after everything it depends on, when possible.

    Kahn's algorithm, always taking the smallest ready name. When cycles
    leave no name ready, the smallest name lying on a cycle that waits on
    nothing else is emitted anyway and the sort continues; its unresolved
    dependencies are then rendered through indirection. Dependencies on
    names missing from the map are ignored.

    Args:
        dependencies: Mapping from name to the names it depends on

    Returns:
        Every name of the map exactly once, in a deterministic order
    """
    pending = {name: 0 for name in dependencies}
    dependents: dict[str, list[str]] = defaultdict(list)
    for name, targets in dependencies.items():
        for target in targets:
            if target in dependencies:
                dependents[target].append(name)
                pending[name] += 1

    ready = [name for name, count in pending.items() if count == 0]
    heapq.heapify(ready)

    result: list[str] = []
    emitted: set[str] = set()
    while len(result) < len(dependencies):
        if not ready:
            remaining = {name for name in dependencies if name not in emitted}
            forced = min(cycle_breaking_candidates(dependencies, remaining))
            logger.debug("Dependency cycle: emitting %s before %d unresolved dependencies", forced, pending[forced])
            heapq.heappush(ready, forced)

        name = heapq.heappop(ready)
        if name in emitted:
            continue
        emitted.add(name)
        result.append(name)

        for dependent in dependents[name]:
            pending[dependent] -= 1
            if pending[dependent] == 0 and dependent not in emitted:
                heapq.heappush(ready, dependent)

    return result
