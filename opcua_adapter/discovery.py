"""
Namespace discovery for the OPC UA adapter.

Walks the server's node tree from a configured root and produces a flat list
of leaf points (Variable nodes) with derived labels, runtime types and
engineering unit ids.
"""

from collections import Counter
from typing import Iterable, Optional

from asyncua import ua
from asyncua.common.node import Node

from .errors import ConfigurationError
from .logging import log_debug, log_info, log_warn
from .types import Point, TypeConverter, derive_label

ENGINEERING_UNITS = "0:EngineeringUnits"

# Status codes get_child reports for a node without the property
MISSING_CHILD_CODES = (ua.StatusCodes.BadNoMatch, ua.StatusCodes.BadNodeIdUnknown)


class NamespaceDiscovery:
    """
    Discovers leaf points below a root node.

    Variable nodes are leaf points; their children (properties) are not
    descended into. Object and folder nodes are descended only for a
    recursive browse, otherwise only the root's direct children are
    considered.

    Usage:
        discovery = NamespaceDiscovery(client.get_node(root_id))
        points = await discovery.discover(include_subnodes=True)
    """

    def __init__(self, root: Node):
        """
        Initialize discovery.

        Args:
            root: asyncua Node the walk starts from
        """
        self.root = root

    async def discover(self, include_subnodes: bool) -> list[Point]:
        """
        Discover leaf points below the root.

        Args:
            include_subnodes: Descend recursively into object nodes

        Returns:
            Points in browse order
        """
        points: list[Point] = []
        visited: set = {self.root.nodeid}

        root_class = await self.root.read_node_class()
        if root_class == ua.NodeClass.Variable:
            points.append(await self._to_point(self.root))
            return points

        for child in await self.root.get_children():
            await self._visit(child, include_subnodes, points, visited)

        log_info(f"Discovered {len(points)} points below {self.root.nodeid.to_string()} "
                 f"(recursive={include_subnodes})")
        return points

    async def _visit(self, node: Node, recurse: bool, points: list[Point], visited: set) -> None:
        """Visit one node, adding it as a point or descending into it."""
        if node.nodeid in visited:
            return
        visited.add(node.nodeid)

        node_class = await node.read_node_class()

        if node_class == ua.NodeClass.Variable:
            points.append(await self._to_point(node))
            return

        if node_class != ua.NodeClass.Object or not recurse:
            return

        for child in await node.get_children():
            await self._visit(child, recurse, points, visited)

    async def _to_point(self, node: Node) -> Point:
        """Build a point from a Variable node."""
        variant_type = await self._read_variant_type(node)
        unit_id = await self._read_unit_id(node)
        point = Point.from_node_id(
            node.nodeid,
            TypeConverter.to_runtime_type(variant_type),
            unit_id
        )
        log_debug(f"Point {point.label} ({node.nodeid.to_string()}) type={point.runtime_type} unit={unit_id}")
        return point

    async def _read_variant_type(self, node: Node) -> Optional[ua.VariantType]:
        """
        Read the node's data type; None if it has no builtin variant type.

        Status errors reported by the server propagate.
        """
        try:
            return await node.read_data_type_as_variant_type()
        except (ValueError, KeyError) as e:
            log_warn(f"Could not map data type of {node.nodeid.to_string()}: {e}")
            return None

    async def _read_unit_id(self, node: Node) -> int:
        """Read the EngineeringUnits UnitId; 0 if the node has none."""
        try:
            eu_node = await node.get_child(ENGINEERING_UNITS)
        except ua.UaStatusCodeError as e:
            if e.code in MISSING_CHILD_CODES:
                return 0
            raise

        eu_info = await eu_node.read_value()
        return getattr(eu_info, "UnitId", 0) or 0


def ensure_unique_labels(points: Iterable[Point]) -> None:
    """
    Check that every label occurs once.

    Raises:
        ConfigurationError: If two points share a label
    """
    counts = Counter(point.label for point in points)
    duplicates = sorted(label for label, count in counts.items() if count > 1)
    if duplicates:
        raise ConfigurationError(f"Duplicate point labels: {', '.join(duplicates)}")


def select_points(points: list[Point], selected_identifiers: Iterable[str]) -> list[Point]:
    """
    Keep the points whose native identifier was selected.

    An empty selection keeps every point. Order follows discovery.
    """
    selected = {str(identifier) for identifier in selected_identifiers}
    if not selected:
        return list(points)

    chosen = [point for point in points if point.identifier in selected]
    missing = selected - {point.identifier for point in chosen}
    if missing:
        log_warn(f"Selected nodes not found during discovery: {', '.join(sorted(missing))}")
    return chosen


__all__ = ['NamespaceDiscovery', 'derive_label', 'ensure_unique_labels', 'select_points']
