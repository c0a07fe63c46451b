"""QueryService — read-only lookups and traversal over the graph.

Reads go exclusively through :class:`ElementService` and
:class:`LinkService`, so every returned record has been loose-validated.
Connections are undirected for traversal purposes: both outgoing and
incoming links are followed.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Any

from typegraph.services._helpers import paginate
from typegraph.services.result import ServiceResult

if TYPE_CHECKING:
    from typegraph.domain.records import Link
    from typegraph.services.elements import ElementService
    from typegraph.services.links import LinkService

logger = logging.getLogger(__name__)


class QueryService:
    """Lookup and BFS traversal built on the element and link services."""

    def __init__(self, elements: ElementService, links: LinkService) -> None:
        self._elements = elements
        self._links = links

    # ------------------------------------------------------------------
    # By type
    # ------------------------------------------------------------------

    def find_by_type(self, type_id: str) -> ServiceResult:
        found = self._elements.find_elements_by_type(type_id)
        return found.model_copy(update={"op": "find_by_type"})

    def find_by_type_paginated(
        self, type_id: str, limit: int = 10, offset: int = 0
    ) -> ServiceResult:
        """One page of elements plus the total count for the type.

        The full set is loaded and sliced in memory.
        """
        found = self._elements.find_elements_by_type(type_id)
        items: list[dict[str, Any]] = found.data["items"]
        return ServiceResult(
            ok=True,
            op="find_by_type_paginated",
            data={
                "type_id": type_id,
                "items": paginate(items, limit, offset),
                "total": len(items),
            },
            warnings=list(found.warnings),
            meta={"limit": limit, "offset": offset},
        )

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def get_links_from(self, element_id: str, link_type_id: str | None = None) -> ServiceResult:
        found = self._links.find_links_from(element_id, link_type_id)
        return found.model_copy(update={"op": "get_links_from"})

    def get_links_to(self, element_id: str, link_type_id: str | None = None) -> ServiceResult:
        found = self._links.find_links_to(element_id, link_type_id)
        return found.model_copy(update={"op": "get_links_to"})

    def get_all_links(self, element_id: str, link_type_id: str | None = None) -> ServiceResult:
        """Outgoing links followed by incoming links."""
        warnings: list[str] = []
        items = [link.to_dict() for link in self._touching(element_id, link_type_id, warnings)]
        return ServiceResult(
            ok=True,
            op="get_all_links",
            data={"element_id": element_id, "count": len(items), "items": items},
            warnings=warnings,
        )

    def _touching(
        self, element_id: str, link_type_id: str | None, warnings: list[str]
    ) -> list[Link]:
        outgoing = self._links.load_links(
            element_id, outgoing=True, link_type_id=link_type_id, warnings=warnings
        )
        incoming = self._links.load_links(
            element_id, outgoing=False, link_type_id=link_type_id, warnings=warnings
        )
        return outgoing + incoming

    # ------------------------------------------------------------------
    # Neighbours and traversal
    # ------------------------------------------------------------------

    def _neighbours(
        self, element_id: str, link_type_id: str | None, warnings: list[str]
    ) -> list[dict[str, Any]]:
        connected: list[dict[str, Any]] = []
        for link in self._touching(element_id, link_type_id, warnings):
            if link.from_id == element_id:
                other_id, direction = link.to_id, "to"
            else:
                other_id, direction = link.from_id, "from"
            other = self._elements.load_element(other_id, warnings=warnings)
            if other is None:
                continue
            connected.append(
                {"element": other.to_dict(), "link": link.to_dict(), "direction": direction}
            )
        return connected

    def get_connected_elements(
        self, element_id: str, link_type_id: str | None = None
    ) -> ServiceResult:
        """Elements one hop away, with the connecting link.

        ``direction`` is ``"to"`` when *element_id* is the link's source
        and ``"from"`` when it is the target.
        """
        warnings: list[str] = []
        items = self._neighbours(element_id, link_type_id, warnings)
        return ServiceResult(
            ok=True,
            op="get_connected_elements",
            data={"element_id": element_id, "count": len(items), "items": items},
            warnings=warnings,
        )

    def traverse(
        self,
        start_id: str,
        link_type_id: str | None = None,
        max_depth: int = 3,
    ) -> ServiceResult:
        """Breadth-first walk from *start_id* up to *max_depth* hops.

        Each element appears once, at the depth it was first reached,
        with the id path that reached it. Cycles terminate via the
        visited set.
        """
        warnings: list[str] = []
        visited: set[str] = set()
        queue: deque[tuple[str, int, list[str]]] = deque([(start_id, 0, [start_id])])
        items: list[dict[str, Any]] = []

        while queue:
            element_id, depth, path = queue.popleft()
            if element_id in visited or depth > max_depth:
                continue
            visited.add(element_id)

            found = self._elements.load_element(element_id, warnings=warnings)
            if found is None:
                continue
            items.append({"element": found.to_dict(), "depth": depth, "path": path})

            if depth < max_depth:
                for neighbour in self._neighbours(element_id, link_type_id, warnings):
                    next_id = neighbour["element"]["id"]
                    if next_id not in visited:
                        queue.append((next_id, depth + 1, [*path, next_id]))

        logger.debug("Traversal from %s reached %d elements", start_id, len(items))
        return ServiceResult(
            ok=True,
            op="traverse",
            data={
                "start_id": start_id,
                "max_depth": max_depth,
                "count": len(items),
                "items": items,
            },
            warnings=warnings,
        )
