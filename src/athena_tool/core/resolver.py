"""Named query lookup within a work group."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from athena_tool.core.exceptions import NotFoundError

if TYPE_CHECKING:
    from athena_tool.core.service import AsyncQueryService, NamedQueryDefinition


class NamedQueryResolver:
    def __init__(self, service: AsyncQueryService) -> None:
        self.service = service

    def list_work_group(
        self, work_group: str
    ) -> tuple[list[str], list[NamedQueryDefinition]]:
        """Listed ids and the definitions fetched for them, in listing order.

        The ids are the authoritative listing; a throttled batch lookup may
        return fewer definitions than ids.
        """
        log = structlog.get_logger()
        query_ids = self.service.list_named_queries(work_group)
        if not query_ids:
            log.debug("work group has no named queries", work_group=work_group)
            return [], []
        definitions = self.service.batch_get_named_queries(query_ids)
        log.debug(
            "named queries listed",
            work_group=work_group,
            listed=len(query_ids),
            count=len(definitions),
        )
        return query_ids, definitions

    def list_definitions(self, work_group: str) -> list[NamedQueryDefinition]:
        return self.list_work_group(work_group)[1]

    @staticmethod
    def find(
        definitions: list[NamedQueryDefinition], name: str, work_group: str
    ) -> NamedQueryDefinition:
        """Pick the definition matching (name, work_group).

        Several definitions may share a name; the lowest id wins so the
        choice does not depend on listing order.
        """
        matches = [
            d for d in definitions if d.name == name and d.work_group == work_group
        ]
        if not matches:
            msg = f"Named query '{name}' not found in work group '{work_group}'"
            raise NotFoundError(msg)
        if len(matches) > 1:
            structlog.get_logger().warning(
                "duplicate named query name",
                name=name,
                work_group=work_group,
                count=len(matches),
            )
        return min(matches, key=lambda d: d.id)

