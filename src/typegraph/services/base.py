"""BaseService — abstract foundation for all typegraph services.

Every service receives a :class:`GraphDatabase` at construction time.
Services own their transaction boundaries via ``self._db.transaction()``
and run each operation's read -> validate -> write inside one of them.
Services that resolve types additionally receive the
:class:`~typegraph.services.registry.TypeRegistry` handle.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typegraph.infrastructure.repository import GraphDatabase

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class ElementService(BaseService):
            def create_element(self, type_id: str, data: dict) -> ServiceResult:
                with self._db.transaction() as txn:
                    ...
    """

    def __init__(self, db: GraphDatabase) -> None:
        self._db = db
