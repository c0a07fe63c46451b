"""Default code-declared element and link types.

``typegraph sync`` loads this module unless ``--definitions`` (or
``[sync] definitions`` in ``typegraph.toml``) names another one. Any
replacement module must expose the same two mappings.
"""

from __future__ import annotations

from datetime import UTC, datetime

from typegraph.domain import schema as s
from typegraph.domain.records import LinkTypeDefinition, TypeDefinition


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _named(type_id: str, parent_types: tuple[str, ...] = ()) -> TypeDefinition:
    return TypeDefinition(
        id=type_id,
        schema=s.object_({"name": s.string(), "description": s.string()}),
        parent_types=parent_types,
    )


def _statement(type_id: str, from_type: str, to_type: str, statement: str) -> LinkTypeDefinition:
    return LinkTypeDefinition(
        id=type_id,
        from_type=from_type,
        to_type=to_type,
        schema=s.object_({"statement": s.string().default(statement)}),
    )


def _ordered(type_id: str, from_type: str, to_type: str) -> LinkTypeDefinition:
    return LinkTypeDefinition(
        id=type_id,
        from_type=from_type,
        to_type=to_type,
        schema=s.object_({"order": s.number()}),
    )


ELEMENT_TYPES: dict[str, TypeDefinition] = {
    "todo": TypeDefinition(
        id="todo",
        schema=s.object_(
            {
                "title": s.string(),
                "completed": s.boolean().default(False),
                "priority": s.enum(["low", "medium", "high"]).default("medium"),
                # Serialized as the timestamp at sync time.
                "completionDate": s.string().default(_now_iso),
            }
        ),
    ),
    "object": _named("object"),
    "goal": TypeDefinition(
        id="goal",
        schema=s.object_(
            {
                "title": s.string(),
                "description": s.string(),
                "state": s.array(
                    s.object_(
                        {
                            "name": s.string(),
                            "description": s.string(),
                            "value": s.string(),
                            "unit": s.string(),
                        }
                    )
                ),
            }
        ),
    ),
    "actor": _named("actor"),
    "person": _named("person", parent_types=("actor", "object")),
    "taskList": _named("taskList"),
    "goalList": _named("goalList"),
    "objectList": _named("objectList"),
}

LINK_TYPES: dict[str, LinkTypeDefinition] = {
    "taskGoal": LinkTypeDefinition(
        id="taskGoal",
        from_type="task",
        to_type="goal",
        schema=s.object_({}),
    ),
    "subTask": _statement("subTask", "task", "task", "is a sub-task of"),
    "goalObject": LinkTypeDefinition(
        id="goalObject",
        from_type="goal",
        to_type="object",
        schema=s.object_(
            {
                "stateChange": s.object_(
                    {"state": s.string(), "value": s.string(), "unit": s.string()}
                )
            }
        ),
    ),
    "objectComponent": _statement("objectComponent", "object", "object", "is a component of"),
    "taskActor": _statement("taskActor", "actor", "task", "is responsible for"),
    "taskToList": _ordered("taskToList", "task", "taskList"),
    "goalToList": _ordered("goalToList", "goal", "goalList"),
    "objectToList": _ordered("objectToList", "object", "objectList"),
}
