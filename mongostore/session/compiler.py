"""Compile a session mutation log into a partial-document update.

Operations are replayed in order into one accumulator that keeps the last
intent per dotted path, so a later ``unset`` retracts an earlier ``set`` of
the same key (and the reverse). Only then is the accumulator split into the
``$set`` and ``$unset`` halves, which are therefore always disjoint.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mongostore.session.models.mutations import Direct, SetOperation, parse_mutations

DATA_FIELD = "data"
UNSET_MARKER = 1


@dataclass
class CompiledUpdate:
    """Field-level changes of one write, keyed by dotted path."""

    to_set: dict[str, Any] = field(default_factory=dict)
    to_unset: dict[str, int] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.to_set and not self.to_unset

    def as_update_document(self) -> dict[str, dict[str, Any]]:
        """Render as a MongoDB update document, omitting empty operators."""
        update: dict[str, dict[str, Any]] = {}
        if self.to_set:
            update["$set"] = dict(self.to_set)
        if self.to_unset:
            update["$unset"] = dict(self.to_unset)
        return update


def compile_updates(session_data: Mapping[str, Any]) -> CompiledUpdate:
    """Compile a session's mutations into disjoint set/unset maps.

    Accepts either tagged mutations or the raw wire format understood by
    ``parse_mutations``.
    """
    mutations = parse_mutations(session_data)

    # path -> (is_set, value); re-inserting moves a path to the end
    intents: dict[str, tuple[bool, Any]] = {}

    for namespace, mutation in mutations.items():
        if isinstance(mutation, Direct):
            intents.pop(f"{DATA_FIELD}.{namespace}", None)
            intents[f"{DATA_FIELD}.{namespace}"] = (True, mutation.value)
            continue

        for operation in mutation.operations:
            path = f"{DATA_FIELD}.{namespace}.{operation.key}"
            intents.pop(path, None)
            if isinstance(operation, SetOperation):
                intents[path] = (True, operation.value)
            else:
                intents[path] = (False, UNSET_MARKER)

    update = CompiledUpdate()
    for path, (is_set, value) in intents.items():
        if is_set:
            update.to_set[path] = value
        else:
            update.to_unset[path] = value
    return update


def apply_update(document: dict[str, Any], update: CompiledUpdate) -> dict[str, Any]:
    """Apply a compiled update to a document in place, MongoDB style.

    ``$unset`` of a missing path is a no-op; ``$set`` creates intermediate
    mappings as needed.
    """
    for path, value in update.to_set.items():
        *parents, leaf = path.split(".")
        target = document
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[leaf] = value

    for path in update.to_unset:
        *parents, leaf = path.split(".")
        target = document
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                break
            target = child
        else:
            target.pop(leaf, None)

    return document
