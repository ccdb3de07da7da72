"""Mutation log written by the session layer of the web framework.

Each namespace of a session either carries a value written whole
(``Direct``) or an ordered list of key-level operations (``Operations``).
On the wire the two are told apart by convention: namespaces whose name
starts with ``_`` are direct, the others wrap their operations in an
``__operations`` list:

    {
        "_flash": ["saved"],
        "cart": {"__operations": [
            {"type": "set", "key": "items", "value": [1, 2]},
            {"type": "unset", "key": "coupon"},
        ]},
    }
"""

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from mongostore.db.errors import ValidationError

RESERVED_PREFIX = "_"
OPERATIONS_KEY = "__operations"


class SetOperation(BaseModel):
    """Set one key of a namespace."""

    type: Literal["set"] = "set"
    key: str = Field(..., min_length=1)
    value: Any = None

    @field_validator("key")
    @classmethod
    def reject_operator_prefix(cls, value: str) -> str:
        if value.startswith("$"):
            raise ValueError("must not start with '$'")
        return value


class UnsetOperation(BaseModel):
    """Remove one key of a namespace."""

    type: Literal["unset"] = "unset"
    key: str = Field(..., min_length=1)

    @field_validator("key")
    @classmethod
    def reject_operator_prefix(cls, value: str) -> str:
        if value.startswith("$"):
            raise ValueError("must not start with '$'")
        return value


Operation = Annotated[SetOperation | UnsetOperation, Field(discriminator="type")]


class Direct(BaseModel):
    """Namespace value written as a whole."""

    kind: Literal["direct"] = "direct"
    value: Any = None


class Operations(BaseModel):
    """Ordered key-level operations on a namespace."""

    kind: Literal["operations"] = "operations"
    operations: list[Operation] = Field(default_factory=list)


Mutation = Annotated[Direct | Operations, Field(discriminator="kind")]

_operations_adapter: TypeAdapter[list[Operation]] = TypeAdapter(list[Operation])


def parse_mutations(raw: Mapping[str, Any]) -> dict[str, Direct | Operations]:
    """Turn a session's raw mutation log into tagged mutations.

    Values that already are ``Direct``/``Operations`` pass through. Names
    with the reserved prefix become ``Direct``; mappings carrying an
    ``__operations`` list become ``Operations``. Anything else does not
    follow the format and is dropped.

    Raises:
        ValidationError: If an operation list is malformed
    """
    mutations: dict[str, Direct | Operations] = {}

    for namespace, payload in raw.items():
        if not namespace or namespace.startswith("$"):
            raise ValidationError(f"Invalid session namespace: {namespace!r}")

        if isinstance(payload, (Direct, Operations)):
            mutations[namespace] = payload
        elif namespace.startswith(RESERVED_PREFIX):
            mutations[namespace] = Direct(value=payload)
        elif isinstance(payload, Mapping) and OPERATIONS_KEY in payload:
            try:
                operations = _operations_adapter.validate_python(payload[OPERATIONS_KEY])
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Malformed operations for namespace {namespace!r}: {e}", cause=e
                ) from e
            mutations[namespace] = Operations(operations=operations)

    return mutations
