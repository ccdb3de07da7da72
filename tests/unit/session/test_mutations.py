"""Tests for parsing the session mutation log."""

import pytest

from mongostore.db.errors import ValidationError
from mongostore.session.models import (
    Direct,
    Operations,
    SetOperation,
    UnsetOperation,
    parse_mutations,
)


class TestParseMutations:
    """Tests for parse_mutations."""

    def test_reserved_prefix_is_direct(self) -> None:
        result = parse_mutations({"_flash": ["saved"]})
        assert result == {"_flash": Direct(value=["saved"])}

    def test_direct_value_may_be_anything(self) -> None:
        result = parse_mutations({"_token": None, "_count": 3})
        assert result["_token"].value is None
        assert result["_count"].value == 3

    def test_operations_are_parsed_in_order(self) -> None:
        result = parse_mutations({
            "cart": {"__operations": [
                {"type": "set", "key": "items", "value": [1, 2]},
                {"type": "unset", "key": "coupon"},
            ]},
        })

        operations = result["cart"].operations
        assert operations == [
            SetOperation(key="items", value=[1, 2]),
            UnsetOperation(key="coupon"),
        ]

    def test_tagged_mutations_pass_through(self) -> None:
        mutation = Operations(operations=[UnsetOperation(key="a")])
        assert parse_mutations({"ns": mutation}) == {"ns": mutation}

    def test_unformatted_namespace_is_dropped(self) -> None:
        """Values that follow neither convention are ignored."""
        result = parse_mutations({"cart": {"items": [1]}, "user": "bob"})
        assert result == {}

    def test_empty_log(self) -> None:
        assert parse_mutations({}) == {}

    def test_unknown_operation_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_mutations({"cart": {"__operations": [{"type": "push", "key": "a"}]}})

    def test_operations_must_be_a_list(self) -> None:
        with pytest.raises(ValidationError):
            parse_mutations({"cart": {"__operations": "set a"}})

    def test_empty_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_mutations({"cart": {"__operations": [{"type": "unset", "key": ""}]}})

    def test_operator_key_rejected(self) -> None:
        """Keys may not smuggle update operators into the document."""
        with pytest.raises(ValidationError):
            parse_mutations({"cart": {"__operations": [{"type": "set", "key": "$where"}]}})

    @pytest.mark.parametrize("namespace", ["", "$set"])
    def test_invalid_namespace_rejected(self, namespace: str) -> None:
        with pytest.raises(ValidationError):
            parse_mutations({namespace: {"__operations": []}})
