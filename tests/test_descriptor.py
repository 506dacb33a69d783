"""Tests for miniblob.auth.descriptor and miniblob.auth.identity."""

from datetime import datetime, timezone

import pytest

from miniblob.auth import (
    AccessDescriptor,
    AccessLevel,
    CallerIdentity,
    derive_descriptor,
    has_access_control_keys,
    is_admin,
    parse_list,
)
from miniblob.exceptions import DescriptorCorruptError

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestCallerIdentity:
    """Tests for CallerIdentity."""

    def test_roles_are_stored_as_tuple(self):
        caller = CallerIdentity(name="alice", roles=["HR", "Manager"])

        assert caller.roles == ("HR", "Manager")
        hash(caller)

    def test_role_membership_is_case_insensitive(self):
        caller = CallerIdentity(name="alice", roles=("Manager",))

        assert caller.has_role("manager")
        assert caller.has_any_role(["HR", "MANAGER"])
        assert not caller.has_role("HR")

    def test_name_comparison_is_case_insensitive(self):
        caller = CallerIdentity(name="Alice")

        assert caller.is_named("alice")
        assert not caller.is_named("bob")

    def test_is_admin(self):
        """The admin role is the only override."""
        assert is_admin(CallerIdentity(name="root", roles=("Admin",)))
        assert CallerIdentity(name="root", roles=("admin",)).is_admin
        assert not is_admin(CallerIdentity(name="admin"))


class TestParseList:
    def test_trims_and_drops_empty_items(self):
        assert parse_list(" HR , ,Manager,") == ["HR", "Manager"]

    def test_empty_values(self):
        assert parse_list(None) == []
        assert parse_list("") == []

    def test_collapses_case_insensitive_duplicates(self):
        assert parse_list("HR,hr,Hr,IT") == ["HR", "IT"]


class TestAccessLevel:
    def test_parse(self):
        assert AccessLevel.parse("public") is AccessLevel.PUBLIC
        assert AccessLevel.parse(" PUBLIC ") is AccessLevel.PUBLIC
        assert AccessLevel.parse("private") is AccessLevel.PRIVATE
        assert AccessLevel.parse("anything-else") is AccessLevel.PRIVATE
        assert AccessLevel.parse(None) is AccessLevel.PRIVATE


class TestAccessDescriptorSerialization:
    """Tests for the persisted JSON form."""

    def test_to_dict_uses_persisted_field_names(self):
        descriptor = AccessDescriptor(
            owner="alice",
            users_allowed=["alice", "bob"],
            roles_allowed=["HR"],
            access=AccessLevel.PUBLIC,
            created_by="alice",
            created_utc=FIXED_NOW,
        )

        data = descriptor.to_dict()

        assert data == {
            "Owner": "alice",
            "RolesAllowed": ["HR"],
            "UsersAllowed": ["alice", "bob"],
            "CreatedUtc": FIXED_NOW.isoformat(),
            "CreatedBy": "alice",
            "Access": "public",
        }

    def test_from_dict_restores_descriptor(self):
        original = AccessDescriptor(
            owner="alice",
            users_allowed=["alice"],
            roles_allowed=["admin"],
            created_by="alice",
            created_utc=FIXED_NOW,
        )

        restored = AccessDescriptor.from_dict(original.to_dict())

        assert restored == original

    def test_from_dict_defaults(self):
        """Missing optional fields fall back to private with empty lists."""
        descriptor = AccessDescriptor.from_dict({"Owner": "alice"})

        assert descriptor.users_allowed == []
        assert descriptor.roles_allowed == []
        assert descriptor.access is AccessLevel.PRIVATE
        assert descriptor.created_utc is None

    def test_from_dict_accepts_zulu_timestamps(self):
        descriptor = AccessDescriptor.from_dict(
            {"Owner": "alice", "CreatedUtc": "2024-01-01T12:00:00Z"}
        )

        assert descriptor.created_utc == FIXED_NOW

    @pytest.mark.parametrize(
        "data",
        [
            ["not", "an", "object"],
            {},
            {"Owner": ""},
            {"Owner": "alice", "UsersAllowed": "bob"},
            {"Owner": "alice", "RolesAllowed": [1, 2]},
            {"Owner": "alice", "Access": 7},
            {"Owner": "alice", "CreatedUtc": "yesterday"},
        ],
    )
    def test_from_dict_rejects_malformed_data(self, data):
        with pytest.raises(DescriptorCorruptError):
            AccessDescriptor.from_dict(data)


class TestAccessControlKeys:
    @pytest.mark.parametrize("key", ["access", "Roles", "USERS", "public"])
    def test_access_control_keys_detected(self, key):
        assert has_access_control_keys({key: "x"})

    def test_plain_metadata_is_not_access_control(self):
        assert not has_access_control_keys({"department": "HR", "owner": "alice"})


class TestDeriveDescriptor:
    """Tests for derive_descriptor."""

    def test_roles_and_users_from_metadata(self):
        descriptor = derive_descriptor(
            "alice", {"roles": "HR,Manager", "users": "bob"}, now=FIXED_NOW
        )

        assert descriptor.owner == "alice"
        assert descriptor.created_by == "alice"
        assert descriptor.created_utc == FIXED_NOW
        assert descriptor.roles_allowed == ["HR", "Manager"]
        assert descriptor.users_allowed == ["bob", "alice"]
        assert descriptor.access is AccessLevel.PRIVATE

    def test_caller_always_listed_without_duplicates(self):
        descriptor = derive_descriptor("alice", {"users": "ALICE,bob"})

        assert descriptor.users_allowed == ["ALICE", "bob"]

    def test_derivation_is_idempotent_for_users(self):
        metadata = {"users": "bob,alice"}

        first = derive_descriptor("alice", metadata)
        second = derive_descriptor("alice", metadata)

        assert first.users_allowed == second.users_allowed == ["bob", "alice"]

    def test_empty_roles_default_to_admin(self):
        descriptor = derive_descriptor("alice", {"users": "bob"})

        assert descriptor.roles_allowed == ["admin"]

    def test_access_public(self):
        descriptor = derive_descriptor("alice", {"Access": "Public"})

        assert descriptor.is_public

    def test_public_flag(self):
        assert derive_descriptor("alice", {"public": "true"}).is_public
        assert not derive_descriptor("alice", {"public": "false"}).is_public

    def test_public_keeps_explicit_lists(self):
        """Public access is additive to the explicit lists."""
        descriptor = derive_descriptor("alice", {"access": "public", "roles": "HR"})

        assert descriptor.is_public
        assert descriptor.roles_allowed == ["HR"]
        assert descriptor.users_allowed == ["alice"]

    def test_keys_match_case_insensitively(self):
        descriptor = derive_descriptor("alice", {"ROLES": "HR", "Users": "bob"})

        assert descriptor.roles_allowed == ["HR"]
        assert "bob" in descriptor.users_allowed
