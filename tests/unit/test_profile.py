"""Unit tests for mapping profiles and the ProfileBuilder DSL."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from graph_mapper.core.exceptions import ProfileConfigurationError, UnknownMemberError
from graph_mapper.mapping.profile import (
    ConditionalRule,
    MappingProfile,
    ProfileBuilder,
    ProfileModule,
    ProfileStore,
)


@dataclass
class User:
    id: int = 0
    name: str = ""
    email: str = ""


@dataclass
class UserDto:
    id: int = 0
    display_name: str = ""
    email: str = ""


class Badge:
    def __init__(self, label: str = "") -> None:
        self.label = label

    @property
    def code(self) -> str:
        return self.label.upper()


class TestProfileStore:
    def test_lookup_missing_pair(self) -> None:
        assert ProfileStore().lookup(User, UserDto) is None

    def test_create_or_get_returns_same_profile(self) -> None:
        store = ProfileStore()
        first = store.create_or_get(User, UserDto)
        assert store.create_or_get(User, UserDto) is first
        assert store.lookup(User, UserDto) is first
        assert len(store) == 1
        assert (User, UserDto) in store

    def test_pairs_are_ordered(self) -> None:
        store = ProfileStore()
        store.create_or_get(User, UserDto)
        assert store.lookup(UserDto, User) is None

    def test_clear(self) -> None:
        store = ProfileStore()
        store.create_map(User, UserDto)
        store.clear()
        assert len(store) == 0


class TestProfileBuilder:
    def test_chaining_returns_builder(self) -> None:
        builder = ProfileStore().create_map(User, UserDto)
        result = (
            builder.for_member("display_name", lambda s: s.name)
            .ignore("email")
            .when(lambda s: True, lambda s, d: None)
            .transform(lambda d: d)
        )
        assert result is builder
        assert isinstance(result, ProfileBuilder)

    def test_rules_are_recorded(self) -> None:
        store = ProfileStore()
        store.create_map(User, UserDto).for_member("display_name", lambda s: s.name).ignore(
            "email"
        )
        profile = store.lookup(User, UserDto)
        assert profile is not None
        assert [rule.member for rule in profile.member_rules] == ["display_name"]
        assert profile.ignored_members == frozenset({"email"})
        assert profile.excluded_members == frozenset({"display_name", "email"})

    def test_unknown_member_rule(self) -> None:
        builder = ProfileStore().create_map(User, UserDto)
        with pytest.raises(UnknownMemberError) as exc_info:
            builder.for_member("nickname", lambda s: s.name)
        assert exc_info.value.member == "nickname"
        assert isinstance(exc_info.value, ProfileConfigurationError)

    def test_unknown_ignored_member(self) -> None:
        with pytest.raises(UnknownMemberError):
            ProfileStore().create_map(User, UserDto).ignore("password")

    def test_read_only_member_rule(self) -> None:
        builder = ProfileStore().create_map(User, Badge)
        with pytest.raises(UnknownMemberError, match="read-only"):
            builder.for_member("code", lambda s: s.name)

    def test_otherwise_attaches_to_last_when(self) -> None:
        store = ProfileStore()
        on_false = lambda s, d: None  # noqa: E731
        store.create_map(User, UserDto).when(lambda s: s.id > 0, lambda s, d: None).otherwise(
            on_false
        )
        profile = store.lookup(User, UserDto)
        assert profile is not None
        assert profile.conditional_rules[-1].otherwise is on_false

    def test_otherwise_without_when(self) -> None:
        with pytest.raises(ProfileConfigurationError):
            ProfileStore().create_map(User, UserDto).otherwise(lambda s, d: None)

    def test_otherwise_twice(self) -> None:
        builder = ProfileStore().create_map(User, UserDto)
        builder.when(lambda s: True, lambda s, d: None, lambda s, d: None)
        with pytest.raises(ProfileConfigurationError):
            builder.otherwise(lambda s, d: None)


class TestConditionalRule:
    def test_true_branch(self) -> None:
        calls: list[str] = []
        rule = ConditionalRule(
            predicate=lambda s: s.id == 1,
            action=lambda s, d: calls.append("yes"),
            otherwise=lambda s, d: calls.append("no"),
        )
        rule.apply(User(id=1), UserDto())
        rule.apply(User(id=2), UserDto())
        assert calls == ["yes", "no"]

    def test_missing_false_branch_is_a_no_op(self) -> None:
        calls: list[str] = []
        rule = ConditionalRule(predicate=lambda s: False, action=lambda s, d: calls.append("x"))
        rule.apply(User(), UserDto())
        assert calls == []


class TestMappingProfile:
    def test_repr(self) -> None:
        profile = MappingProfile(User, UserDto)
        assert repr(profile).startswith("MappingProfile(User -> UserDto")


class TestProfileModule:
    def test_configure_registers_profiles(self) -> None:
        class UserProfiles(ProfileModule):
            def configure(self, profiles: ProfileStore) -> None:
                profiles.create_map(User, UserDto).ignore("email")

        store = ProfileStore()
        UserProfiles().configure(store)
        assert store.lookup(User, UserDto) is not None

    def test_module_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            ProfileModule()  # type: ignore[abstract]
