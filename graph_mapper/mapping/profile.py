"""Mapping profiles.

A profile holds the custom rules for one ordered (source type, destination
type) pair. Profiles are declared through the fluent ProfileBuilder
returned by ``Mapper.create_map`` and looked up by the traversal engine
every time it fills a destination of that pair.

Example::

    mapper.create_map(UserRow, UserDto) \\
        .for_member("full_name", lambda s: f"{s.first} {s.last}") \\
        .ignore("password_hash") \\
        .when(lambda s: s.is_admin, lambda s, d: setattr(d, "role", "admin"))
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from graph_mapper.core.exceptions import ProfileConfigurationError, UnknownMemberError
from graph_mapper.mapping.shapes import CompositeShape, describe

MemberFunc = Callable[[Any], Any]
Action = Callable[[Any, Any], None]
Predicate = Callable[[Any], bool]
Transform = Callable[[Any], Any]


@dataclasses.dataclass(frozen=True)
class MemberRule:
    """Sets ``member`` on the destination to ``compute(source)``."""

    member: str
    compute: MemberFunc


@dataclasses.dataclass(frozen=True)
class ConditionalRule:
    predicate: Predicate
    action: Action
    otherwise: Action | None = None

    def apply(self, source: Any, destination: Any) -> None:
        if self.predicate(source):
            self.action(source, destination)
        elif self.otherwise is not None:
            self.otherwise(source, destination)


class MappingProfile:
    """Rules for one (source type, destination type) pair.

    Rules run in a fixed order: member rules, then conditional rules, then
    default member copying (skipping ruled and ignored members), then
    post-transforms.
    """

    def __init__(self, source_type: Any, destination_type: Any) -> None:
        self.source_type = source_type
        self.destination_type = destination_type
        self._member_rules: list[MemberRule] = []
        self._conditional_rules: list[ConditionalRule] = []
        self._ignored: set[str] = set()
        self._transforms: list[Transform] = []

    def __repr__(self) -> str:
        return (
            f"MappingProfile({_type_name(self.source_type)} -> "
            f"{_type_name(self.destination_type)}, "
            f"members={len(self._member_rules)}, "
            f"conditions={len(self._conditional_rules)}, "
            f"transforms={len(self._transforms)})"
        )

    @property
    def member_rules(self) -> tuple[MemberRule, ...]:
        return tuple(self._member_rules)

    @property
    def conditional_rules(self) -> tuple[ConditionalRule, ...]:
        return tuple(self._conditional_rules)

    @property
    def transforms(self) -> tuple[Transform, ...]:
        return tuple(self._transforms)

    @property
    def ignored_members(self) -> frozenset[str]:
        return frozenset(self._ignored)

    @property
    def excluded_members(self) -> frozenset[str]:
        """Members default copying must not touch."""
        return frozenset(self._ignored | {rule.member for rule in self._member_rules})

    def add_member_rule(self, rule: MemberRule) -> None:
        self._member_rules.append(rule)

    def add_conditional_rule(self, rule: ConditionalRule) -> None:
        self._conditional_rules.append(rule)

    def replace_last_conditional_rule(self, rule: ConditionalRule) -> None:
        self._conditional_rules[-1] = rule

    def ignore(self, member: str) -> None:
        self._ignored.add(member)

    def add_transform(self, transform: Transform) -> None:
        self._transforms.append(transform)


def _type_name(hint: Any) -> str:
    return getattr(hint, "__name__", repr(hint))


class ProfileBuilder:
    """Fluent builder for one mapping profile.

    Every call records into the profile immediately and returns the builder
    so calls can be chained. Member names are checked against the
    destination shape when it is a composite.
    """

    def __init__(self, profile: MappingProfile) -> None:
        self._profile = profile
        shape = describe(profile.destination_type)
        self._shape = shape if isinstance(shape, CompositeShape) else None

    @property
    def profile(self) -> MappingProfile:
        return self._profile

    def for_member(self, member: str, compute: MemberFunc) -> ProfileBuilder:
        """Set ``member`` from ``compute(source)``; overrides default copying."""
        self._check_member(member, writing=True)
        self._profile.add_member_rule(MemberRule(member=member, compute=compute))
        return self

    def when(
        self,
        predicate: Predicate,
        action: Action,
        otherwise: Action | None = None,
    ) -> ProfileBuilder:
        """Run ``action(source, destination)`` when ``predicate(source)`` holds."""
        self._profile.add_conditional_rule(
            ConditionalRule(predicate=predicate, action=action, otherwise=otherwise)
        )
        return self

    def otherwise(self, action: Action) -> ProfileBuilder:
        """Attach an else-branch to the most recent ``when``."""
        rules = self._profile.conditional_rules
        if not rules:
            raise ProfileConfigurationError("otherwise() must follow when()")
        if rules[-1].otherwise is not None:
            raise ProfileConfigurationError("the last when() already has an otherwise branch")
        completed = dataclasses.replace(rules[-1], otherwise=action)
        self._profile.replace_last_conditional_rule(completed)
        return self

    def ignore(self, *members: str) -> ProfileBuilder:
        """Exclude members from default copying."""
        for member in members:
            self._check_member(member, writing=False)
            self._profile.ignore(member)
        return self

    def transform(self, transform: Transform) -> ProfileBuilder:
        """Replace the finished destination with ``transform(destination)``."""
        self._profile.add_transform(transform)
        return self

    def _check_member(self, member: str, *, writing: bool) -> None:
        if self._shape is None:
            return
        descriptor = self._shape.member(member)
        destination = _type_name(self._profile.destination_type)
        if descriptor is None:
            raise UnknownMemberError(destination, member)
        if writing and not descriptor.writable:
            raise UnknownMemberError(destination, member, "member is read-only")


class ProfileStore:
    """Registry of profiles keyed by (source type, destination type)."""

    def __init__(self) -> None:
        self._profiles: dict[tuple[Any, Any], MappingProfile] = {}

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, pair: object) -> bool:
        return pair in self._profiles

    def create_or_get(self, source_type: Any, destination_type: Any) -> MappingProfile:
        """Return the profile for the pair, creating an empty one if needed."""
        key = (source_type, destination_type)
        profile = self._profiles.get(key)
        if profile is None:
            profile = MappingProfile(source_type, destination_type)
            self._profiles[key] = profile
        return profile

    def create_map(self, source_type: Any, destination_type: Any) -> ProfileBuilder:
        return ProfileBuilder(self.create_or_get(source_type, destination_type))

    def lookup(self, source_type: Any, destination_type: Any) -> MappingProfile | None:
        return self._profiles.get((source_type, destination_type))

    def clear(self) -> None:
        self._profiles.clear()


class ProfileModule(ABC):
    """A reusable group of profile declarations.

    Subclass and register with ``Mapper.add_profile``::

        class BillingProfiles(ProfileModule):
            def configure(self, profiles: ProfileStore) -> None:
                profiles.create_map(Invoice, InvoiceDto).ignore("internal_notes")
    """

    @abstractmethod
    def configure(self, profiles: ProfileStore) -> None:
        """Declare profiles on ``profiles``."""
