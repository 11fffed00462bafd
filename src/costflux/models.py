from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

DEFAULT_PRIMARY_GROUP_ID = "SERVICE"
DEFAULT_SECONDARY_GROUP_ID = "LINKED_ACCOUNT"


def _frozen_mapping(values: "Mapping[str, str] | None") -> "Mapping[str, str]":
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True, slots=True)
class GroupDefinitionLabel:
    """
    GroupDefinitionLabel pairs a billing API grouping
    dimension with the tag key it is emitted under.
    """

    group_id: "str"
    label: "str"


DEFAULT_PRIMARY_LABEL = GroupDefinitionLabel(DEFAULT_PRIMARY_GROUP_ID, "service_name")
DEFAULT_SECONDARY_LABEL = GroupDefinitionLabel(
    DEFAULT_SECONDARY_GROUP_ID, "account_id"
)


@dataclass(frozen=True, slots=True)
class AccountEntry:
    name: "str"
    id: "str"
    tags: "Mapping[str, str]" = field(default_factory=dict)

    def __post_init__(self) -> "None":
        object.__setattr__(self, "tags", _frozen_mapping(self.tags))


@dataclass(frozen=True, slots=True)
class Category:
    """
    Category groups plain account ids under a named bucket.
    """

    name: "str"
    account_ids: "tuple[str, ...]" = ()


@dataclass(frozen=True, slots=True)
class ProjectAccount:
    name: "str"
    id: "str"


@dataclass(frozen=True, slots=True)
class Project:
    """
    Project groups named accounts under a project name.
    """

    name: "str"
    accounts: "tuple[ProjectAccount, ...]" = ()


@dataclass(frozen=True, slots=True)
class CostRecord:
    """
    CostRecord represents a single grouped cost
    entry returned by the billing API.
    """

    # first group key, usually the service name
    primary_key: "str"
    # second group key, usually the linked account id
    secondary_key: "str"
    # decimal string exactly as returned by the API
    amount: "str"
    # nanoseconds since epoch of the billed day
    timestamp_nanos: "str"


@dataclass(frozen=True, slots=True)
class NotFound:
    pass


@dataclass(frozen=True, slots=True)
class Found:
    display_name: "str"
    # rendered ",key=value" tag string
    tags: "str"
    # keys present in the rendered tag string
    tag_keys: "tuple[str, ...]" = ()


Resolution = Found | NotFound
