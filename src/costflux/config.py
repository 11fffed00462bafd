import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

import structlog

from costflux.directory import (
    AccountDirectory,
    CategorizedDirectory,
    FlatDirectory,
    ProjectedDirectory,
)
from costflux.errors import ConfigError, ConfigErrorKind
from costflux.models import (
    DEFAULT_PRIMARY_LABEL,
    DEFAULT_SECONDARY_LABEL,
    AccountEntry,
    Category,
    GroupDefinitionLabel,
    Project,
    ProjectAccount,
)

logger = structlog.get_logger()

# top-level keys of the mutually exclusive account schemas
_DIRECTORY_KEYS = ("accounts", "categories", "projects")


@dataclass(frozen=True)
class Config:
    """
    Config is the operator configuration, normalized once at
    startup and read-only afterwards.
    """

    directory: "AccountDirectory" = field(default_factory=FlatDirectory)
    primary: "GroupDefinitionLabel" = DEFAULT_PRIMARY_LABEL
    secondary: "GroupDefinitionLabel" = DEFAULT_SECONDARY_LABEL
    # opaque Cost Explorer filter expression, empty means no filter
    filter: "Mapping[str, Any]" = field(default_factory=dict)
    global_tags: "Mapping[str, str]" = field(default_factory=dict)
    # every tag key seen across the configured accounts
    tag_universe: "tuple[str, ...]" = ()

    @property
    def has_accounts(self) -> "bool":
        return not self.directory.is_empty()


def _parse_error(message: "str", **details: "object") -> "ConfigError":
    return ConfigError(ConfigErrorKind.PARSE_FAILURE, message, details)


def _expect(value: "object", kind: "type", what: "str") -> "Any":
    if not isinstance(value, kind):
        raise _parse_error(
            f"{what} must be a {kind.__name__}", got=type(value).__name__
        )
    return value


def _parse_tags(raw: "object", what: "str") -> "dict[str, str]":
    if raw is None:
        return {}

    tags = _expect(raw, dict, what)
    for key, value in tags.items():
        if not isinstance(value, str):
            raise _parse_error(f"{what} values must be strings", key=key)

    return dict(tags)


def _string(
    item: "dict[str, Any]",
    key: "str",
    what: "str",
    default: "str | None" = None,
) -> "str":
    """
    returns item[key] as a string; a missing key falls back to
    default, or fails when there is none.
    """
    if key not in item:
        if default is None:
            raise _parse_error(f"{what} is missing '{key}'", entry=item)
        return default
    return _expect(item[key], str, f"{what} '{key}'")


def _parse_accounts(raw: "object") -> "FlatDirectory":
    accounts: "list[AccountEntry]" = []
    for item in _expect(raw, list, "accounts"):
        item = _expect(item, dict, "account entry")
        accounts.append(
            AccountEntry(
                name=_string(item, "name", "account entry", default=""),
                id=_string(item, "id", "account entry"),
                tags=_parse_tags(item.get("tags"), "account tags"),
            )
        )

    return FlatDirectory(tuple(accounts))


def _parse_categories(raw: "object") -> "CategorizedDirectory":
    categories: "list[Category]" = []
    for item in _expect(raw, list, "categories"):
        item = _expect(item, dict, "category entry")
        ids = _expect(item.get("accounts", []), list, "category accounts")
        categories.append(
            Category(
                name=_string(item, "name", "category entry", default=""),
                account_ids=tuple(_expect(i, str, "category account id") for i in ids),
            )
        )

    return CategorizedDirectory(tuple(categories))


def _parse_projects(raw: "object") -> "ProjectedDirectory":
    projects: "list[Project]" = []
    for item in _expect(raw, list, "projects"):
        item = _expect(item, dict, "project entry")
        accounts: "list[ProjectAccount]" = []
        for acc in _expect(item.get("accounts", []), list, "project accounts"):
            acc = _expect(acc, dict, "project account")
            accounts.append(
                ProjectAccount(
                    name=_string(acc, "name", "project account", default=""),
                    id=_string(acc, "id", "project account"),
                )
            )

        projects.append(
            Project(
                name=_string(item, "project_name", "project entry", default=""),
                accounts=tuple(accounts),
            )
        )

    return ProjectedDirectory(tuple(projects))


def _parse_group(raw: "object") -> "list[GroupDefinitionLabel]":
    labels: "list[GroupDefinitionLabel]" = []
    for item in _expect(raw, list, "group"):
        item = _expect(item, dict, "group entry")
        labels.append(
            GroupDefinitionLabel(
                group_id=_string(item, "group_id", "group entry"),
                label=_string(item, "label", "group entry"),
            )
        )

    return labels


def parse_config(document: "object") -> "Config":
    """
    builds a Config from an already decoded JSON document.
    Unknown top-level fields are ignored.
    """
    document = _expect(document, dict, "configuration document")

    present = [k for k in _DIRECTORY_KEYS if document.get(k)]
    if len(present) > 1:
        raise _parse_error(
            "account schemas are mutually exclusive", schemas=present
        )

    directory: "AccountDirectory" = FlatDirectory()
    if "accounts" in present:
        directory = _parse_accounts(document["accounts"])
    elif "categories" in present:
        directory = _parse_categories(document["categories"])
    elif "projects" in present:
        directory = _parse_projects(document["projects"])

    primary, secondary = DEFAULT_PRIMARY_LABEL, DEFAULT_SECONDARY_LABEL
    group = _parse_group(document.get("group") or [])
    # a single entry only overrides the secondary dimension
    if len(group) == 1:
        secondary = group[0]
    elif len(group) >= 2:
        primary, secondary = group[0], group[1]

    raw_filter = document.get("filter") or {}
    return Config(
        directory=directory,
        primary=primary,
        secondary=secondary,
        filter=MappingProxyType(dict(_expect(raw_filter, dict, "filter"))),
        global_tags=MappingProxyType(_parse_tags(document.get("tags"), "tags")),
        tag_universe=directory.tag_universe(),
    )


def load_config(path: "str") -> "Config":
    """
    reads and parses the JSON configuration file at path.
    """
    logger.debug("config_load", path=path)

    try:
        with open(path, encoding="utf-8") as f:
            raw = f.read()
    except OSError as e:
        raise ConfigError(
            ConfigErrorKind.IO_FAILURE,
            f"can't load config: {e}",
            {"path": path},
        ) from e
    except UnicodeDecodeError as e:
        raise ConfigError(
            ConfigErrorKind.PARSE_FAILURE,
            f"can't decode config: {e}",
            {"path": path},
        ) from e

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(
            ConfigErrorKind.PARSE_FAILURE,
            f"can't parse config: {e}",
            {"path": path},
        ) from e

    config = parse_config(document)
    logger.info(
        "config_loaded",
        path=path,
        directory=type(config.directory).__name__,
        tag_keys=len(config.tag_universe),
        primary=config.primary.group_id,
        secondary=config.secondary.group_id,
    )
    return config
