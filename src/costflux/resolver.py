from costflux.config import Config
from costflux.lineprotocol import line_tag_keys, render_tags, unique_tags
from costflux.models import Found, NotFound, Resolution

DEFAULT_TAG_VALUE = "Unknown"


def normalize_account_id(key: "str") -> "str":
    """
    strips exactly one leading zero, billing APIs and operator
    configs disagree on zero padding of account ids.
    """
    if key.startswith("0"):
        return key[1:]
    return key


def complete_tags(
    tags: "dict[str, str]",
    universe: "tuple[str, ...]",
) -> "dict[str, str]":
    """
    returns a copy of tags holding every key of the tag universe,
    filling the missing ones with the default value.
    """
    completed = dict(tags)
    for key in universe:
        completed.setdefault(key, DEFAULT_TAG_VALUE)
    return completed


def resolve(config: "Config", secondary_key: "str") -> "Resolution":
    """
    looks up the account behind a record's secondary key and
    returns its display name with the completed tag string.
    """
    match = config.directory.lookup(normalize_account_id(secondary_key))
    if match is None:
        return NotFound()

    tags = complete_tags(dict(match.tags), config.tag_universe)
    # account_name and the group labels are already on the line
    tags = unique_tags(tags, line_tag_keys(config))
    return Found(
        display_name=match.name.replace(" ", "_"),
        tags=render_tags(tags),
        tag_keys=tuple(tags),
    )
