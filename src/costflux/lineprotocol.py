import re
from typing import Iterable, Mapping

from costflux.config import Config
from costflux.models import DEFAULT_SECONDARY_GROUP_ID, CostRecord, Found, Resolution

MEASUREMENT = "aws_cost"
ACCOUNT_NAME_TAG = "account_name"

_WHITESPACE = re.compile(r"\s")


def _clean(value: "str") -> "str":
    return _WHITESPACE.sub("_", value)


def render_tags(tags: "Mapping[str, str]") -> "str":
    """
    renders tags as ",key=value" pairs in the mapping's
    insertion order.
    """
    return "".join(f",{_clean(k)}={_clean(v)}" for k, v in tags.items())


def line_tag_keys(config: "Config") -> "set[str]":
    """
    returns the tag keys a line reserves before any account or
    global tags are appended. account_name stays reserved on
    unmatched lines too, so they never look enriched.
    """
    return {config.secondary.label, config.primary.label, ACCOUNT_NAME_TAG}


def unique_tags(
    tags: "Mapping[str, str]",
    taken: "Iterable[str]" = (),
) -> "dict[str, str]":
    """
    returns tags keyed by their rendered key, skipping every key
    already taken (or seen earlier in tags) so a line never
    carries the same tag key twice.
    """
    taken = set(taken)
    kept: "dict[str, str]" = {}
    for key, value in tags.items():
        key = _clean(key)
        if key in taken:
            continue
        taken.add(key)
        kept[key] = value
    return kept


def enrichment_enabled(config: "Config") -> "bool":
    """
    account enrichment only applies when accounts are configured
    and the secondary dimension is the linked account.
    """
    return (
        config.has_accounts
        and config.secondary.group_id == DEFAULT_SECONDARY_GROUP_ID
    )


def serialize(
    record: "CostRecord",
    resolution: "Resolution",
    config: "Config",
    exact: "bool" = False,
) -> "str | None":
    """
    renders a single line for the record, or None when exact
    mode suppresses an unmatched account. Global tags only fill
    keys the line does not carry yet.
    """
    head = f"{MEASUREMENT},{config.secondary.label}={record.secondary_key}"
    group_tag = f",{config.primary.label}={record.primary_key}"
    fields = f" cost={record.amount} {record.timestamp_nanos}"

    if enrichment_enabled(config) and isinstance(resolution, Found):
        taken = line_tag_keys(config) | set(resolution.tag_keys)
        global_tags = unique_tags(config.global_tags, taken)
        return (
            f"{head},{ACCOUNT_NAME_TAG}={resolution.display_name}{group_tag}"
            f"{resolution.tags}{render_tags(global_tags)}{fields}"
        )

    if enrichment_enabled(config) and exact:
        return None

    global_tags = unique_tags(config.global_tags, line_tag_keys(config))
    return f"{head}{group_tag}{render_tags(global_tags)}{fields}"
