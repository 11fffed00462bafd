from dataclasses import dataclass
from typing import Mapping, Protocol

from costflux.models import AccountEntry, Category, Project

CATEGORY_TAG = "category"
PROJECT_TAG = "project"


@dataclass(frozen=True, slots=True)
class AccountMatch:
    name: "str"
    tags: "Mapping[str, str]"


class AccountDirectory(Protocol):
    """
    AccountDirectory is the common protocol of every supported
    account grouping schema. A lookup returns the first entry
    whose id equals the given (already normalized) id.
    """

    def is_empty(self) -> "bool": ...

    def tag_universe(self) -> "tuple[str, ...]": ...

    def lookup(self, account_id: "str") -> "AccountMatch | None": ...


@dataclass(frozen=True, slots=True)
class FlatDirectory:
    """
    FlatDirectory holds named accounts each carrying their own
    free-form tags.
    """

    accounts: "tuple[AccountEntry, ...]" = ()

    def is_empty(self) -> "bool":
        return not self.accounts

    def tag_universe(self) -> "tuple[str, ...]":
        """
        collects every distinct tag key across all accounts,
        in first-seen order.
        """
        keys: "dict[str, None]" = {}
        for account in self.accounts:
            for key in account.tags:
                keys.setdefault(key, None)

        return tuple(keys)

    def lookup(self, account_id: "str") -> "AccountMatch | None":
        for account in self.accounts:
            if account.id == account_id:
                return AccountMatch(name=account.name, tags=account.tags)

        return None


@dataclass(frozen=True, slots=True)
class CategorizedDirectory:
    categories: "tuple[Category, ...]" = ()

    def is_empty(self) -> "bool":
        return not any(c.account_ids for c in self.categories)

    def tag_universe(self) -> "tuple[str, ...]":
        return (CATEGORY_TAG,) if self.categories else ()

    def lookup(self, account_id: "str") -> "AccountMatch | None":
        # categories only know account ids, so the id doubles as the name
        for category in self.categories:
            if account_id in category.account_ids:
                return AccountMatch(
                    name=account_id, tags={CATEGORY_TAG: category.name}
                )

        return None


@dataclass(frozen=True, slots=True)
class ProjectedDirectory:
    projects: "tuple[Project, ...]" = ()

    def is_empty(self) -> "bool":
        return not any(p.accounts for p in self.projects)

    def tag_universe(self) -> "tuple[str, ...]":
        return (PROJECT_TAG,) if self.projects else ()

    def lookup(self, account_id: "str") -> "AccountMatch | None":
        for project in self.projects:
            for account in project.accounts:
                if account.id == account_id:
                    return AccountMatch(
                        name=account.name, tags={PROJECT_TAG: project.name}
                    )

        return None
