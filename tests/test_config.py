import pytest

from costflux.config import Config, load_config, parse_config
from costflux.directory import CategorizedDirectory, FlatDirectory, ProjectedDirectory
from costflux.errors import ConfigError, ConfigErrorKind
from costflux.models import (
    DEFAULT_PRIMARY_LABEL,
    DEFAULT_SECONDARY_LABEL,
    GroupDefinitionLabel,
)


class TestConfigDefaults:
    def test_empty_document(self) -> "None":
        config = parse_config({})
        assert config.primary == DEFAULT_PRIMARY_LABEL
        assert config.secondary == DEFAULT_SECONDARY_LABEL
        assert dict(config.filter) == {}
        assert dict(config.global_tags) == {}
        assert config.tag_universe == ()
        assert config.has_accounts is False

    def test_bare_config_matches_empty_document(self) -> "None":
        config = Config()
        assert config.primary.label == "service_name"
        assert config.secondary.label == "account_id"
        assert config.has_accounts is False

    def test_unknown_fields_are_ignored(self) -> "None":
        config = parse_config({"something_else": [1, 2, 3], "accounts": []})
        assert config.has_accounts is False


class TestTagUniverse:
    def test_collects_keys_in_first_seen_order(self) -> "None":
        config = parse_config(
            {
                "accounts": [
                    {"name": "a", "id": "1", "tags": {"env": "prod", "team": "x"}},
                    {"name": "b", "id": "2", "tags": {"owner": "y", "env": "dev"}},
                    {"name": "c", "id": "3"},
                ]
            }
        )
        assert config.tag_universe == ("env", "team", "owner")

    def test_categories_use_category_key(self) -> "None":
        config = parse_config({"categories": [{"name": "infra", "accounts": ["1"]}]})
        assert isinstance(config.directory, CategorizedDirectory)
        assert config.tag_universe == ("category",)


class TestGroupLabels:
    def test_single_entry_replaces_secondary_only(self) -> "None":
        config = parse_config({"group": [{"group_id": "REGION", "label": "region"}]})
        assert config.primary == DEFAULT_PRIMARY_LABEL
        assert config.secondary == GroupDefinitionLabel("REGION", "region")

    def test_two_entries_replace_both_in_order(self) -> "None":
        config = parse_config(
            {
                "group": [
                    {"group_id": "USAGE_TYPE", "label": "usage_type"},
                    {"group_id": "LINKED_ACCOUNT", "label": "account"},
                    {"group_id": "REGION", "label": "region"},
                ]
            }
        )
        assert config.primary == GroupDefinitionLabel("USAGE_TYPE", "usage_type")
        assert config.secondary == GroupDefinitionLabel("LINKED_ACCOUNT", "account")

    def test_missing_label_is_parse_failure(self) -> "None":
        with pytest.raises(ConfigError) as excinfo:
            parse_config({"group": [{"group_id": "REGION"}]})
        assert excinfo.value.kind is ConfigErrorKind.PARSE_FAILURE


class TestFilterAndGlobalTags:
    def test_filter_replaces_default(self) -> "None":
        expression = {"Dimensions": {"Key": "RECORD_TYPE", "Values": ["Usage"]}}
        config = parse_config({"filter": expression})
        assert dict(config.filter) == expression

    def test_global_tags(self) -> "None":
        config = parse_config({"tags": {"source": "ce", "company": "acme"}})
        assert dict(config.global_tags) == {"source": "ce", "company": "acme"}

    def test_non_string_tag_value_is_parse_failure(self) -> "None":
        with pytest.raises(ConfigError) as excinfo:
            parse_config({"tags": {"source": 1}})
        assert excinfo.value.kind is ConfigErrorKind.PARSE_FAILURE


class TestDirectorySchemas:
    def test_accounts_build_flat_directory(self) -> "None":
        config = parse_config({"accounts": [{"name": "a", "id": "1"}]})
        assert isinstance(config.directory, FlatDirectory)
        assert config.has_accounts is True

    def test_projects_build_projected_directory(self) -> "None":
        config = parse_config(
            {
                "projects": [
                    {
                        "project_name": "atlas",
                        "accounts": [{"name": "atlas prod", "id": "42"}],
                    }
                ]
            }
        )
        assert isinstance(config.directory, ProjectedDirectory)
        assert config.tag_universe == ("project",)

    def test_schemas_are_mutually_exclusive(self) -> "None":
        with pytest.raises(ConfigError) as excinfo:
            parse_config(
                {
                    "accounts": [{"name": "a", "id": "1"}],
                    "categories": [{"name": "infra", "accounts": ["1"]}],
                }
            )
        assert excinfo.value.kind is ConfigErrorKind.PARSE_FAILURE

    def test_account_without_id_is_parse_failure(self) -> "None":
        with pytest.raises(ConfigError):
            parse_config({"accounts": [{"name": "a"}]})

    def test_accounts_must_be_a_list(self) -> "None":
        with pytest.raises(ConfigError):
            parse_config({"accounts": {"name": "a", "id": "1"}})


class TestLoadConfig:
    def test_loads_file(self, write_config: "object") -> "None":
        path = write_config(
            {"accounts": [{"name": "Team A", "id": "111", "tags": {"env": "prod"}}]}
        )
        config = load_config(path)
        assert config.tag_universe == ("env",)
        assert config.directory.lookup("111").name == "Team A"

    def test_missing_file_is_io_failure(self, tmp_path: "object") -> "None":
        with pytest.raises(ConfigError) as excinfo:
            load_config(str(tmp_path / "missing.json"))
        assert excinfo.value.kind is ConfigErrorKind.IO_FAILURE

    def test_malformed_json_is_parse_failure(self, tmp_path: "object") -> "None":
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError) as excinfo:
            load_config(str(path))
        assert excinfo.value.kind is ConfigErrorKind.PARSE_FAILURE

    def test_non_object_document_is_parse_failure(
        self, write_config: "object"
    ) -> "None":
        with pytest.raises(ConfigError) as excinfo:
            load_config(write_config([1, 2]))
        assert excinfo.value.kind is ConfigErrorKind.PARSE_FAILURE


class TestStringFields:
    @pytest.mark.parametrize(
        "document",
        [
            {"accounts": [{"name": None, "id": "1"}]},
            {"accounts": [{"name": "a", "id": None}]},
            {"accounts": [{"name": "a", "id": 1}]},
            {"categories": [{"name": "ops", "accounts": [None]}]},
            {"projects": [{"project_name": None, "accounts": []}]},
            {"projects": [{"project_name": "p", "accounts": [{"id": None}]}]},
            {"group": [{"group_id": None, "label": "x"}]},
            {"group": [{"group_id": "REGION", "label": None}]},
        ],
    )
    def test_null_or_number_is_parse_failure(self, document: "dict") -> "None":
        with pytest.raises(ConfigError) as excinfo:
            parse_config(document)
        assert excinfo.value.kind is ConfigErrorKind.PARSE_FAILURE

    def test_missing_name_defaults_to_empty(self) -> "None":
        config = parse_config({"accounts": [{"id": "1"}]})
        assert config.directory.lookup("1").name == ""

    def test_missing_group_id_is_parse_failure(self) -> "None":
        with pytest.raises(ConfigError) as excinfo:
            parse_config({"group": [{"label": "region"}]})
        assert excinfo.value.kind is ConfigErrorKind.PARSE_FAILURE
