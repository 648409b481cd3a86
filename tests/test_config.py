#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Tests for configuration loading, overrides and validation.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy

import pytest
import yaml

from linkweaver.config import (
    DEFAULT_CONFIG,
    ConfigParser,
    ConfigValidationError,
    LinkageParameters,
    load_config,
    merge_config,
    save_config_template,
    validate_config,
)
from linkweaver.errors import LinkWeaverError


def write_yaml(path, data):
    with open(path, 'w') as f:
        yaml.safe_dump(data, f)
    return path


class TestSchema:
    """Test defaults, templates and validation."""

    def test_defaults(self):
        config = load_config()

        assert config['linkage']['max_distance'] == 4000
        assert config['linkage']['min_links'] == 3
        assert config['linkage']['mean_insert_size'] is None
        assert config['scaffold']['default_gap_length'] == 25
        assert config['overlap']['probe_length'] == 100
        assert validate_config(config) == []

    def test_load_does_not_mutate_defaults(self):
        config = load_config()
        config['linkage']['min_links'] = 99
        assert DEFAULT_CONFIG['linkage']['min_links'] == 3

    def test_partial_file_merged(self, tmp_path):
        path = write_yaml(tmp_path / 'c.yaml', {'linkage': {'min_links': 5}})
        config = load_config(path)

        assert config['linkage']['min_links'] == 5
        assert config['linkage']['max_distance'] == 4000

    @pytest.mark.parametrize("section,key,value", [
        ('linkage', 'max_distance', 0),
        ('linkage', 'min_links', -1),
        ('linkage', 'min_links', 2.5),
        ('linkage', 'mean_insert_size', -100),
        ('scaffold', 'default_gap_length', -1),
        ('overlap', 'probe_length', 0),
        ('runtime', 'threads', 0),
    ])
    def test_invalid_values(self, section, key, value):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config[section][key] = value

        errors = validate_config(config)
        assert len(errors) == 1
        assert f"{section}.{key}" in errors[0]

    def test_invalid_log_level(self):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config['output']['logging']['level'] = 'LOUD'
        assert validate_config(config) == ['Invalid logging level: LOUD']

    def test_insert_size_requirement(self):
        config = copy.deepcopy(DEFAULT_CONFIG)
        assert validate_config(config) == []
        assert validate_config(config, require_insert_size=True) == [
            'linkage.mean_insert_size is required'
        ]

    @pytest.mark.parametrize("template,min_links", [
        ('default', 3), ('strict', 10), ('permissive', 1),
    ])
    def test_templates(self, tmp_path, template, min_links):
        path = tmp_path / f'{template}.yaml'
        save_config_template(path, template=template)
        config = load_config(path)

        assert config['linkage']['min_links'] == min_links
        assert validate_config(config) == []

    def test_parameters(self):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config['linkage']['mean_insert_size'] = 3000
        params = LinkageParameters.from_config(config)

        assert params == LinkageParameters(
            max_distance=4000, min_links=3, mean_insert_size=3000,
        )

    def test_empty_section_in_file(self, tmp_path):
        path = tmp_path / 'c.yaml'
        path.write_text("linkage:\n")
        with pytest.raises(ConfigValidationError, match="'linkage' must be a mapping"):
            load_config(path)

    def test_nested_section_must_be_mapping(self, tmp_path):
        path = tmp_path / 'c.yaml'
        path.write_text("output:\n  logging: verbose\n")
        with pytest.raises(ConfigValidationError, match="'output.logging' must be a mapping"):
            load_config(path)

    def test_merge_config(self):
        base = {'linkage': {'min_links': 3, 'max_distance': 4000}, 'extra': None}
        merged = merge_config(base, {'linkage': {'min_links': 5}, 'extra': [1]})

        assert merged == {'linkage': {'min_links': 5, 'max_distance': 4000}, 'extra': [1]}
        assert base['linkage']['min_links'] == 3

    @pytest.mark.parametrize("section", ['linkage', 'scaffold', 'overlap', 'runtime', 'output'])
    def test_section_not_a_mapping(self, section):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config[section] = None

        errors = validate_config(config)
        assert errors == [f"Config section '{section}' must be a mapping, got None"]

    def test_parameters_need_insert_size(self):
        with pytest.raises(ConfigValidationError, match='mean_insert_size'):
            LinkageParameters.from_config(copy.deepcopy(DEFAULT_CONFIG))


class TestConfigParser:
    """Test the configuration parser."""

    def test_defaults_without_file(self):
        parser = ConfigParser()
        assert parser.get('linkage.max_distance') == 4000
        assert parser.get('linkage.nonexistent', 'fallback') == 'fallback'

    def test_user_file(self, tmp_path):
        path = write_yaml(tmp_path / 'c.yaml', {'scaffold': {'fail_on_cycles': True}})
        parser = ConfigParser(path)

        assert parser.get('scaffold.fail_on_cycles') is True
        assert parser.get('scaffold.default_gap_length') == 25

    def test_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv('LW_INSERT', '3500')
        monkeypatch.delenv('LW_UNSET_MIN_LINKS', raising=False)
        monkeypatch.delenv('LW_BLAST_HOME', raising=False)
        path = tmp_path / 'c.yaml'
        path.write_text(
            "linkage:\n"
            "  mean_insert_size: ${LW_INSERT}\n"
            "  min_links: ${LW_UNSET_MIN_LINKS:-4}\n"
            "overlap:\n"
            "  blastn: ${LW_BLAST_HOME:-/opt/blast}/bin/blastn\n"
        )
        parser = ConfigParser(path)

        assert parser.get('linkage.mean_insert_size') == 3500
        assert parser.get('linkage.min_links') == 4
        assert parser.get('overlap.blastn') == '/opt/blast/bin/blastn'

    def test_cli_overrides(self):
        parser = ConfigParser()
        parser.merge_cli_overrides({
            'linkage.min_links': 7,
            'linkage.max_distance': None,
            'runtime.threads': 4,
        })

        assert parser.get('linkage.min_links') == 7
        assert parser.get('linkage.max_distance') == 4000
        assert parser.get('runtime.threads') == 4

    def test_to_dict_is_a_copy(self):
        parser = ConfigParser()
        config = parser.to_dict()
        config['linkage']['min_links'] = 0
        assert parser.get('linkage.min_links') == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigParser(tmp_path / 'missing.yaml')

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text("linkage: [unclosed\n")
        with pytest.raises(ConfigValidationError):
            ConfigParser(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / 'list.yaml'
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigValidationError, match='mapping'):
            ConfigParser(path)

    def test_empty_section(self, tmp_path):
        path = tmp_path / 'c.yaml'
        path.write_text("linkage:\nscaffold:\n  fail_on_cycles: true\n")
        with pytest.raises(ConfigValidationError, match="'linkage' must be a mapping"):
            ConfigParser(path)

    def test_validate(self):
        parser = ConfigParser()
        assert parser.validate()

        parser.merge_cli_overrides({'linkage.min_links': -2})
        with pytest.raises(ConfigValidationError, match='min_links'):
            parser.validate()

    def test_parameters(self):
        parser = ConfigParser()
        parser.merge_cli_overrides({'linkage.mean_insert_size': 500})
        assert parser.parameters().mean_insert_size == 500

    def test_error_hierarchy(self):
        assert issubclass(ConfigValidationError, LinkWeaverError)

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
