import logging
import subprocess
from unittest.mock import patch

import pytest

from perl_depends.corelist import (
    EmptyCoreList,
    StaticCoreList,
    load_corelist_file,
    query_perl_corelist,
    resolve_corelist,
)
from perl_depends.errors import CorelistUnavailable
from perl_depends.models import DependsConfig


class TestStaticCoreList:
    def test_find_modules_uses_pattern_search(self):
        index = StaticCoreList(["Carp", "Text::Wrap", "Text::Balanced"])

        assert index.find_modules("Text") == ["Text::Balanced", "Text::Wrap"]
        assert index.find_modules("^Carp$") == ["Carp"]
        assert index.find_modules("Missing") == []

    def test_blank_names_dropped(self):
        index = StaticCoreList(["Carp", "", "  ", "Carp"])

        assert len(index) == 1

    def test_empty_list_recognizes_nothing(self):
        assert EmptyCoreList().find_modules("") == []


class TestLoadCorelistFile:
    def test_yaml_list(self, tmp_path):
        path = tmp_path / "core.yaml"
        path.write_text("- Carp\n- Text::Wrap\n", encoding="utf-8")

        assert load_corelist_file(path).names == ["Carp", "Text::Wrap"]

    def test_yaml_mapping(self, tmp_path):
        path = tmp_path / "core.yaml"
        path.write_text("modules:\n  - Exporter\n  - strict\n", encoding="utf-8")

        assert load_corelist_file(path).names == ["Exporter", "strict"]

    def test_plain_text_with_comments(self, tmp_path):
        path = tmp_path / "core.txt"
        path.write_text("# core modules\nCarp\n\nText::Wrap  # since 5.0\n", encoding="utf-8")

        assert load_corelist_file(path).names == ["Carp", "Text::Wrap"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(CorelistUnavailable):
            load_corelist_file(tmp_path / "absent.txt")


class TestQueryPerl:
    @patch("perl_depends.corelist.subprocess.run")
    def test_parses_module_names(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=0, stdout="Carp\nText::Wrap\n", stderr=""
        )

        index = query_perl_corelist("perl")

        assert index.names == ["Carp", "Text::Wrap"]
        cmd = mock_run.call_args[0][0]
        assert cmd[:2] == ["perl", "-MModule::CoreList"]

    @patch("perl_depends.corelist.subprocess.run")
    def test_failed_query_raises(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=2, stdout="", stderr="Can't locate Module/CoreList.pm"
        )

        with pytest.raises(CorelistUnavailable, match="CoreList"):
            query_perl_corelist("perl")

    @patch("perl_depends.corelist.subprocess.run", side_effect=FileNotFoundError("perl"))
    def test_missing_interpreter_raises(self, mock_run):
        with pytest.raises(CorelistUnavailable):
            query_perl_corelist("perl")


class TestResolveCorelist:
    def test_prefers_configured_file(self, tmp_path):
        path = tmp_path / "core.txt"
        path.write_text("Carp\n", encoding="utf-8")

        with patch("perl_depends.corelist.query_perl_corelist") as mock_query:
            index = resolve_corelist(DependsConfig(corelist_file=str(path)))

        assert index.find_modules("Carp") == ["Carp"]
        mock_query.assert_not_called()

    def test_falls_back_to_empty_list(self, caplog):
        with patch(
            "perl_depends.corelist.query_perl_corelist",
            side_effect=CorelistUnavailable("no perl"),
        ):
            with caplog.at_level(logging.WARNING, logger="perl_depends.corelist"):
                index = resolve_corelist(DependsConfig())

        assert isinstance(index, EmptyCoreList)
        assert "no perl" in caplog.text
