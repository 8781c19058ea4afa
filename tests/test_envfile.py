"""Tests for reading, merging and writing env files."""

import logging
import os
from pathlib import Path

import pytest

from autoenv import envfile
from autoenv.envfile import (
    HEADER,
    is_writable_key,
    merge_variables,
    parse_env_text,
    read_existing_env,
    render_env_file,
    write_env_file,
)
from autoenv.errors import EnvFileError


class TestParseEnvText:
    def test_skips_comments_and_blanks(self):
        text = """# Existing environment file
# This is a comment

EXISTING_VAR=existing_value
EMPTY_EXISTING=

# Another comment
DATABASE_URL=postgres://localhost/mydb
"""
        assert parse_env_text(text) == {
            "EXISTING_VAR": "existing_value",
            "EMPTY_EXISTING": "",
            "DATABASE_URL": "postgres://localhost/mydb",
        }

    def test_splits_at_first_equals_and_trims(self):
        assert parse_env_text("  KEY =  a=b=c  \n") == {"KEY": "a=b=c"}

    def test_lines_without_equals_skipped(self):
        assert parse_env_text("JUST_A_WORD\nOK=1\n") == {"OK": "1"}

    def test_later_duplicate_wins(self):
        assert parse_env_text("A=1\nA=2\n") == {"A": "2"}


class TestReadExistingEnv:
    def test_missing_file_is_empty(self, tmp_path: Path):
        assert read_existing_env(tmp_path / ".env") == {}

    def test_unreadable_path_raises(self, tmp_path: Path):
        directory = tmp_path / ".env"
        directory.mkdir()
        with pytest.raises(EnvFileError) as excinfo:
            read_existing_env(directory)
        assert excinfo.value.path == directory


class TestMergeVariables:
    def test_existing_values_preserved(self):
        existing = {"DATABASE_URL": "postgres://x", "OTHER": "1"}
        merged = merge_variables(existing, {"DATABASE_URL", "NEW"})
        assert merged == {"DATABASE_URL": "postgres://x", "OTHER": "1", "NEW": ""}

    def test_input_not_mutated(self):
        existing = {"A": "1"}
        merge_variables(existing, {"B"})
        assert existing == {"A": "1"}


    def test_unwritable_names_skipped_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="autoenv.envfile"):
            merged = merge_variables({}, ["OK", "A=B", " SP", "#X"])

        assert merged == {"OK": ""}
        assert "'A=B'" in caplog.text
        assert "' SP'" in caplog.text

    def test_is_writable_key(self):
        assert is_writable_key("DATABASE_URL")
        assert is_writable_key("VAR_WITH-DASH")
        assert not is_writable_key("A=B")
        assert not is_writable_key("TRAILING ")
        assert not is_writable_key("#COMMENTED")


class TestRenderEnvFile:
    def test_header_only_when_empty(self):
        assert render_env_file({}) == (
            "# Auto-generated environment variables\n# Add your values below\n\n"
        )

    def test_sorted_entries(self):
        content = render_env_file({"b_lower": "", "ZED": "z", "API_KEY": "", "Zed": ""})
        assert content == HEADER + "API_KEY=\nZED=z\nZed=\nb_lower=\n"


class TestWriteEnvFile:
    def test_merge_scenario(self, tmp_path: Path):
        target = tmp_path / ".env"
        target.write_text(
            "EXISTING_VAR=existing_value\nSHARED_VAR=original_value\nEMPTY_EXISTING=\n"
        )

        entries = write_env_file({"SHARED_VAR", "NEW_VARIABLE"}, target)

        assert entries == {
            "EXISTING_VAR": "existing_value",
            "SHARED_VAR": "original_value",
            "EMPTY_EXISTING": "",
            "NEW_VARIABLE": "",
        }
        assert target.read_text() == HEADER + (
            "EMPTY_EXISTING=\nEXISTING_VAR=existing_value\nNEW_VARIABLE=\nSHARED_VAR=original_value\n"
        )

    def test_no_merge_discards_existing(self, tmp_path: Path):
        target = tmp_path / ".env"
        target.write_text("EXISTING_VAR=existing_value\nSHARED_VAR=original_value\n")

        write_env_file({"SHARED_VAR", "NEW_VARIABLE"}, target, merge_existing=False)

        assert target.read_text() == HEADER + "NEW_VARIABLE=\nSHARED_VAR=\n"

    def test_rerun_is_byte_identical(self, tmp_path: Path):
        target = tmp_path / ".env"
        target.write_text("DATABASE_URL=postgres://x\n# note\nPORT = 8080\n")
        variables = {"DATABASE_URL", "API_KEY", "PORT"}

        write_env_file(variables, target)
        first = target.read_bytes()
        write_env_file(variables, target)

        assert target.read_bytes() == first
        assert b"DATABASE_URL=postgres://x\n" in first
        assert b"PORT=8080\n" in first

    def test_rerun_with_unwritable_names_is_byte_identical(self, tmp_path: Path):
        """Names that would parse back as another key are left out."""
        target = tmp_path / ".env"
        variables = {"A=B", " SP ", "#HASH", "GOOD"}

        write_env_file(variables, target)
        first = target.read_bytes()
        write_env_file(variables, target)

        assert target.read_bytes() == first
        assert first == (HEADER + "GOOD=\n").encode()

    @pytest.mark.skipif(os.name != "posix", reason="POSIX symlinks")
    def test_symlinked_output_written_through(self, tmp_path: Path):
        shared = tmp_path / "shared.env"
        shared.write_text("X=1\n")
        link = tmp_path / ".env"
        link.symlink_to(shared)

        write_env_file({"Y"}, link)

        assert link.is_symlink()
        assert shared.read_text() == HEADER + "X=1\nY=\n"

    def test_empty_set_writes_header(self, tmp_path: Path):
        target = tmp_path / ".env"
        write_env_file(set(), target)
        assert target.read_text() == HEADER

    def test_unwritable_target_raises(self, tmp_path: Path):
        with pytest.raises(EnvFileError) as excinfo:
            write_env_file({"A"}, tmp_path / "missing-dir" / ".env")
        assert excinfo.value.path == (tmp_path / "missing-dir" / ".env").resolve()

    def test_failed_write_leaves_old_file(self, tmp_path: Path, monkeypatch):
        target = tmp_path / ".env"
        target.write_text("KEEP=me\n")

        def fail_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(envfile.os, "replace", fail_replace)

        with pytest.raises(EnvFileError):
            write_env_file({"NEW"}, target)

        assert target.read_text() == "KEEP=me\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == [".env"]

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_existing_mode_preserved(self, tmp_path: Path):
        target = tmp_path / ".env"
        target.write_text("A=1\n")
        target.chmod(0o640)

        write_env_file({"B"}, target)

        assert target.stat().st_mode & 0o777 == 0o640
