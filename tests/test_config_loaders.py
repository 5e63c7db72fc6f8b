"""Tests for configuration resource resolution and loading."""

from pathlib import Path
import tempfile

import pytest

import filecopy.config.loaders as loaders
from filecopy.config import (
    default_context,
    interpolate,
    list_bundled_configs,
    load_config,
    load_json,
    parse_config,
    resolve_resource,
)
from filecopy.errors import ConfigurationResolutionError


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def context_for(tmp_path):
    return default_context(tmp_path / "input", tmp_path / "output")


class TestResolveResource:
    """Tests for resolve_resource() function."""

    def test_url_returned_unchanged(self):
        """Test that URLs are not resolved locally."""
        url = "https://example.org/pipelines/copy.json"
        assert resolve_resource(url) == url

    def test_existing_path(self):
        """Test that an existing file path resolves to itself."""
        path = FIXTURES_DIR / "config_simple.json"
        assert resolve_resource(str(path)) == str(path)

    def test_search_paths(self):
        """Test resolution through extra search directories, suffix optional."""
        resolved = resolve_resource("config_simple", search_paths=[FIXTURES_DIR])
        assert resolved == str(FIXTURES_DIR / "config_simple.json")

    def test_bundled_resource(self):
        """Test that bundled resources resolve with or without suffix."""
        without_suffix = resolve_resource("filecopy-binary")
        with_suffix = resolve_resource("filecopy-binary.json")

        assert without_suffix == with_suffix
        assert without_suffix.endswith("filecopy-binary.json")

    def test_missing_resource_fails(self):
        """Test that an unknown name is a resolution failure."""
        with pytest.raises(ConfigurationResolutionError) as excinfo:
            resolve_resource("no-such-pipeline")

        assert excinfo.value.name == "no-such-pipeline"

    def test_empty_name_fails(self):
        """Test that an empty name is a resolution failure."""
        with pytest.raises(ConfigurationResolutionError):
            resolve_resource("")


class TestListBundledConfigs:
    """Tests for list_bundled_configs() function."""

    def test_lists_sample_variants(self):
        """Test that the three sample pipelines are bundled."""
        assert list_bundled_configs() == ["filecopy-binary", "filecopy-bytes", "filecopy-text"]


class TestInterpolate:
    """Tests for interpolate() function."""

    def test_substitutes_nested_values(self):
        """Test substitution inside nested dicts and lists."""
        data = {"a": "${x}/in", "b": ["${x}", 3], "c": {"d": "${x}"}, "e": True}

        result = interpolate(data, {"x": "/tmp"})

        assert result == {"a": "/tmp/in", "b": ["/tmp", 3], "c": {"d": "/tmp"}, "e": True}

    def test_environment_fallback(self, monkeypatch):
        """Test that placeholders fall back to environment variables."""
        monkeypatch.setenv("FILECOPY_TEST_ROOT", "/srv/files")

        assert interpolate("${FILECOPY_TEST_ROOT}/in", {}) == "/srv/files/in"

    def test_context_wins_over_environment(self, monkeypatch):
        """Test that explicit context takes precedence."""
        monkeypatch.setenv("input_dir", "/from/env")

        assert interpolate("${input_dir}", {"input_dir": "/from/context"}) == "/from/context"

    def test_bare_dollar_left_unchanged(self, monkeypatch):
        """Test that only braced placeholders are substituted."""
        monkeypatch.setenv("HOME", "/home/someone")

        assert interpolate("costs $HOME", {}) == "costs $HOME"
        assert interpolate("/data/$x/in", {}) == "/data/$x/in"
        assert interpolate("$", {}) == "$"

    def test_double_dollar_escapes(self):
        """Test that $$ produces a literal dollar sign."""
        assert interpolate("$${tmpdir} is ${tmpdir}", {"tmpdir": "/tmp"}) == "${tmpdir} is /tmp"

    def test_unknown_placeholder_raises(self):
        """Test that a missing value raises KeyError."""
        with pytest.raises(KeyError):
            interpolate("${FILECOPY_TEST_UNDEFINED_PLACEHOLDER}", {})


class TestParseConfig:
    """Tests for parse_config() function."""

    def test_schema_error_wrapped(self):
        """Test that schema errors become resolution failures."""
        with pytest.raises(ConfigurationResolutionError) as excinfo:
            parse_config({"name": "broken"}, name="broken.json")

        assert excinfo.value.name == "broken.json"


class TestLoadConfig:
    """Tests for load_config() function."""

    def test_load_fixture(self, tmp_path):
        """Test loading a configuration from a file path."""
        config = load_config(
            str(FIXTURES_DIR / "config_simple.json"), context=context_for(tmp_path)
        )

        assert config.name == "simple"
        assert config.source.directory == tmp_path / "input"
        assert config.target.directory == tmp_path / "output"
        assert config.source.pattern == "*.bin"
        assert config.poller.trigger == "once"

    @pytest.mark.parametrize("name", ["filecopy-binary", "filecopy-bytes", "filecopy-text"])
    def test_bundled_configs_load(self, tmp_path, name):
        """Test that every bundled configuration loads and validates."""
        config = load_config(name, context=context_for(tmp_path))

        assert config.name == name
        assert config.source.directory == tmp_path / "input"
        assert config.target.directory == tmp_path / "output"

    def test_default_context_uses_well_known_dirs(self):
        """Test that the default layout is used without explicit context."""
        from filecopy.directories import DEFAULT_INPUT_DIR, DEFAULT_OUTPUT_DIR

        config = load_config("filecopy-binary")

        assert config.source.directory == DEFAULT_INPUT_DIR
        assert config.target.directory == DEFAULT_OUTPUT_DIR

    def test_missing_resource_fails(self, tmp_path):
        """Test that an unresolvable name is fatal."""
        with pytest.raises(ConfigurationResolutionError):
            load_config("does-not-exist", context=context_for(tmp_path))

    def test_malformed_json_fails(self, tmp_path):
        """Test that invalid JSON is a resolution failure."""
        with pytest.raises(ConfigurationResolutionError):
            load_config(str(FIXTURES_DIR / "config_malformed.json"), context=context_for(tmp_path))

    def test_non_utf8_file_fails(self, tmp_path):
        """Test that undecodable bytes are a resolution failure."""
        path = tmp_path / "latin.json"
        path.write_bytes(b'{"name": "\xff\xfe"}')

        with pytest.raises(ConfigurationResolutionError):
            load_config(str(path), context=context_for(tmp_path))

    def test_bare_dollar_in_description_kept(self, tmp_path):
        """Test that a literal $ in a value survives loading."""
        path = tmp_path / "dollar.json"
        path.write_text(
            '{"name": "dollar", "description": "costs $HOME",'
            ' "source": {"directory": "${input_dir}"},'
            ' "target": {"directory": "${output_dir}"}}'
        )

        config = load_config(str(path), context=context_for(tmp_path))

        assert config.description == "costs $HOME"

    def test_non_object_root_fails(self, tmp_path):
        """Test that a JSON array root is rejected."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ConfigurationResolutionError):
            load_config(str(path), context=context_for(tmp_path))

    def test_unknown_placeholder_fails(self, tmp_path, monkeypatch):
        """Test that an unresolved placeholder is a resolution failure."""
        monkeypatch.delenv("FILECOPY_TEST_UNDEFINED_PLACEHOLDER", raising=False)

        with pytest.raises(ConfigurationResolutionError) as excinfo:
            load_config(
                str(FIXTURES_DIR / "config_unknown_placeholder.json"),
                context=context_for(tmp_path),
            )

        assert "FILECOPY_TEST_UNDEFINED_PLACEHOLDER" in str(excinfo.value)

    def test_schema_error_fails(self, tmp_path):
        """Test that an unknown transfer mode is a resolution failure."""
        with pytest.raises(ConfigurationResolutionError):
            load_config(str(FIXTURES_DIR / "config_bad_schema.json"), context=context_for(tmp_path))

    def test_validation_issues_attached(self, tmp_path):
        """Test that semantic issues are carried on the error."""
        with pytest.raises(ConfigurationResolutionError) as excinfo:
            load_config(str(FIXTURES_DIR / "config_same_dirs.json"), context=context_for(tmp_path))

        paths = {issue.path for issue in excinfo.value.issues}
        assert paths == {"target.directory", "transfer.transform"}

    def test_remote_resource(self, tmp_path, monkeypatch):
        """Test that URL resources are fetched over HTTP."""
        requested = []

        def fake_fetch_json(url, *, timeout=10.0):
            requested.append(url)
            return {
                "name": "remote",
                "source": {"directory": "${input_dir}"},
                "target": {"directory": "${output_dir}"},
            }

        monkeypatch.setattr(loaders, "fetch_json", fake_fetch_json)

        config = load_config("https://example.org/remote.json", context=context_for(tmp_path))

        assert requested == ["https://example.org/remote.json"]
        assert config.name == "remote"
        assert config.source.directory == tmp_path / "input"


class TestLoadJson:
    """Tests for load_json() function."""

    def test_load_from_file(self):
        """Test loading JSON from a temporary file."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write('{"name": "tmp"}')
            temp_path = Path(f.name)

        try:
            assert load_json(str(temp_path)) == {"name": "tmp"}
        finally:
            temp_path.unlink()

    def test_missing_file_raises(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_json(str(tmp_path / "missing.json"))
