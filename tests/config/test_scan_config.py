"""Tests for the packaged scan configuration."""

from __future__ import annotations

import logging

from graphfs.config import ScanConfig, clear_config_cache, get_scan_config


class TestScanConfig:
    def test_packaged_config(self):
        config = ScanConfig.load()

        assert ".git" in config.ignore_patterns
        assert "node_modules" in config.ignore_patterns
        keys = {lang.key for lang in config.languages}
        assert {"go", "python", "c"} <= keys
        go = next(lang for lang in config.languages if lang.key == "go")
        assert go.name == "Go"
        assert go.extensions == (".go",)

    def test_category_order_then_unknown_categories(self, tmp_path):
        (tmp_path / "exclude.yaml").write_text(
            "version: 1\n"
            "custom:\n  - generated\n"
            "artifacts:\n  - '*.o'\n"
            "version_control:\n  - .git\n"
        )
        (tmp_path / "languages.yaml").write_text(
            "version: 1\nzig:\n  extensions: [.zig]\n"
        )

        config = ScanConfig.load(tmp_path)

        assert config.ignore_patterns == [".git", "*.o", "generated"]
        assert len(config.languages) == 1
        assert config.languages[0].name == "zig"
        assert config.languages[0].extensions == (".zig",)

    def test_missing_files_warn(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="graphfs.config.scan_config"):
            config = ScanConfig.load(tmp_path)

        assert config.ignore_patterns == []
        assert config.languages == []
        assert "Exclusion config not found" in caplog.text
        assert "Language config not found" in caplog.text

    def test_cached(self):
        first = get_scan_config()
        assert get_scan_config() is first
        clear_config_cache()
        assert get_scan_config() is not first
