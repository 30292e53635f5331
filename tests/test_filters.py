"""Tests for the path exclusion table and language mapping."""

import pytest

from vibecheck_cli.filters import (
    file_extension,
    language_for_path,
    should_analyze_file,
    should_skip_directory,
)


@pytest.mark.parametrize(
    "path",
    [
        "src/lib/utils.ts",
        "server/handlers.py",
        "docs/guide.md",
        "cmd/tool/main.go",
        "scripts/deploy.sh",
    ],
)
def test_analyzable_files(path):
    assert should_analyze_file(path)


@pytest.mark.parametrize(
    "path",
    [
        "node_modules/left-pad/index.js",
        "src/components/ui/button.tsx",
        "src/ui/card.tsx",
        "package.json",
        "web/package-lock.json",
        "src/main.ts",
        "src/App.tsx",
        "src/types.ts",
        "src/global.d.ts",
        "src/api.generated.ts",
        "vite.config.ts",
        "src/login.test.ts",
        "src/__tests__/login.ts",
        "app/.secrets/key.json",
        "logo.png",
        "Makefile",
        "build/output.js",
    ],
)
def test_excluded_files(path):
    assert not should_analyze_file(path)


@pytest.mark.parametrize(
    "path, name",
    [
        ("node_modules", "node_modules"),
        (".github", ".github"),
        ("config/.husky", ".husky"),
        ("src/.cache", ".cache"),
        ("components/ui", "ui"),
        ("src/components/ui", "ui"),
        ("packages/web/dist", "dist"),
        ("assets", "assets"),
    ],
)
def test_skipped_directories(path, name):
    assert should_skip_directory(path, name)


@pytest.mark.parametrize("path, name", [("src", "src"), ("src/components", "components"), ("lib/ui-kit", "ui-kit")])
def test_walked_directories(path, name):
    assert not should_skip_directory(path, name)


def test_language_mapping():
    assert language_for_path("a/b.TSX") == "tsx"
    assert language_for_path("x.py") == "python"
    assert language_for_path("notes.unknown") == "text"
    assert language_for_path("Makefile") == "text"


def test_file_extension():
    assert file_extension("src/app.min.JS") == ".js"
    assert file_extension("README") == ""
