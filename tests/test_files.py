import pytest

from cipher_cli.errors import InvalidPath
from cipher_cli.files import (
    APP_JS,
    CANONICAL_FILES,
    CANONICAL_PATHS,
    DEFAULT_APP_JS,
    DEFAULT_INDEX_CSS,
    INDEX_CSS,
    INDEX_HTML,
    INDEX_JS,
    MIGRATIONS,
    PROMOTIONS,
    display_order,
    normalize,
    resolve_new_path,
    resolve_rename,
    validate_path,
)

SAMPLES = [
    {},
    {"/App.js": "A"},
    {"/App.js": "A", "/src/App.js": "B"},
    {"/index.css": "one", "/styles.css": "two"},
    {"/styles.css": "legacy", "/package.json": "{}", "/README.md": "readme"},
    {"/index.html": "<html/>", "/index.js": "boot", "/src/util/math.js": "x"},
    {"/src/": "dir marker", "/public/favicon.ico": "", "/other/file.js": "y"},
    {"relative/path.js": "z", "/src/App.js": None},
]


@pytest.mark.parametrize("raw", SAMPLES)
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


@pytest.mark.parametrize("raw", SAMPLES)
def test_canonical_roots_always_present(raw):
    files = normalize(raw)
    for path in CANONICAL_PATHS:
        assert path in files


@pytest.mark.parametrize("raw", SAMPLES)
def test_only_permitted_directories_survive(raw):
    for path in normalize(raw):
        assert path.startswith(("/public/", "/src/"))
        assert not path.endswith("/")


def test_empty_input_yields_default_skeleton():
    assert normalize({}) == dict(CANONICAL_FILES)
    assert normalize(None) == dict(CANONICAL_FILES)


def test_legacy_promotion_never_overwrites_canonical_content():
    files = normalize({"/App.js": "A", "/src/App.js": "B"})

    assert files[APP_JS] == "B"
    assert "/App.js" not in files


def test_legacy_promotion_moves_content_when_canonical_missing():
    files = normalize({"/App.js": "A", "/index.html": "<p>hi</p>"})

    assert files[APP_JS] == "A"
    assert files[INDEX_HTML] == "<p>hi</p>"
    assert "/App.js" not in files
    assert "/index.html" not in files


def test_conflicting_legacy_sources_first_rule_wins():
    files = normalize({"/styles.css": "styles", "/index.css": "index"})

    assert files[INDEX_CSS] == "index"
    assert "/styles.css" not in files
    assert "/index.css" not in files


def test_legacy_stylesheet_migrates_when_destination_free():
    files = normalize({"/styles.css": "body {}"})

    assert files[INDEX_CSS] == "body {}"


def test_package_manifest_is_stripped():
    assert "/package.json" not in normalize({"/package.json": "{}"})


def test_outside_paths_are_pruned():
    files = normalize({"/README.md": "x", "/lib/a.js": "y", "/src/lib/a.js": "z"})

    assert "/README.md" not in files
    assert "/lib/a.js" not in files
    assert files["/src/lib/a.js"] == "z"


def test_none_content_becomes_empty_and_defaults_backfill():
    files = normalize({APP_JS: None})

    assert files[APP_JS] == ""
    assert files[INDEX_CSS] == DEFAULT_INDEX_CSS


def test_rule_tables_target_canonical_paths():
    for legacy, canonical in PROMOTIONS + MIGRATIONS:
        assert legacy.count("/") == 1
        assert canonical in CANONICAL_PATHS


def test_insertion_order_is_preserved():
    files = normalize({"/src/b.js": "b", "/src/a.js": "a"})

    assert list(files)[:2] == ["/src/b.js", "/src/a.js"]


def test_display_order_puts_canonical_files_first():
    files = normalize({"/src/zeta.js": "", "/src/alpha.js": ""})

    assert display_order(files) == [
        INDEX_HTML,
        APP_JS,
        INDEX_JS,
        INDEX_CSS,
        "/src/alpha.js",
        "/src/zeta.js",
    ]


def test_resolve_new_path_defaults_to_src():
    assert resolve_new_path("App2.js") == "/src/App2.js"
    assert resolve_new_path(" /src/utils/helper.js ") == "/src/utils/helper.js"


@pytest.mark.parametrize(
    "name", ["", "   ", "utils/helper.js", "/README.md", "/src/../x.js", "/src//x.js"]
)
def test_resolve_new_path_rejects_malformed_input(name):
    with pytest.raises(InvalidPath):
        resolve_new_path(name)


def test_resolve_rename_keeps_directory_for_bare_names():
    assert resolve_rename("/src/components/A.js", "B.js") == "/src/components/B.js"
    assert resolve_rename("/src/components/A.js", "/src/B.js") == "/src/B.js"


def test_resolve_rename_rejects_relative_paths():
    with pytest.raises(InvalidPath):
        resolve_rename("/src/A.js", "components/B.js")


def test_validate_path_requires_a_file_name():
    with pytest.raises(InvalidPath):
        validate_path("/src/")
    assert validate_path(APP_JS) == APP_JS


def test_default_app_renders_greeting():
    assert "Hello from CipherStudio!" in DEFAULT_APP_JS
