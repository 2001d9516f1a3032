from __future__ import annotations

from pathlib import Path

from liveplug.runtime.classpath import (
    ClasspathEntry,
    directive_marker,
    find_classpath_additions,
    inline_environment_variables,
    parse_classpath_entries,
)

MARKER = directive_marker("//")


def test_directive_marker_uses_comment_prefix() -> None:
    assert directive_marker("#") == "# add-to-classpath "
    assert MARKER == "// add-to-classpath "


def test_directive_with_known_variable_resolves_existing_path(tmp_path: Path) -> None:
    libs = tmp_path / "libs"
    libs.mkdir()
    (libs / "foo.jar").write_bytes(b"")
    errors: list[str] = []

    paths = find_classpath_additions(
        ["// add-to-classpath $HOST_LIBS/foo.jar"],
        MARKER,
        {"HOST_LIBS": str(libs)},
        errors.append,
    )

    assert paths == [str(libs / "foo.jar")]
    assert errors == []


def test_missing_dependency_is_excluded_and_reported_once(tmp_path: Path) -> None:
    libs = tmp_path / "libs"
    libs.mkdir()
    errors: list[str] = []

    paths = find_classpath_additions(
        ["// add-to-classpath $HOST_LIBS/foo.jar"],
        MARKER,
        {"HOST_LIBS": str(libs)},
        errors.append,
    )

    assert paths == []
    assert errors == [f"{libs}/foo.jar"]


def test_order_is_preserved_and_duplicates_are_kept(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    errors: list[str] = []
    lines = [
        "import something",
        f"// add-to-classpath {second}",
        f"// add-to-classpath {tmp_path / 'missing_a'}",
        f"// add-to-classpath {first}",
        f"// add-to-classpath {second}",
        f"// add-to-classpath {tmp_path / 'missing_b'}",
    ]

    paths = find_classpath_additions(lines, MARKER, {}, errors.append)

    assert paths == [str(second), str(first), str(second)]
    assert errors == [str(tmp_path / "missing_a"), str(tmp_path / "missing_b")]


def test_lines_without_marker_at_line_start_are_ignored(tmp_path: Path) -> None:
    errors: list[str] = []
    lines = [
        f"  // add-to-classpath {tmp_path}",
        f"# add-to-classpath {tmp_path}",
        f"// add-to-classpath-extra {tmp_path}",
    ]

    assert find_classpath_additions(lines, MARKER, {}, errors.append) == []
    assert errors == []


def test_unknown_variables_are_left_untouched(tmp_path: Path) -> None:
    errors: list[str] = []

    paths = find_classpath_additions(
        ["// add-to-classpath $NOT_DEFINED/lib"], MARKER, {"OTHER": "x"}, errors.append
    )

    assert paths == []
    assert errors == ["$NOT_DEFINED/lib"]


def test_inline_replaces_every_occurrence_once() -> None:
    environment = {"ROOT": "/opt/root", "NAME": "tool"}

    result = inline_environment_variables("$ROOT/$NAME/${NAME}.jar:$ROOT", environment)

    assert result == "/opt/root/tool/tool.jar:/opt/root"
    assert inline_environment_variables(result, environment) == result


def test_inline_does_not_rescan_substituted_values() -> None:
    environment = {"A": "$B", "B": "never"}

    assert inline_environment_variables("$A/x", environment) == "$B/x"


def test_inline_matches_the_longest_variable_name() -> None:
    environment = {"LIB": "/short", "LIBS": "/long"}

    assert inline_environment_variables("$LIBS/a", environment) == "/long/a"
    assert inline_environment_variables("${LIB}S/a", environment) == "/shortS/a"


def test_relative_paths_are_anchored_at_base_dir(tmp_path: Path) -> None:
    (tmp_path / "vendor").mkdir()
    errors: list[str] = []

    paths = find_classpath_additions(
        ["// add-to-classpath vendor"], MARKER, {}, errors.append, base_dir=tmp_path
    )

    assert paths == [str(tmp_path / "vendor")]
    assert errors == []


def test_parse_classpath_entries_reports_existence(tmp_path: Path) -> None:
    line_ok = f"// add-to-classpath {tmp_path}"
    line_missing = "// add-to-classpath $HOME_X/missing"

    entries = parse_classpath_entries([line_ok, line_missing], MARKER, {"HOME_X": str(tmp_path)})

    assert entries == [
        ClasspathEntry(raw_directive=line_ok, resolved_path=str(tmp_path), exists=True),
        ClasspathEntry(
            raw_directive=line_missing,
            resolved_path=str(tmp_path / "missing"),
            exists=False,
        ),
    ]
