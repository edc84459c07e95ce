import pytest

from ssa_benchmark.io.layout import project_report_paths, sanitize_project_name, transient_log_path, unique_path


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("webapp", "webapp"),
        ("my project (v2)", "my_project_v2"),
        ("__weird..name__", "weird_name"),
        ("a-b_c", "a-b_c"),
    ],
)
def test_sanitize_project_name(raw, expected):
    assert sanitize_project_name(raw) == expected


def test_unique_path_appends_counter_when_taken(tmp_path):
    first = unique_path(tmp_path, "scan-20240101-000000", ".json")
    first.write_text("x")
    second = unique_path(tmp_path, "scan-20240101-000000", ".json")
    second.write_text("y")
    third = unique_path(tmp_path, "scan-20240101-000000", ".json")

    assert first.name == "scan-20240101-000000.json"
    assert second.name == "scan-20240101-000000-1.json"
    assert third.name == "scan-20240101-000000-2.json"


def test_report_paths_follow_viewer_layout(tmp_path):
    paths = project_report_paths(tmp_path, "My App")

    scan = paths.new_scan_result()
    report = paths.new_comparison_report()

    assert scan.parent == tmp_path / "My_App" / "scan"
    assert scan.name.startswith("scan-") and scan.suffix == ".json"
    assert report.parent == tmp_path / "My_App" / "comparison"
    assert report.name.startswith("comparison-")


def test_transient_log_name(tmp_path):
    p = transient_log_path(tmp_path, "compare", "my app")

    assert p.parent == tmp_path
    assert p.name.startswith("compare-my_app-")
    assert p.name.endswith(".tmp.log")
