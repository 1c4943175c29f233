import pytest

from src.alpha_nav.resolver import resolve_active_section
from src.alpha_nav.section_handles import Section

ABC = [Section("A", 0), Section("B", 500), Section("C", 1200)]


@pytest.mark.parametrize(
    "scroll_y, expected",
    [
        (0, "A"),
        (450, "B"),
        (1050, "B"),
        (1150, "C"),
        (10_000, "C"),
    ],
)
def test_directory_scenario(scroll_y, expected):
    assert resolve_active_section(ABC, scroll_y, 100) == expected


def test_empty_sections_resolve_to_none():
    for y in (0, 1, 250.5, 99_999):
        for h in (0, 100, -20):
            assert resolve_active_section([], y, h) is None


@pytest.mark.parametrize("header_offset", [0, 100, 5000, -300])
def test_top_of_page_is_always_first_section(header_offset):
    sections = [Section("M", 900), Section("N", 50), Section("Q", float("inf"))]
    assert resolve_active_section(sections, 0, header_offset) == "M"


def test_nothing_reached_falls_back_to_first():
    sections = [Section("D", 800), Section("E", 1600)]
    # adjusted tops 700 and 1500 are both below scroll_y=300
    assert resolve_active_section(sections, 300, 100) == "D"


def test_boundary_is_inclusive():
    assert resolve_active_section(ABC, 400, 100) == "B"
    assert resolve_active_section(ABC, 399, 100) == "A"


def test_missing_anchor_is_never_reached():
    sections = [Section("A", 0), Section("B", 500), Section("C", float("inf"))]
    assert resolve_active_section(sections, 50_000, 100) == "B"


def test_resolved_index_never_decreases_while_scrolling_down():
    sections = [Section(k, top) for k, top in zip("ABCDEFG", [0, 120, 480, 485, 1300, 2200, 2210])]
    keys = [s.key for s in sections]
    last_index = 0
    for y in range(0, 3000, 7):
        key = resolve_active_section(sections, y, 100)
        index = keys.index(key)
        assert index >= last_index
        last_index = index


def test_same_arguments_same_answer():
    args = (ABC, 777, 100)
    assert resolve_active_section(*args) == resolve_active_section(*args)


def test_result_is_always_a_registered_key():
    sections = [Section("X", 300), Section("Y", float("inf")), Section("Z", 40)]
    keys = {s.key for s in sections}
    for y in (0, 1, 200, 299, 10_000):
        assert resolve_active_section(sections, y, 100) in keys
