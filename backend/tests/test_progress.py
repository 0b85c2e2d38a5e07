"""Tests for progress aggregation."""

import pytest

from learnboard.schemas.roadmap import Topic
from learnboard.services.progress import calc_percentage, roadmap_progress, section_progress


def _topics(*flags: bool) -> list[Topic]:
    return [
        Topic(id=f"t{i}", section_id="s", title=f"Topic {i}", completed=flag)
        for i, flag in enumerate(flags)
    ]


@pytest.mark.parametrize(
    ("completed", "total", "expected"),
    [(0, 0, 0), (0, 3, 0), (1, 3, 33), (2, 3, 67), (3, 3, 100), (1, 8, 13), (1, 200, 1)],
)
def test_calc_percentage_rounds_half_up(completed: int, total: int, expected: int) -> None:
    assert calc_percentage(completed, total) == expected


def test_section_progress_empty() -> None:
    progress = section_progress([])
    assert (progress.completed, progress.total, progress.percentage) == (0, 0, 0)


def test_section_progress_two_of_three() -> None:
    progress = section_progress(_topics(True, True, False))
    assert (progress.completed, progress.total, progress.percentage) == (2, 3, 67)


def test_roadmap_progress_sums_sections() -> None:
    progress = roadmap_progress([_topics(True, False), _topics(True, True), []])
    assert (progress.completed, progress.total, progress.percentage) == (3, 4, 75)
