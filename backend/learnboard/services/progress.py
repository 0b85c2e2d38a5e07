"""Progress aggregation over direct topics.

Only a section's direct topics are counted. Sub-topics can be toggled but do
not move the percentage.
"""

from collections.abc import Iterable

from learnboard.schemas.roadmap import Progress, Topic


def calc_percentage(completed: int, total: int) -> int:
    """Half-up rounded percentage; 0 when there is nothing to count."""
    if total <= 0:
        return 0
    # floor(completed / total * 100 + 0.5) without floats
    return (200 * completed + total) // (2 * total)


def section_progress(topics: Iterable[Topic]) -> Progress:
    """Progress of one section given its direct topics."""
    total = 0
    completed = 0
    for topic in topics:
        total += 1
        if topic.completed:
            completed += 1
    return Progress(
        completed=completed,
        total=total,
        percentage=calc_percentage(completed, total),
    )


def roadmap_progress(sections_topics: Iterable[Iterable[Topic]]) -> Progress:
    """Progress of a roadmap: section counts summed, then the same formula."""
    total = 0
    completed = 0
    for topics in sections_topics:
        progress = section_progress(topics)
        total += progress.total
        completed += progress.completed
    return Progress(
        completed=completed,
        total=total,
        percentage=calc_percentage(completed, total),
    )
