"""Tests for ListProjection."""

from __future__ import annotations

import pytest

from graphtable.models.index_builder import IndexBuilder, SortDescriptor, group_key_for_field
from graphtable.models.list_projection import ListProjection, RowLocation
from graphtable.models.record_store import RecordStore


class ProjectionHarness:
    """Bundle a store, an index and the projection reading them."""

    def __init__(self, records, *, paging=True, record_filter=None):
        self.store = RecordStore()
        self.store.append(records)
        self.paging = paging
        self.group_key = group_key_for_field("name")
        self.record_filter = record_filter
        self.index = None
        self.rebuild()
        self.projection = ListProjection(
            lambda: self.index,
            lambda: self.store.expecting_more,
            lambda: self.paging,
            lambda: self.group_key,
        )

    def rebuild(self):
        self.index = IndexBuilder.rebuild(
            self.store.records, self.record_filter, self.group_key, [SortDescriptor("name")]
        )


@pytest.fixture
def people():
    return [{"name": "Bob"}, {"name": "alice"}, {"name": "Charlie"}, {"name": "Carl"}]


def test_section_counts_and_titles(people):
    harness = ProjectionHarness(people, paging=False)
    projection = harness.projection

    assert projection.section_count() == 3
    assert projection.section_titles() == ("A", "B", "C")
    assert projection.section_title(2) == "C"
    assert projection.section_title(3) is None
    assert [projection.row_count(s) for s in range(3)] == [1, 1, 2]


def test_sentinel_row_on_last_section_only(people):
    harness = ProjectionHarness(people, paging=True)
    projection = harness.projection

    assert [projection.row_count(s) for s in range(3)] == [1, 1, 3]
    assert projection.is_paging_sentinel(2, 2)
    assert not projection.is_paging_sentinel(2, 1)
    assert not projection.is_paging_sentinel(0, 1)
    assert projection.record_at(2, 2) is None


def test_sentinel_requires_data_needed_registration(people):
    harness = ProjectionHarness(people, paging=False)
    assert harness.projection.row_count(2) == 2
    assert not harness.projection.is_paging_sentinel(2, 2)


def test_terminator_append_removes_sentinel(people):
    harness = ProjectionHarness(people, paging=True)
    projection = harness.projection
    assert projection.row_count(2) == 3

    harness.store.append([])

    assert projection.row_count(2) == 2
    assert [projection.row_count(s) for s in range(2)] == [1, 1]
    assert not projection.is_paging_sentinel(2, 2)


def test_record_at_out_of_range_returns_none(people):
    projection = ProjectionHarness(people).projection
    assert projection.record_at(-1, 0) is None
    assert projection.record_at(9, 0) is None
    assert projection.record_at(0, -1) is None
    assert projection.record_at(0, 5) is None
    assert projection.row_count(9) == 0


def test_location_of_round_trips_every_row(people):
    projection = ProjectionHarness(people).projection
    for section in range(projection.section_count()):
        for row in range(projection.record_count(section)):
            record = projection.record_at(section, row)
            assert projection.location_of(record) == RowLocation(section, row)
            assert projection.record_at(*projection.location_of(record)) is record


def test_location_of_uses_identity_not_equality(people):
    projection = ProjectionHarness(people).projection
    lookalike = {"name": "Bob"}
    assert lookalike == people[0]
    assert projection.location_of(lookalike) is None
    assert projection.location_of(people[0]) == RowLocation(1, 0)


def test_location_of_filtered_or_unindexed_record(people):
    harness = ProjectionHarness(people, record_filter=lambda r: r["name"] != "Carl")
    projection = harness.projection
    assert projection.location_of(people[3]) is None

    late = {"name": "Dora"}
    harness.store.append([late])
    assert projection.location_of(late) is None

    harness.rebuild()
    assert projection.location_of(late) == RowLocation(3, 0)


def test_empty_projection():
    harness = ProjectionHarness(None)
    projection = harness.projection
    assert projection.section_count() == 0
    assert not projection.is_last_section(0)
    assert not projection.is_paging_sentinel(0, 0)
    assert projection.row_count(0) == 0
