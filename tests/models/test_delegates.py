"""Tests for the optional delegate strategies."""

from __future__ import annotations

from graphtable.models.delegates import SelectionDelegate, TableDelegate, field_text


def test_defaults_when_no_hooks_are_set():
    delegate = TableDelegate()
    record = {"name": "Ann"}
    assert delegate.includes(record)
    assert delegate.title(record) == ""
    assert delegate.subtitle(record) == ""
    assert delegate.picture_url(record) is None
    assert not SelectionDelegate().is_selected(record)


def test_hooks_are_consulted():
    delegate = TableDelegate(
        filter_includes=lambda r: r["age"] > 18,
        title_of=field_text("name"),
        subtitle_of=lambda r: None,
        picture_url_of=lambda r: "",
    )
    adult, child = {"name": "Ann", "age": 30}, {"name": "Tim", "age": 9}
    assert delegate.includes(adult)
    assert not delegate.includes(child)
    assert delegate.title(adult) == "Ann"
    assert delegate.subtitle(adult) == ""
    assert delegate.picture_url(adult) is None

    selection = SelectionDelegate(includes_record=lambda r: r is adult)
    assert selection.is_selected(adult)
    assert not selection.is_selected(child)


def test_field_text_missing_field():
    assert field_text("name")({}) is None
    assert field_text("age")({"age": 3}) == "3"
