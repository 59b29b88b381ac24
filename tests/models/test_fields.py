"""Tests for fields_for_request."""

from __future__ import annotations

from graphtable.models.fields import fields_for_request


def test_includes_group_by_field_last():
    assert fields_for_request(["id", "picture"], group_by_field="name") == "id,picture,name"


def test_extra_fields_and_duplicates():
    result = fields_for_request({"id"}, "picture", "id", group_by_field="picture")
    assert result == "id,picture"


def test_no_fields():
    assert fields_for_request([]) == ""
