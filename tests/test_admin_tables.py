"""
Tests for CSV export and the admin table helpers
"""
import csv
import io

import pytest

from wealth_oven.services import ValidationError
from wealth_oven.utils.csv_export import export_to_csv, format_cell
from wealth_oven.utils.listing import paginate, search_rows, sort_rows

ROWS = [
    {"id": "1", "name": "Alpha", "amount": 300.0, "notes": None},
    {"id": "2", "name": "beta", "amount": 100.0, "notes": "VIP"},
    {"id": "3", "name": "Gamma", "amount": None, "notes": "vip lead"},
]


class TestCsvExport:

    def test_header_and_quoting(self):
        text = export_to_csv([{"name": 'Say "hi"', "note": "a,b"}])
        assert text == 'name,note\n"Say ""hi""","a,b"'

    def test_parses_back(self):
        """Output is readable by a standard CSV parser"""
        rows = [{"name": 'Quote "me"', "tags": ["x", "y"], "active": True, "fee": None}]
        parsed = list(csv.reader(io.StringIO(export_to_csv(rows))))

        assert parsed[0] == ["name", "tags", "active", "fee"]
        assert parsed[1] == ['Quote "me"', "x,y", "true", ""]

    def test_explicit_columns(self):
        text = export_to_csv(ROWS, columns=["name", "amount"])
        assert text.splitlines()[0] == "name,amount"
        assert text.splitlines()[1] == '"Alpha","300.0"'

    def test_empty(self):
        assert export_to_csv([]) == ""
        assert export_to_csv([], columns=["id", "email"]) == "id,email"

    def test_format_cell(self):
        assert format_cell(False) == '"false"'
        assert format_cell(0) == '"0"'


class TestListing:

    def test_search_case_insensitive(self):
        assert [row["id"] for row in search_rows(ROWS, "VIP", ["notes"])] == ["2", "3"]

    def test_blank_search_returns_all(self):
        assert search_rows(ROWS, "  ", ["name"]) == ROWS

    def test_sort_descending_nulls_last(self):
        assert [row["id"] for row in sort_rows(ROWS, "-amount", ["amount"])] == ["1", "2", "3"]
        assert [row["id"] for row in sort_rows(ROWS, "amount", ["amount"])] == ["2", "1", "3"]

    def test_sort_unknown_column(self):
        with pytest.raises(ValidationError):
            sort_rows(ROWS, "password", ["name"])

    def test_paginate(self):
        page = paginate(ROWS, page=2, page_size=2)
        assert page["items"] == [ROWS[2]]
        assert page["total"] == 3
        assert page["pages"] == 2

    def test_paginate_empty(self):
        assert paginate([], page=1, page_size=10)["pages"] == 0
