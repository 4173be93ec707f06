from __future__ import annotations

from core.table.models import TableRow
from core.table.parser import infer_columns, parse_table, serialize_table


def test_oil_system_table_drops_placeholder_row() -> None:
    rows = parse_table(
        "Number,Part No.,Description,Qty\n1,P1,Oil Pump,2\n2,,,", drop_placeholder_rows=True
    )

    assert len(rows) == 1
    row = rows[0]
    assert row.id == 1
    assert row.number == "1"
    assert row.part_number == "P1"
    assert row.description == "Oil Pump"
    assert row.name == "2"


def test_number_only_rows_are_kept_by_default() -> None:
    rows = parse_table("Number,Part No.,Description,Qty\n1,P1,Oil Pump,2\n2,,,")

    assert [(row.id, row.number) for row in rows] == [(1, "1"), (2, "2")]
    assert rows[1] == TableRow(id=2, number="2")


def test_number_with_blank_description_is_kept() -> None:
    rows = parse_table("Number,Description\n7,\n8,Gear\n")

    assert [row.number for row in rows] == ["7", "8"]
    assert rows[0].description == ""
    assert rows[1].description == "Gear"


def test_header_synonyms_map_to_roles() -> None:
    roles = infer_columns(["S.No.", "Part  Number", "Item Description", "Quantity", "Name"])

    assert roles.number == 0
    assert roles.part_number == 1
    assert roles.description == 2
    assert roles.quantity == 3
    assert roles.name == 4


def test_roles_come_from_headers_not_positions() -> None:
    rows = parse_table("Description,Qty,Part No,No.\nBobbin case,1,BC-7,4\n")

    assert [(row.number, row.part_number, row.description, row.name) for row in rows] == [
        ("4", "BC-7", "Bobbin case", "1")
    ]


def test_quoted_fields_may_contain_delimiter_and_newlines() -> None:
    text = 'Number,Part No.,Description,Qty\n1,"A,1","Screw, set\nlong",3\n'

    rows = parse_table(text)

    assert rows[0].part_number == "A,1"
    assert rows[0].description == "Screw, set\nlong"


def test_blank_and_numberless_rows_do_not_consume_ids() -> None:
    text = "Number,Part No.,Description,Qty\n\n , , , \n1,P1,Pump,1\n,P9,Orphan,1\n2,P2,Gear,4\n"

    rows = parse_table(text)

    assert [row.id for row in rows] == [1, 2]
    assert [row.number for row in rows] == ["1", "2"]


def test_values_are_trimmed_and_kept_as_strings() -> None:
    rows = parse_table("Number,Part No.,Description,Qty\n 01 , 0042 ,  Pump  , 2.0 \n")

    assert rows[0].number == "01"
    assert rows[0].part_number == "0042"
    assert rows[0].name == "2.0"


def test_quantity_preferred_over_name_by_default() -> None:
    text = "Number,Name,Qty\n1,Hook,2\n"

    assert parse_table(text)[0].name == "2"
    assert parse_table(text, name_policy="name")[0].name == "Hook"


def test_name_column_used_when_quantity_missing() -> None:
    rows = parse_table("Number,Name\n1,Needle bar\n")

    assert rows[0].name == "Needle bar"


def test_lowercase_field_names_work_as_headers() -> None:
    rows = parse_table("ref,number,partNumber,description,name\n1,7,X-1,Pin,Hook\n")

    assert rows[0].number == "7"
    assert rows[0].part_number == "X-1"
    assert rows[0].description == "Pin"
    assert rows[0].name == "Hook"


def test_missing_header_or_empty_input_yields_no_rows() -> None:
    assert parse_table("") == []
    assert parse_table("\n\n") == []


def test_custom_delimiter_and_bom() -> None:
    rows = parse_table("\ufeffNumber;Part No.;Description;Qty\n1;P1;Pump;2\n", delimiter=";")

    assert rows[0].number == "1"
    assert rows[0].description == "Pump"


def test_serialized_table_parses_back_to_same_rows() -> None:
    rows = parse_table('Number,Part No.,Description,Qty\n1,P1,"Pump, oil",2\n3,P3,Gear,1\n')

    assert parse_table(serialize_table(rows)) == rows


def test_number_only_row_survives_serialize_and_parse() -> None:
    rows = [
        TableRow(id=1, number="1", part_number="P1", description="Pump", name="2"),
        TableRow(id=2, number="5"),
    ]

    assert parse_table(serialize_table(rows)) == rows
