from road_importer.network.validate import plausibility_warnings, validate_rows
from road_importer.records import RawRow


def _row(**kw) -> RawRow:
    base = dict(line=1, edge_id=10, source_node=1, target_node=2, edge_cost=5.0, edge_reverse_cost=4.5, edge_mode="car", edge_distance_km=1.2)
    base.update(kw)
    return RawRow(**base)


def test_rows_with_parse_error_are_dropped():
    good = _row()
    bad = _row(error="incorrect field", error_column=3)
    assert list(validate_rows([bad, good])) == [good]


def test_warnings_do_not_suppress_rows(log_messages):
    row = _row(edge_cost=0.0, edge_reverse_cost=-1.0, edge_distance_km=0.0)
    assert list(validate_rows([row])) == [row]
    assert any("No distance" in m for m in log_messages)
    assert any("No cost" in m for m in log_messages)
    assert any("No reverse Edge" in m for m in log_messages)


def test_plausibility_warnings_order():
    assert plausibility_warnings(_row()) == []
    assert plausibility_warnings(_row(edge_cost=-1, edge_reverse_cost=0, edge_distance_km=0)) == [
        "No distance",
        "No cost",
        "No reverse Edge",
    ]
