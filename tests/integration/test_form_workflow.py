"""Integration tests for the form editing workflow.

Tests the full editing lifecycle:
1. Build a form from palette inserts -> ids and keys minted per session
2. Rearrange it with moves and reorders -> tree stays valid
3. Project schema, UI schema and data -> projections agree
4. Export and reload -> identical tree
"""

import json

import pytest

from src.data import initialize_nested_form_data
from src.export import build_form_state, dump_form, load_form
from src.mid import Condition, IdGenerator, is_valid
from src.registry import FieldRegistry
from src.schema import build_json_schema
from src.tree import InsertGuard, add_field, find_by_id, move_field, reorder_relative, update_by_id
from src.uischema import build_ui_schema


@pytest.fixture
def session():
    """Registry, id generator and insert guard for one editing session."""
    return FieldRegistry.with_defaults(), IdGenerator(), InsertGuard()


def _add(tree, session, field_type, **kwargs):
    registry, ids, guard = session
    return add_field(tree, field_type, registry=registry, id_source=ids, guard=guard, **kwargs)


@pytest.mark.integration
def test_build_edit_export_cycle(session):
    """A form assembled in the editor exports and reloads unchanged."""
    tree, group = _add((), session, "group", token="t1")
    tree, name = _add(tree, session, "text", parent_id=group.id, token="t2")
    tree, _ = _add(tree, session, "text", parent_id=group.id, token="t2")
    tree, rows = _add(tree, session, "array", token="t3")
    tree, email = _add(tree, session, "email", parent_id=rows.id, token="t4")
    tree, age = _add(tree, session, "integer", token="t5")

    assert len(find_by_id(tree, group.id).children) == 1
    assert is_valid(tree)

    tree = move_field(tree, age.id, group.id, 0)
    tree = reorder_relative(tree, name.id, email.id)
    assert [c.id for c in find_by_id(tree, rows.id).children] == [email.id, name.id]

    gated = find_by_id(tree, email.id).model_copy(
        update={
            "required": True,
            "visibility": (Condition(depends_on=age.key, operator="gte", value="18"),),
        }
    )
    tree = update_by_id(tree, gated)
    assert is_valid(tree)

    schema = build_json_schema(tree)
    assert list(schema["properties"]) == [age.key, rows.key]
    items = schema["properties"][rows.key]["items"]
    assert items["required"] == [email.key]

    ui = build_ui_schema(tree)
    array_control = ui["elements"][1]
    detail = array_control["options"]["detail"]["elements"]
    assert detail[0]["rule"]["condition"]["schema"]["properties"] == {
        age.key: {"type": "number", "minimum": 18}
    }

    data = initialize_nested_form_data(tree)
    assert data == {age.key: 0, rows.key: [{email.key: "", name.key: ""}]}

    assert load_form(dump_form(tree)) == tree


@pytest.mark.integration
def test_schema_import_then_edit(session):
    """An imported schema can be edited with ids that never collide."""
    registry, _, _ = session
    source = {
        "type": "object",
        "properties": {
            "plan": {"type": "string", "enum": ["free", "pro"]},
            "profile": {
                "type": "object",
                "properties": {"bio": {"type": "string", "maxLength": 500}},
            },
        },
        "required": ["plan"],
    }
    tree = load_form(json.dumps(source), registry, IdGenerator())
    ids = IdGenerator.after(tree)
    tree, extra = add_field(tree, "checkbox", registry=registry, id_source=ids)

    assert extra.id not in {n.id for n in tree[:-1]}
    assert tree[0].type == "radio"
    assert find_by_id(tree, "field_2").type == "object"
    assert is_valid(tree)

    state = build_form_state(tree)
    assert state.schema["required"] == ["plan"]
    assert state.data["profile"] == {"bio": ""}
