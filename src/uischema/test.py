"""Unit tests for UI Schema generation."""

import pytest

from src.mid import ArrayField, Condition, LayoutField, LeafField, ObjectField
from src.uischema import build_ui_schema, build_ui_schema_from_fields, scope_for


@pytest.fixture(autouse=True)
def _default_sort_buttons(monkeypatch):
    monkeypatch.delenv("FORMTREE_ARRAY_SORT_BUTTONS", raising=False)


class TestScopes:
    """Tests for scope path computation."""

    @pytest.mark.unit
    def test_scope_for(self):
        """Scopes append a properties segment."""
        assert scope_for("a") == "#/properties/a"
        assert scope_for("b", "#/properties/a") == "#/properties/a/properties/b"

    @pytest.mark.unit
    def test_sample_tree(self, sample_tree):
        """Layouts are kept, objects nest scopes, arrays get a detail."""
        elements = build_ui_schema_from_fields(sample_tree)
        assert elements == [
            {"type": "Control", "scope": "#/properties/name", "label": "Name"},
            {
                "type": "VerticalLayout",
                "label": "Vertical Layout",
                "elements": [
                    {"type": "Control", "scope": "#/properties/age", "label": "Age"},
                    {"type": "Control", "scope": "#/properties/active", "label": "Active"},
                ],
            },
            {
                "type": "GroupWithIcon",
                "label": "Address",
                "elements": [
                    {
                        "type": "VerticalLayout",
                        "label": "Vertical Layout",
                        "elements": [
                            {
                                "type": "Control",
                                "scope": "#/properties/address/properties/street",
                                "label": "Street",
                            }
                        ],
                    }
                ],
            },
            {
                "type": "Control",
                "scope": "#/properties/contacts",
                "options": {
                    "addable": True,
                    "showSortButtons": True,
                    "detail": {
                        "type": "VerticalLayout",
                        "elements": [
                            {"type": "Control", "scope": "#/properties/email", "label": "Email"},
                            {
                                "type": "Control",
                                "scope": "#/properties/primary",
                                "label": "Primary",
                            },
                        ],
                    },
                },
            },
        ]

    @pytest.mark.unit
    def test_nested_objects(self):
        """Each object level adds one scope segment."""
        tree = (
            ObjectField(
                id="field_1",
                type="object",
                key="a",
                children=(
                    ObjectField(
                        id="field_2",
                        type="object",
                        key="b",
                        children=(LeafField(id="field_3", type="text", key="c"),),
                    ),
                ),
            ),
        )
        inner = build_ui_schema_from_fields(tree)[0]["elements"][0]["elements"][0]
        assert inner["scope"] == "#/properties/a/properties/b/properties/c"

    @pytest.mark.unit
    def test_array_inside_object(self):
        """Array controls use the object scope; their items restart at #."""
        tree = (
            ObjectField(
                id="field_1",
                type="object",
                key="team",
                children=(
                    ArrayField(
                        id="field_2",
                        type="array",
                        key="members",
                        children=(LeafField(id="field_3", type="text", key="name"),),
                    ),
                ),
            ),
        )
        array = build_ui_schema_from_fields(tree)[0]["elements"][0]
        assert array["scope"] == "#/properties/team/properties/members"
        detail = array["options"]["detail"]["elements"]
        assert detail[0]["scope"] == "#/properties/name"


class TestElements:
    """Tests for element details."""

    @pytest.mark.unit
    def test_hidden_nodes_skipped(self):
        """uiOptions.hidden removes the node and its subtree."""
        tree = (
            LeafField(id="field_1", type="text", key="a", ui_options={"hidden": True}),
            LayoutField(
                id="field_2",
                type="group",
                ui_options={"hidden": True},
                children=(LeafField(id="field_3", type="text", key="b"),),
            ),
            LeafField(id="field_4", type="text", key="c"),
        )
        elements = build_ui_schema_from_fields(tree)
        assert [e["scope"] for e in elements] == ["#/properties/c"]

    @pytest.mark.unit
    def test_group_icon_and_options(self):
        """Groups carry their icon and options."""
        tree = (
            LayoutField(
                id="field_1",
                type="group",
                label="Contact",
                icon="Phone",
                ui_options={"collapsible": True},
            ),
        )
        group = build_ui_schema_from_fields(tree)[0]
        assert group == {
            "icon": "IconPhone",
            "type": "GroupWithIcon",
            "label": "Contact",
            "elements": [],
            "options": {"collapsible": True},
        }

    @pytest.mark.unit
    def test_horizontal_layout(self):
        """Horizontal layouts map to HorizontalLayout."""
        tree = (LayoutField(id="field_1", type="horizontal-layout", label="Row"),)
        assert build_ui_schema_from_fields(tree)[0]["type"] == "HorizontalLayout"

    @pytest.mark.unit
    def test_leaf_options(self):
        """Leaf options are copied into the control."""
        tree = (
            LeafField(id="field_1", type="radio", key="size", label="Size", ui_options={"format": "radio"}),
        )
        assert build_ui_schema_from_fields(tree)[0]["options"] == {"format": "radio"}

    @pytest.mark.unit
    def test_array_options(self):
        """Array options keep user values but force sort buttons."""
        tree = (
            ArrayField(
                id="field_1",
                type="array",
                key="rows",
                ui_options={"addable": False, "showSortButtons": False, "elementLabelProp": "name"},
            ),
        )
        options = build_ui_schema_from_fields(tree)[0]["options"]
        assert options == {"addable": False, "showSortButtons": True, "elementLabelProp": "name"}

    @pytest.mark.unit
    def test_sort_buttons_configurable(self, monkeypatch):
        """Sort buttons follow the environment setting."""
        monkeypatch.setenv("FORMTREE_ARRAY_SORT_BUTTONS", "false")
        tree = (ArrayField(id="field_1", type="array", key="rows"),)
        assert build_ui_schema_from_fields(tree)[0]["options"]["showSortButtons"] is False
        assert build_ui_schema_from_fields(tree, sort_buttons=True)[0]["options"][
            "showSortButtons"
        ] is True

    @pytest.mark.unit
    def test_password_confirmation_shares_rule(self):
        """A confirmed password expands into two controls with one rule."""
        tree = (
            LeafField(
                id="field_1",
                type="password",
                key="pw",
                label="Password",
                require_confirmation=True,
                visibility=(Condition(depends_on="signup", operator="equals", value="true"),),
            ),
        )
        first, second = build_ui_schema_from_fields(tree)
        assert second["scope"] == "#/properties/pw_confirm"
        assert second["label"] == "Confirm Password"
        assert first["rule"] == second["rule"]
        assert first["rule"]["condition"]["schema"] == {
            "properties": {"signup": {"const": True}},
            "required": ["signup"],
        }


class TestRules:
    """Tests for rule attachment."""

    @pytest.mark.unit
    def test_rule_on_leaf(self):
        """Leaves with visibility rows get a rule."""
        tree = (
            LeafField(
                id="field_1",
                type="text",
                key="reason",
                effect="HIDE",
                visibility=(Condition(depends_on="age", operator="gte", value="18"),),
            ),
        )
        rule = build_ui_schema_from_fields(tree)[0]["rule"]
        assert rule["effect"] == "HIDE"
        assert rule["condition"]["failWhenUndefined"] is True

    @pytest.mark.unit
    def test_rule_on_layout(self):
        """Layouts with visibility rows get a rule too."""
        tree = (
            LayoutField(
                id="field_1",
                type="group",
                visibility=(Condition(depends_on="a", operator="equals", value="x"),),
            ),
        )
        assert "rule" in build_ui_schema_from_fields(tree)[0]

    @pytest.mark.unit
    def test_unusable_rows_add_no_rule(self):
        """Rows without a dependency produce no rule."""
        tree = (
            LeafField(
                id="field_1",
                type="text",
                key="a",
                visibility=(Condition(operator="equals", value="x"),),
            ),
        )
        assert "rule" not in build_ui_schema_from_fields(tree)[0]


class TestBuildUiSchema:
    """Tests for the root document."""

    @pytest.mark.unit
    def test_root(self, flat_tree):
        """The root is a vertical layout of the top-level elements."""
        ui = build_ui_schema(flat_tree)
        assert ui["type"] == "VerticalLayout"
        assert len(ui["elements"]) == len(flat_tree)
