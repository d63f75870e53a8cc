"""Tests for output module."""

import pytest

from src.mid import Condition, LayoutField, LeafField
from src.output import format_field_tree


class TestFormatFieldTree:
    """Tests for format_field_tree function."""

    @pytest.mark.unit
    def test_single_node(self):
        """Test formatting single node."""
        node = LeafField(id="field_1", type="text", key="name", label="Name")
        assert format_field_tree((node,)) == "Name [text, name]"

    @pytest.mark.unit
    def test_empty_tree(self):
        """An empty tree renders as an empty string."""
        assert format_field_tree(()) == ""

    @pytest.mark.unit
    def test_sample_tree(self, sample_tree):
        """Test formatting nested tree."""
        assert format_field_tree(sample_tree).splitlines() == [
            "Name [text, name, required]",
            "Vertical Layout [vertical-layout]",
            "├── Age [number, age]",
            "└── Active [checkbox, active]",
            "Address [object, address]",
            "└── Vertical Layout [vertical-layout]",
            "    └── Street [text, street, required]",
            "Contacts [array, contacts]",
            "├── Email [email, email, required]",
            "└── Primary [checkbox, primary]",
        ]

    @pytest.mark.unit
    def test_markers(self):
        """Rules, confirmation and hidden nodes are flagged."""
        tree = (
            LayoutField(
                id="field_1",
                type="group",
                label="Account",
                ui_options={"hidden": True},
                children=(
                    LeafField(
                        id="field_2",
                        type="password",
                        key="pw",
                        require_confirmation=True,
                        visibility=(Condition(depends_on="a", operator="equals"),),
                    ),
                ),
            ),
        )
        assert format_field_tree(tree).splitlines() == [
            "Account [group, hidden]",
            "└── pw [password, pw, confirm, rule]",
        ]
