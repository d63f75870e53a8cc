"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Id generator and registry fixtures
- Shared sample field trees
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from dotenv import load_dotenv

if TYPE_CHECKING:
    from src.mid import FieldTree, IdGenerator
    from src.registry import FieldRegistry

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Builder Dependencies
# =============================================================================


@pytest.fixture
def ids() -> IdGenerator:
    """Fresh id generator per test so ids never leak between cases."""
    from src.mid import IdGenerator

    return IdGenerator()


@pytest.fixture
def registry() -> FieldRegistry:
    """Registry populated with the default field types."""
    from src.registry import FieldRegistry

    return FieldRegistry.with_defaults()


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def sample_tree() -> FieldTree:
    """Create a form tree covering every node kind.

    Layout:
        name (text, required)
        vertical-layout
            age (number)
            active (checkbox)
        address (object)
            vertical-layout
                street (text, required)
        contacts (array)
            email (email, required)
            primary (checkbox)

    Returns:
        Tuple of root nodes with ids field_1 .. field_10.
    """
    from src.mid import ArrayField, LayoutField, LeafField, ObjectField

    return (
        LeafField(
            id="field_1",
            type="text",
            key="name",
            label="Name",
            required=True,
            json_schema={"type": "string"},
        ),
        LayoutField(
            id="field_2",
            type="vertical-layout",
            key="layout_2",
            label="Vertical Layout",
            children=(
                LeafField(
                    id="field_3",
                    type="number",
                    key="age",
                    label="Age",
                    json_schema={"type": "number"},
                    parent_id="field_2",
                ),
                LeafField(
                    id="field_4",
                    type="checkbox",
                    key="active",
                    label="Active",
                    json_schema={"type": "boolean"},
                    parent_id="field_2",
                ),
            ),
        ),
        ObjectField(
            id="field_5",
            type="object",
            key="address",
            label="Address",
            json_schema={"type": "object"},
            children=(
                LayoutField(
                    id="field_6",
                    type="vertical-layout",
                    key="layout_6",
                    label="Vertical Layout",
                    parent_id="field_5",
                    children=(
                        LeafField(
                            id="field_7",
                            type="text",
                            key="street",
                            label="Street",
                            required=True,
                            json_schema={"type": "string"},
                            parent_id="field_6",
                        ),
                    ),
                ),
            ),
        ),
        ArrayField(
            id="field_8",
            type="array",
            key="contacts",
            label="Contacts",
            json_schema={"type": "array"},
            children=(
                LeafField(
                    id="field_9",
                    type="email",
                    key="email",
                    label="Email",
                    required=True,
                    json_schema={"type": "string", "format": "email"},
                    parent_id="field_8",
                ),
                LeafField(
                    id="field_10",
                    type="checkbox",
                    key="primary",
                    label="Primary",
                    json_schema={"type": "boolean"},
                    parent_id="field_8",
                ),
            ),
        ),
    )


@pytest.fixture
def flat_tree() -> FieldTree:
    """Create a tree of unambiguous leaf types only.

    Returns:
        Tuple of leaves whose schema survives an import round trip.
    """
    from src.mid import LeafField

    return (
        LeafField(
            id="field_1",
            type="text",
            key="first_name",
            label="First name",
            required=True,
            json_schema={"type": "string"},
        ),
        LeafField(
            id="field_2",
            type="integer",
            key="age",
            label="Age",
            json_schema={"type": "integer", "minimum": 0},
        ),
        LeafField(
            id="field_3",
            type="email",
            key="email",
            label="Email",
            required=True,
            json_schema={"type": "string", "format": "email"},
        ),
        LeafField(
            id="field_4",
            type="checkbox",
            key="subscribed",
            label="Subscribed",
            json_schema={"type": "boolean"},
        ),
        LeafField(
            id="field_5",
            type="date",
            key="birthday",
            label="Birthday",
            json_schema={"type": "string", "format": "date"},
        ),
    )
