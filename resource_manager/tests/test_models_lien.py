"""
Unit tests for lien models.
"""

import pytest
from unittest.mock import MagicMock

from resource_manager.app.models import Lien, LienInfo
from resource_manager.app.models.wire import LienDTO

LIEN_NAME = "liens/1234abcd"
LIEN_PARENT = "projects/1234"
LIEN_RESTRICTIONS = ["resourcemanager.projects.get", "resourcemanager.projects.delete"]
LIEN_REASON = "Holds production API key"
LIEN_ORIGIN = "compute.googleapis.com"
LIEN_CREATE_TIME = "2014-10-02T15:01:23.045123456Z"


class TestLienInfo:
    """Test cases for LienInfo."""

    @pytest.fixture
    def complete_lien(self):
        """Create a lien with every field set."""
        return (
            LienInfo.new_builder(LIEN_PARENT)
            .set_name(LIEN_NAME)
            .set_create_time(LIEN_CREATE_TIME)
            .set_origin(LIEN_ORIGIN)
            .set_reason(LIEN_REASON)
            .set_restrictions(LIEN_RESTRICTIONS)
            .build()
        )

    def test_builder(self, complete_lien):
        """Test that the builder populates every field."""
        assert complete_lien.name == LIEN_NAME
        assert complete_lien.parent == LIEN_PARENT
        assert complete_lien.restrictions == tuple(LIEN_RESTRICTIONS)
        assert complete_lien.reason == LIEN_REASON
        assert complete_lien.origin == LIEN_ORIGIN
        assert complete_lien.create_time == LIEN_CREATE_TIME

    def test_partial_lien(self):
        """Test that only the parent is required."""
        partial = LienInfo.new_builder(LIEN_PARENT).build()

        assert partial.parent == LIEN_PARENT
        assert partial.name is None
        assert partial.restrictions == ()
        assert partial.create_time is None

    def test_parent_is_required(self):
        """Test that a missing parent is rejected."""
        with pytest.raises(ValueError):
            LienInfo.new_builder(None)
        with pytest.raises(ValueError):
            LienInfo.new_builder(LIEN_PARENT).set_parent(None)

    def test_round_trip(self, complete_lien):
        """Test wire conversion in both directions."""
        partial = LienInfo.new_builder(LIEN_PARENT).build()

        assert LienInfo.from_wire(complete_lien.to_wire()) == complete_lien
        assert LienInfo.from_wire(partial.to_wire()) == partial

    def test_to_wire(self, complete_lien):
        """Test the wire document."""
        payload = complete_lien.to_wire().to_json_dict()

        assert payload == {
            "name": LIEN_NAME,
            "parent": LIEN_PARENT,
            "restrictions": LIEN_RESTRICTIONS,
            "reason": LIEN_REASON,
            "origin": LIEN_ORIGIN,
            "createTime": LIEN_CREATE_TIME,
        }

    def test_restrictions_keep_order_without_duplicates(self):
        """Test that restrictions behave as an ordered set."""
        lien = (
            LienInfo.new_builder(LIEN_PARENT)
            .add_restriction("b")
            .add_restriction("a")
            .add_restriction("b")
            .build()
        )

        assert lien.restrictions == ("b", "a")

    def test_builder_mutation_does_not_leak(self, complete_lien):
        """Test that a built lien is independent of later builder changes."""
        builder = complete_lien.to_builder()
        builder.add_restriction("resourcemanager.projects.update")

        assert complete_lien.restrictions == tuple(LIEN_RESTRICTIONS)
        assert builder.build().restrictions[-1] == "resourcemanager.projects.update"

    def test_from_wire_parses_camel_case(self):
        """Test parsing a service response."""
        dto = LienDTO.model_validate({"name": LIEN_NAME, "parent": LIEN_PARENT, "createTime": LIEN_CREATE_TIME})

        lien = LienInfo.from_wire(dto)

        assert lien.create_time == LIEN_CREATE_TIME
        assert lien.restrictions == ()


class TestLien:
    """Test cases for the Lien wrapper."""

    def test_operations_dispatch_to_client(self):
        """Test that convenience operations route through the given client."""
        client = MagicMock()
        lien = Lien(LienInfo.new_builder(LIEN_PARENT).set_name(LIEN_NAME).build())

        lien.reload(client)
        lien.delete(client)

        client.get_lien.assert_called_once_with(LIEN_NAME)
        client.delete_lien.assert_called_once_with(LIEN_NAME)
        assert lien.parent == LIEN_PARENT
