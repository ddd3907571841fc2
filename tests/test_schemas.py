"""
Cat Registry API — Schema Tests
================================

What:  Coordinate parsing, bounding boxes, update models and the error
       message aggregation shared by every validation failure.
"""

import uuid

import pytest
from pydantic import ValidationError as PydanticValidationError

from catapi.exceptions import ValidationError
from catapi.schemas.cat import BoundingBox, CatAdminUpdate, CatCreate, CatUpdate, parse_coordinates


class TestCoordinates:

    def test_parse(self):
        assert parse_coordinates("24.94, 60.17", "location") == (24.94, 60.17)

    @pytest.mark.parametrize("value", ["", "1", "1,2,3", "east,north", "nan,1", "181,0", "0,-91"])
    def test_rejects(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_coordinates(value, "topRight")
        assert exc_info.value.message.endswith(": topRight")


class TestBoundingBox:

    def test_normalizes_corners(self):
        box = BoundingBox.from_corners(bottom_left="10,20", top_right="0,5")
        assert (box.min_lng, box.min_lat, box.max_lng, box.max_lat) == (0, 5, 10, 20)

    def test_contains_is_inclusive(self):
        box = BoundingBox.from_corners("0,0", "10,10")
        assert box.contains(0, 0)
        assert box.contains(10, 10)
        assert box.contains(5, 5)
        assert not box.contains(10.01, 5)
        assert not box.contains(20, 20)


class TestCatUpdate:

    def test_store_values_split_location(self):
        values = CatUpdate(cat_name="Tom", location=[1.0, 2.0]).to_store_values()
        assert values == {"cat_name": "Tom", "longitude": 1.0, "latitude": 2.0}

    def test_unset_fields_are_omitted(self):
        assert CatUpdate(weight=3.2).to_store_values() == {"weight": 3.2}

    def test_owner_maps_to_owner_id(self):
        owner = uuid.uuid4()
        assert CatAdminUpdate(owner=owner).to_store_values() == {"owner_id": owner}

    def test_owner_is_ignored_by_owner_update(self):
        update = CatUpdate.model_validate({"owner": "someone", "cat_name": "Tom"})
        assert update.to_store_values() == {"cat_name": "Tom"}

    @pytest.mark.parametrize("location", [[1.0], [200.0, 0.0], [0.0, 95.0]])
    def test_bad_location(self, location):
        with pytest.raises(PydanticValidationError):
            CatUpdate(location=location)

    def test_weight_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            CatUpdate(weight=0)

    @pytest.mark.parametrize("weight", [float("inf"), float("nan"), "inf", "-inf"])
    def test_weight_must_be_finite(self, weight):
        with pytest.raises(PydanticValidationError):
            CatUpdate(weight=weight)
        with pytest.raises(PydanticValidationError):
            CatCreate(cat_name="Tom", weight=weight, birthdate="2020-05-17")


class TestFieldErrorAggregation:

    def test_from_field_errors(self):
        error = ValidationError.from_field_errors(
            [
                {"loc": ("body", "cat_name"), "msg": "Field required"},
                {"loc": ("body", "weight"), "msg": "Input should be greater than 0"},
                {"loc": ("body", "tags", 0), "msg": "Input should be a valid string"},
            ]
        )
        assert error.message == (
            "Field required: cat_name, "
            "Input should be greater than 0: weight, "
            "Input should be a valid string: tags"
        )
        assert error.status_code == 400
