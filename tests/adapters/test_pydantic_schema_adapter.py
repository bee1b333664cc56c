"""Tests for the pydantic projection of schema classes."""

import pytest
from pydantic import BaseModel, ValidationError

from liontype.adapters import PydanticSchemaAdapter
from liontype.decode import decode, encode
from liontype.schema import ClassRef
from liontype.values import DynamicRecord, EnumValue, Record

LEAD = {"name": "Ada", "job_title": "CTO", "company": "Acme"}


class TestCreateModel:
    def test_fields(self, resume_schema):
        model = PydanticSchemaAdapter.create_model("Resume", resume_schema)
        assert issubclass(model, BaseModel)
        assert set(model.model_fields) == {"name", "job_title", "company"}
        assert all(f.is_required() for f in model.model_fields.values())

    def test_cached(self, resume_schema):
        a = PydanticSchemaAdapter.create_model("Team", resume_schema)
        b = PydanticSchemaAdapter.create_model("Team", resume_schema)
        assert a is b

    def test_nested_and_enum_fields(self, resume_schema):
        model = PydanticSchemaAdapter.create_model("Team", resume_schema)
        team = model.model_validate(
            {"lead": LEAD, "members": [LEAD], "color": "RED"}
        )
        assert team.lead.name == "Ada"
        assert team.size is None
        assert team.model_dump()["color"] == "RED"

    def test_validation(self, resume_schema):
        model = PydanticSchemaAdapter.create_model("Team", resume_schema)
        with pytest.raises(ValidationError):
            model.model_validate({"lead": LEAD, "members": [], "color": "YELLOW"})


class TestConversion:
    def test_to_model(self, resume_schema):
        record = Record(
            "Team",
            {
                "lead": Record("Resume", LEAD),
                "members": [],
                "size": 3,
                "color": EnumValue("FavoriteColor", "BLUE"),
            },
        )
        model = PydanticSchemaAdapter.to_model(record, resume_schema)
        assert model.size == 3
        assert model.color == "BLUE"

    def test_dynamic_extras_allowed(self, resume_schema):
        record = DynamicRecord(
            "DynamicEmployee", {"employee_id": "E1", "team": "Core"}, {"team"}
        )
        model = PydanticSchemaAdapter.to_model(record, resume_schema)
        assert model.model_dump() == {"employee_id": "E1", "team": "Core"}

    def test_model_as_argument(self, resume_schema):
        model = PydanticSchemaAdapter.to_model(Record("Resume", LEAD), resume_schema)
        raw = encode(PydanticSchemaAdapter.from_model(model), ClassRef("Resume"), resume_schema)
        assert decode(raw, ClassRef("Resume"), resume_schema) == Record("Resume", LEAD)
