import pytest

from liontype.schema import (
    INT,
    STRING,
    ClassDef,
    ClassRef,
    EnumDef,
    EnumRef,
    FieldDef,
    ListType,
    Schema,
    UnionType,
)

pytest_plugins = ("anyio",)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def resume_schema() -> Schema:
    """Static schema shared by decoder, stream and runtime tests."""
    return Schema.from_defs(
        classes=[
            ClassDef(
                "Resume",
                (
                    FieldDef("name", STRING),
                    FieldDef("job_title", STRING),
                    FieldDef("company", STRING),
                ),
            ),
            ClassDef(
                "DynamicEmployee",
                (FieldDef("employee_id", STRING),),
                is_dynamic=True,
            ),
            ClassDef("TypeA", (FieldDef("value", STRING),)),
            ClassDef("TypeB", (FieldDef("value", STRING),)),
            ClassDef(
                "Team",
                (
                    FieldDef("lead", ClassRef("Resume")),
                    FieldDef("members", ListType(ClassRef("Resume"))),
                    FieldDef("size", INT.optional()),
                    FieldDef("color", EnumRef("FavoriteColor").optional()),
                ),
            ),
        ],
        enums=[
            EnumDef("FavoriteColor", ("RED", "GREEN", "BLUE")),
            EnumDef("Priority", ("LOW", "HIGH"), is_dynamic=True),
        ],
    )


@pytest.fixture
def ab_union() -> UnionType:
    return UnionType((ClassRef("TypeA"), ClassRef("TypeB")))
