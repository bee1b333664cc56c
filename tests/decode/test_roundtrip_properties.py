"""Property-based tests for encode/decode laws using Hypothesis."""

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from liontype.decode import decode, decode_partial, encode
from liontype.ln import Unset
from liontype.schema import (
    BOOL,
    FLOAT,
    INT,
    STRING,
    ClassRef,
    EnumRef,
    MapType,
    UnionType,
)
from liontype.values import Checked, EnumValue, Pending, Record, strip

# =============================================================================
# Strategies
# =============================================================================

texts = st.text(max_size=20)

resumes = st.builds(
    lambda n, j, c: Record("Resume", {"name": n, "job_title": j, "company": c}),
    texts,
    texts,
    texts,
)

colors = st.sampled_from(["RED", "GREEN", "BLUE"]).map(
    lambda v: EnumValue("FavoriteColor", v)
)

teams = st.builds(
    lambda lead, members, size, color: Record(
        "Team", {"lead": lead, "members": members, "size": size, "color": color}
    ),
    resumes,
    st.lists(resumes, max_size=4),
    st.none() | st.integers(min_value=0, max_value=10_000),
    st.none() | colors,
)


@st.composite
def pending_resume(draw):
    """A resume payload with some fields cut off and some still streaming."""
    raw = {}
    for key in ("name", "job_title", "company"):
        state = draw(st.sampled_from(["absent", "pending", "complete"]))
        if state == "absent":
            continue
        text = draw(texts)
        raw[key] = Pending(text) if state == "pending" else text
    return Pending(raw)


# =============================================================================
# Laws
# =============================================================================

# resume_schema is never mutated here
shared_schema = settings(
    suppress_health_check=[HealthCheck.function_scoped_fixture]
)


@pytest.mark.hypothesis
class TestRoundTrip:
    @shared_schema
    @given(teams)
    def test_class_round_trip(self, resume_schema, team):
        target = ClassRef("Team")
        assert decode(encode(team, target, resume_schema), target, resume_schema) == team

    @shared_schema
    @given(st.dictionaries(colors, st.integers()))
    def test_enum_keyed_map_round_trip(self, resume_schema, value):
        target = MapType(EnumRef("FavoriteColor"), INT)
        assert decode(encode(value, target, resume_schema), target, resume_schema) == value

    @shared_schema
    @given(st.integers() | st.booleans() | texts | st.floats(allow_nan=False))
    def test_union_round_trip_keeps_kind(self, resume_schema, value):
        target = UnionType((INT, FLOAT, BOOL, STRING))
        result = decode(encode(value, target, resume_schema), target, resume_schema)
        assert result == value
        assert type(result) is type(value)


@pytest.mark.hypothesis
class TestCheckedTags:
    @shared_schema
    @given(st.permutations([ClassRef("TypeA"), ClassRef("TypeB")]), texts)
    def test_tag_wins_regardless_of_order(self, resume_schema, variants, text):
        target = UnionType(tuple(variants))
        raw = Checked({"value": text}, "TypeB")
        assert decode(raw, target, resume_schema).class_name == "TypeB"
        assert decode_partial(raw, target, resume_schema).class_name == "TypeB"


@pytest.mark.hypothesis
class TestPartialThenFull:
    @shared_schema
    @given(pending_resume())
    def test_partial_never_contradicts_full(self, resume_schema, raw):
        partial = decode_partial(raw, ClassRef("Resume"), resume_schema)
        plain, _ = strip(raw)
        for key, value in partial.fields.items():
            if key in plain:
                assert value == plain[key]
            else:
                assert value is Unset

    @shared_schema
    @given(resumes)
    def test_complete_payload_decodes_the_same(self, resume_schema, resume):
        raw = dict(resume.fields)
        target = ClassRef("Resume")
        assert decode_partial(raw, target, resume_schema) == decode(
            raw, target, resume_schema
        )

    @shared_schema
    @given(teams)
    def test_finished_map_without_optional_fields(self, resume_schema, team):
        target = ClassRef("Team")
        raw = {
            k: v
            for k, v in encode(team, target, resume_schema).items()
            if v is not None
        }
        assert decode_partial(raw, target, resume_schema) == decode(
            raw, target, resume_schema
        )

    @shared_schema
    @given(
        st.dictionaries(
            st.text(min_size=1, max_size=8).filter(lambda k: k != "employee_id"),
            texts,
            max_size=4,
        ),
        st.none() | texts,
    )
    def test_finished_dynamic_map(self, resume_schema, extras, employee_id):
        target = ClassRef("DynamicEmployee")
        raw = dict(extras)
        if employee_id is not None:
            raw["employee_id"] = employee_id
        assert decode_partial(raw, target, resume_schema) == decode(
            raw, target, resume_schema
        )
