"""
Storefront API — Rule Engine Tests
===================================

What we test:
    ✅ Chains stop at the first failing rule and report its message
    ✅ optional() skips absent fields; optional(nullable=True) also skips null
    ✅ Sanitizers (trim, to_lower) rewrite the value for later rules and the caller
    ✅ RuleSet collects one message per field across params and body
    ✅ Pydantic errors flatten to dotted field keys
"""

from typing import List

import pytest
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from storefront.validation import RuleSet, body, errors_from_pydantic, is_mongo_id, param

VALID_ID = "507f1f77bcf86cd799439011"


class TestIsMongoId:

    @pytest.mark.parametrize("value", [VALID_ID, VALID_ID.upper()])
    def test_valid(self, value):
        assert is_mongo_id(value)

    @pytest.mark.parametrize("value", ["", "123", "z" * 24, VALID_ID + "0", None, 42])
    def test_invalid(self, value):
        assert not is_mongo_id(value)


class TestFieldChain:

    def test_first_failure_wins(self):
        chain = (
            body("name")
            .exists(check_falsy=True, message="required")
            .is_string(message="not a string")
            .is_length(min=2, message="too short")
        )
        assert chain.run({}) == "required"
        assert chain.run({"name": ""}) == "required"
        assert chain.run({"name": 5}) == "not a string"
        assert chain.run({"name": "a"}) == "too short"
        assert chain.run({"name": "ok"}) is None

    def test_optional_skips_absent_but_not_null(self):
        chain = body("description").optional().is_string(message="not a string")
        assert chain.run({}) is None
        assert chain.run({"description": None}) == "not a string"

    def test_nullable_optional_skips_null(self):
        chain = body("parent").optional(nullable=True).is_mongo_id(message="bad id")
        assert chain.run({"parent": None}) is None
        assert chain.run({"parent": "nope"}) == "bad id"
        assert chain.run({"parent": VALID_ID}) is None

    def test_is_boolean_rejects_truthy_strings(self):
        chain = body("isActive").optional().is_boolean(message="bool")
        assert chain.run({"isActive": "true"}) == "bool"
        assert chain.run({"isActive": False}) is None

    def test_is_float_bounds(self):
        chain = body("discount").is_float(min=0, max=100, message="range")
        assert chain.run({"discount": 150}) == "range"
        assert chain.run({"discount": True}) == "range"
        assert chain.run({"discount": 12.5}) is None

    def test_custom_predicate_errors_count_as_failure(self):
        chain = body("name").custom(lambda v: len(v) > 0, message="blank")
        assert chain.run({"name": 3}) == "blank"

    def test_trim_runs_before_checks(self):
        chain = (
            body("name")
            .trim()
            .exists(check_falsy=True, message="required")
            .is_length(min=2, message="too short")
        )
        assert chain.run({"name": "   "}) == "required"
        assert chain.run({"name": " a "}) == "too short"

        source = {"name": "  Snacks "}
        assert chain.run(source) is None
        assert source["name"] == "Snacks"

    def test_trim_leaves_non_strings_for_type_checks(self):
        chain = body("name").trim().is_string(message="not a string")
        assert chain.run({"name": 12}) == "not a string"

    def test_sanitizers_skip_absent_fields(self):
        source = {}
        assert body("name").optional().trim().run(source) is None
        assert source == {}

    def test_to_lower(self):
        source = {"parent": VALID_ID.upper()}
        chain = body("parent").optional(nullable=True).to_lower().is_mongo_id(message="bad id")
        assert chain.run(source) is None
        assert source["parent"] == VALID_ID


class TestRuleSet:

    def test_collects_one_message_per_field(self):
        rules = RuleSet(
            param("id").is_mongo_id(message="Invalid ID"),
            body("name").exists(message="Name is required"),
            body("type").is_in(("product", "blog"), message="Bad type"),
        )
        errors = rules.evaluate({"type": "video"}, {"id": "123"})
        assert errors == {
            "id": "Invalid ID",
            "name": "Name is required",
            "type": "Bad type",
        }

    def test_passes_clean_input(self):
        rules = RuleSet(body("name").exists(message="Name is required"))
        assert rules.evaluate({"name": "Snacks"}) == {}

    def test_apply_returns_sanitized_body_without_touching_input(self):
        rules = RuleSet(body("name").trim().exists(check_falsy=True, message="Name is required"))
        payload = {"name": "  Snacks  "}

        errors, sanitized = rules.apply(payload)

        assert errors == {}
        assert sanitized == {"name": "Snacks"}
        assert payload == {"name": "  Snacks  "}

    def test_addition_keeps_order_and_body_fields(self):
        combined = RuleSet(param("id").is_mongo_id()) + RuleSet(body("name").exists())
        assert [c.field for c in combined.chains] == ["id", "name"]
        assert combined.body_fields == ["name"]


class _Sample(BaseModel):
    title: str = Field(min_length=3)
    prices: List[float]


class TestErrorsFromPydantic:

    def test_dotted_keys(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            _Sample.model_validate({"title": "ab", "prices": [1, "x"]})
        errors = errors_from_pydantic(exc_info.value)
        assert set(errors) == {"title", "prices.1"}
