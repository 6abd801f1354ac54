"""
Storefront API — Request Validation Rule Engine
================================================

What:  Declarative rule chains evaluated against request params and bodies.
Why:   Route modules declare their input rules next to the route, and every
       rule carries the human-readable message returned to the client.
How:   A `FieldChain` is an ordered list of steps for one field: checks
       (predicate, message) and sanitizers such as trim() that rewrite the
       value for the steps after them. Chains stop at their first failing
       check; a `RuleSet` evaluates all its chains and collects a
       {field: message} mapping.
Who:   Route modules build rule sets; `validate_request()` turns a rule set
       into a FastAPI dependency that raises ValidationError (HTTP 400).

Example:
    create_rules = RuleSet(
        body("name")
            .trim()
            .exists(check_falsy=True, message="Category name is required")
            .is_string(message="Category name must be a string")
            .is_length(min=2, max=100, message="Category name must be between 2 and 100 characters"),
        body("type").optional().is_in(["product", "blog"], message="..."),
    )
"""

import json
import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, MutableMapping, Optional, Tuple, Type

from bson import ObjectId
from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from storefront.exceptions import ValidationError

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]
Sanitizer = Callable[[Any], Any]

_MISSING = object()

BODY = "body"
PARAM = "param"


def is_mongo_id(value: Any) -> bool:
    """True for 24-character hex strings (the ObjectId text form)."""
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class FieldChain:
    """Ordered rule chain for a single field in one request location."""

    def __init__(self, location: str, field: str):
        self.location = location
        self.field = field
        # (predicate, message) checks and (sanitizer, None) steps, in chain order
        self.rules: List[Tuple[Callable[[Any], Any], Optional[str]]] = []
        self._optional = False
        self._nullable = False

    # ── Chain modifiers ───────────────────────────────────────────────────

    def optional(self, nullable: bool = False) -> "FieldChain":
        """Skip the chain when the field is absent (or null, if nullable)."""
        self._optional = True
        self._nullable = nullable
        return self

    def custom(self, predicate: Predicate, message: str) -> "FieldChain":
        self.rules.append((predicate, message))
        return self

    # ── Sanitizers ────────────────────────────────────────────────────────
    # Rewrite the value for every later step and for the controller.

    def sanitize(self, sanitizer: Sanitizer) -> "FieldChain":
        self.rules.append((sanitizer, None))
        return self

    def trim(self) -> "FieldChain":
        """Strip surrounding whitespace from strings; other types pass through."""
        return self.sanitize(lambda v: v.strip() if isinstance(v, str) else v)

    def to_lower(self) -> "FieldChain":
        return self.sanitize(lambda v: v.lower() if isinstance(v, str) else v)

    # ── Validators ────────────────────────────────────────────────────────

    def exists(self, check_falsy: bool = False, message: str = "Field is required") -> "FieldChain":
        if check_falsy:
            return self.custom(lambda v: v is not _MISSING and bool(v), message)
        return self.custom(lambda v: v is not _MISSING, message)

    def is_string(self, message: str = "Must be a string") -> "FieldChain":
        return self.custom(lambda v: isinstance(v, str), message)

    def is_boolean(self, message: str = "Must be a boolean value") -> "FieldChain":
        return self.custom(lambda v: isinstance(v, bool), message)

    def is_length(
        self,
        min: Optional[int] = None,
        max: Optional[int] = None,
        message: str = "Invalid length",
    ) -> "FieldChain":
        def check(v: Any) -> bool:
            if not isinstance(v, (str, list)):
                return False
            if min is not None and len(v) < min:
                return False
            if max is not None and len(v) > max:
                return False
            return True
        return self.custom(check, message)

    def is_in(self, values: Iterable[Any], message: str = "Invalid value") -> "FieldChain":
        allowed = tuple(values)
        return self.custom(lambda v: v in allowed, message)

    def is_mongo_id(self, message: str = "Invalid ID") -> "FieldChain":
        return self.custom(is_mongo_id, message)

    def is_float(
        self,
        min: Optional[float] = None,
        max: Optional[float] = None,
        message: str = "Must be a number",
    ) -> "FieldChain":
        def check(v: Any) -> bool:
            if not _is_number(v):
                return False
            if min is not None and v < min:
                return False
            if max is not None and v > max:
                return False
            return True
        return self.custom(check, message)

    def is_int(
        self,
        min: Optional[int] = None,
        max: Optional[int] = None,
        message: str = "Must be an integer",
    ) -> "FieldChain":
        def check(v: Any) -> bool:
            return isinstance(v, int) and not isinstance(v, bool) and (
                (min is None or v >= min) and (max is None or v <= max)
            )
        return self.custom(check, message)

    def matches(self, pattern: str, flags: int = 0, message: str = "Invalid format") -> "FieldChain":
        compiled = re.compile(pattern, flags)
        return self.custom(lambda v: isinstance(v, str) and bool(compiled.search(v)), message)

    def is_array(self, min_length: int = 0, message: str = "Must be an array") -> "FieldChain":
        return self.custom(lambda v: isinstance(v, list) and len(v) >= min_length, message)

    # ── Evaluation ────────────────────────────────────────────────────────

    def run(self, source: MutableMapping[str, Any]) -> Optional[str]:
        """
        Return the first failing rule's message, or None when the field passes.

        Sanitized values are written back into `source`.
        """
        value = source.get(self.field, _MISSING)
        if self._optional:
            if value is _MISSING or (self._nullable and value is None):
                return None
        for predicate, message in self.rules:
            if message is None:
                if value is not _MISSING:
                    value = predicate(value)
                    source[self.field] = value
                continue
            try:
                passed = predicate(value)
            except (TypeError, ValueError):
                passed = False
            if not passed:
                return message
        return None


def body(field: str) -> FieldChain:
    return FieldChain(BODY, field)


def param(field: str) -> FieldChain:
    return FieldChain(PARAM, field)


class RuleSet:
    """An ordered collection of field chains; later sets can extend earlier ones."""

    def __init__(self, *chains: FieldChain):
        self.chains: List[FieldChain] = list(chains)

    def __add__(self, other: "RuleSet") -> "RuleSet":
        return RuleSet(*self.chains, *other.chains)

    @property
    def body_fields(self) -> List[str]:
        return [c.field for c in self.chains if c.location == BODY]

    def apply(
        self,
        payload: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[Dict[str, str], Dict[str, Any]]:
        """
        Run every chain against copies of the inputs.

        Returns ({field: message} for the chains that failed, sanitized body).
        """
        sources: Dict[str, Dict[str, Any]] = {BODY: dict(payload or {}), PARAM: dict(params or {})}
        errors: Dict[str, str] = {}
        for chain in self.chains:
            if chain.field in errors:
                continue
            message = chain.run(sources[chain.location])
            if message is not None:
                errors[chain.field] = message
        return errors, sources[BODY]

    def evaluate(
        self,
        payload: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, str]:
        """Run every chain; return {field: message} for the ones that failed."""
        return self.apply(payload, params)[0]


async def _read_json_body(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ValidationError(message="Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError(message="Request body must be a JSON object")
    return data


def validate_request(rules: RuleSet) -> Callable:
    """
    Build a FastAPI dependency that checks a request against `rules`.

    Returns the sanitized JSON body restricted to the fields the rule set
    declares, so controllers never see undeclared keys or unsanitized
    values. Raises ValidationError with the collected field messages when
    any chain fails.
    """
    declared = rules.body_fields

    async def dependency(request: Request) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if declared:
            payload = await _read_json_body(request)
        errors, payload = rules.apply(payload, request.path_params)
        if errors:
            logger.debug("Validation failed for %s %s: %s", request.method, request.url.path, errors)
            raise ValidationError(errors=errors)
        return {key: payload[key] for key in declared if key in payload}

    return dependency


# ══════════════════════════════════════════════════════════════════════════
# Pydantic-backed bodies
# ══════════════════════════════════════════════════════════════════════════

_LOCATION_PREFIXES = ("body", "query", "path", "header")


def errors_from_pydantic(exc: Any) -> Dict[str, str]:
    """
    Flatten pydantic errors to {"variants.0.price": "message"}, first per field.

    Accepts pydantic's ValidationError and FastAPI's RequestValidationError;
    the latter's leading location part ("query", "path", ...) is dropped.
    """
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = list(error.get("loc", ()))
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        loc = [str(part) for part in loc]
        field = ".".join(loc) or "body"
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


def validate_model(model: Type[BaseModel]) -> Callable:
    """
    Build a FastAPI dependency that parses the JSON body into `model`.

    Unlike a plain body parameter, this runs in dependency order (before the
    role gate) and reports failures through the same ValidationError shape as
    the rule sets.
    """

    async def dependency(request: Request) -> BaseModel:
        payload = await _read_json_body(request)
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            errors = errors_from_pydantic(exc)
            logger.debug("Validation failed for %s %s: %s", request.method, request.url.path, errors)
            raise ValidationError(errors=errors)

    return dependency
