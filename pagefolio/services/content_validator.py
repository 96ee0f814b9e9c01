"""
Content Validator - turns an uploaded YAML document into a typed content record.

Validation is all-or-nothing per document but exhaustive within one pass:
either a record comes back, or every field issue found in the document does.
"""

import enum
import typing
from typing import Any, List, Optional, Type, Union

import yaml
from yaml.constructor import ConstructorError
from pydantic import BaseModel, ValidationError

from ..errors import InvalidContentError
from ..schemas import FieldIssue, ProfileContent, ProjectContent, format_field_path


class ContentKind(str, enum.Enum):
    PROFILE = "profile"
    PROJECT = "project"


CONTENT_MODELS = {
    ContentKind.PROFILE: ProfileContent,
    ContentKind.PROJECT: ProjectContent,
}

ContentRecord = Union[ProfileContent, ProjectContent]

INVALID_DATA_MESSAGE = "The provided data is invalid."


class _UniqueKeySafeLoader(yaml.SafeLoader):
    """SafeLoader that refuses duplicated mapping keys instead of keeping the last one."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _value_node in node.value:
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                # unhashable key, the base constructor reports it
                continue
            if duplicate:
                raise ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    f"found duplicated mapping key ({key})", key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)

    def construct_yaml_timestamp(self, node):
        # only reached through an explicit !!timestamp tag
        try:
            return super().construct_yaml_timestamp(node)
        except ValueError as e:
            raise ConstructorError(None, None, f"invalid timestamp ({e})", node.start_mark)


# Date-looking scalars stay strings; the content models parse them, so an
# impossible date like 2024-02-30 becomes a field issue on that field.
_UniqueKeySafeLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_UniqueKeySafeLoader.add_constructor(
    "tag:yaml.org,2002:timestamp", _UniqueKeySafeLoader.construct_yaml_timestamp
)

MAX_DEPTH_MESSAGE = "Failed to parse YAML: document is nested too deeply"


class ValidationResult:
    """Either ``record`` or ``issues`` is set, never both."""

    def __init__(self, record: Optional[ContentRecord] = None,
                 issues: Optional[List[FieldIssue]] = None,
                 malformed: bool = False,
                 message: Optional[str] = None):
        self.record = record
        self.issues = issues or []
        self.malformed = malformed
        self.message = message

    @property
    def ok(self) -> bool:
        return self.record is not None

    def __repr__(self):
        if self.ok:
            return f"ValidationResult(record={self.record!r})"
        return f"ValidationResult(issues={self.issues!r}, malformed={self.malformed})"


def _nested_model(annotation) -> Optional[Type[BaseModel]]:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    for arg in typing.get_args(annotation):
        nested = _nested_model(arg)
        if nested is not None:
            return nested
    return None


def _field_title(model: Type[BaseModel], loc) -> Optional[str]:
    current = model
    title = None
    for part in loc:
        if isinstance(part, int):
            continue
        field = current.model_fields.get(part) if current else None
        if field is None:
            return None
        title = field.title
        current = _nested_model(field.annotation)
    return title


def _describe(error: dict, model: Type[BaseModel]) -> str:
    kind = error["type"]
    title = _field_title(model, error["loc"]) or "Value"
    ctx = error.get("ctx") or {}

    if kind == "missing":
        return "Required"
    if kind == "string_too_long":
        return f"{title} must not exceed {ctx.get('max_length')} characters"
    if kind == "string_too_short":
        return f"{title} is required"
    if kind == "string_type":
        return "Expected string"
    if kind == "list_type":
        return "Expected a list"
    if kind in ("model_type", "dict_type", "model_attributes_type"):
        return "Expected an object"
    if kind.startswith("date_"):
        return "Invalid date, expected YYYY-MM-DD"
    return error["msg"]


def _issues_from(exc: ValidationError, model: Type[BaseModel]) -> List[FieldIssue]:
    return [
        FieldIssue(field=format_field_path(err["loc"]), issue=_describe(err, model))
        for err in exc.errors()
    ]


def load_yaml(raw_text: str) -> Any:
    """
    Decode YAML text into plain Python values. Dates are left as strings.
    Raises ``yaml.YAMLError``, or ``RecursionError`` for absurdly nested input.
    """
    return yaml.load(raw_text, Loader=_UniqueKeySafeLoader)


def validate(kind, raw_text: str) -> ValidationResult:
    """
    Parse ``raw_text`` and check it against the fixed shape for ``kind``.
    Never raises for bad input; problems come back as field issues.
    """
    kind = ContentKind(kind)
    model = CONTENT_MODELS[kind]

    # Step 1: structural parse
    try:
        data = load_yaml(raw_text)
    except yaml.YAMLError as e:
        reason = str(e).replace("\n", " ")
        return ValidationResult(
            issues=[FieldIssue(field="", issue=f"Failed to parse YAML: {reason}")],
            malformed=True,
            message=f"Failed to parse YAML: {reason}",
        )
    except RecursionError:
        return ValidationResult(
            issues=[FieldIssue(field="", issue=MAX_DEPTH_MESSAGE)],
            malformed=True,
            message=MAX_DEPTH_MESSAGE,
        )

    if data is None:
        return ValidationResult(
            issues=[FieldIssue(field="", issue="Document is empty")],
            message=INVALID_DATA_MESSAGE,
        )
    if not isinstance(data, dict):
        return ValidationResult(
            issues=[FieldIssue(field="", issue="Expected a mapping at the top level")],
            message=INVALID_DATA_MESSAGE,
        )

    # Step 2 + 3: shape and cross-field checks (unknown keys are ignored)
    try:
        record = model.model_validate(data)
    except ValidationError as e:
        return ValidationResult(issues=_issues_from(e, model), message=INVALID_DATA_MESSAGE)

    return ValidationResult(record=record)


def parse_content(kind, raw_text: str) -> ContentRecord:
    """Like ``validate`` but raises ``InvalidContentError`` instead of returning issues."""
    result = validate(kind, raw_text)
    if not result.ok:
        raise InvalidContentError(result.message, result.issues, malformed=result.malformed)
    return result.record


def serialize(record: ContentRecord) -> str:
    """Dump a content record back to YAML. Absent optional fields are omitted."""
    return yaml.safe_dump(
        record.model_dump(exclude_none=True),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=4096,
    )


def to_storage(record: ContentRecord) -> dict:
    """JSON-safe form kept in the ``content`` column."""
    return record.model_dump(mode="json", exclude_none=True)


def from_storage(kind, stored: Optional[dict]) -> Optional[ContentRecord]:
    if stored is None:
        return None
    return CONTENT_MODELS[ContentKind(kind)].model_validate(stored)
