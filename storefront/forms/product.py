"""Product form: field definitions, binding and validation."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from storefront.database import MAX_INTEGER

Choice = tuple[int, str]
Widget = Literal["text", "number", "textarea", "select", "multiselect", "hidden"]

REQUIRED_MESSAGE = "This field is required"


@dataclass(frozen=True)
class FieldSpec:
    """Static definition of a form field."""

    name: str
    label: str
    widget: Widget
    required: bool = True


PRODUCT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("name", "Name", "text"),
    FieldSpec("cost", "Cost", "number"),
    FieldSpec("description", "Description", "textarea"),
    FieldSpec("category_id", "Category", "select"),
    FieldSpec("image_url", "Image", "hidden", required=False),
    FieldSpec("tags", "Tags", "multiselect", required=False),
)


class ProductFormData(BaseModel):
    """Validated product form submission.

    Choice fields are checked against ``category_ids`` / ``tag_ids`` passed
    in the validation context.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    cost: int = Field(..., ge=0, le=MAX_INTEGER)
    description: str = Field(..., min_length=1)
    category_id: int
    image_url: str | None = Field(None, max_length=2048)
    tags: str = ""

    @field_validator("category_id")
    @classmethod
    def category_is_a_choice(cls, v: int, info: ValidationInfo) -> int:
        choices = (info.context or {}).get("category_ids")
        if choices is not None and v not in choices:
            raise ValueError("Select a valid category")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def join_tag_ids(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return ",".join(str(t) for t in v)
        return v

    @field_validator("tags")
    @classmethod
    def tags_are_choices(cls, v: str, info: ValidationInfo) -> str:
        tokens = [t.strip() for t in v.split(",") if t.strip()]
        if any(not t.isdigit() for t in tokens):
            raise ValueError("Tags must be a list of tag ids")

        choices = (info.context or {}).get("tag_ids")
        if choices is not None:
            unknown = [t for t in tokens if int(t) not in choices]
            if unknown:
                raise ValueError(f"Unknown tags: {', '.join(unknown)}")
        return ",".join(tokens)

    def split(self) -> tuple[dict[str, Any], str]:
        """Separate scalar product fields from the tags submission."""
        return self.model_dump(exclude={"tags"}), self.tags


@dataclass
class BoundField:
    """A field ready for rendering: definition, value, choices and error."""

    spec: FieldSpec
    value: Any
    choices: Sequence[Choice] = ()
    error: str | None = None

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def label(self) -> str:
        return self.spec.label

    @property
    def widget(self) -> Widget:
        return self.spec.widget

    @property
    def required(self) -> bool:
        return self.spec.required

    def is_selected(self, choice_id: int) -> bool:
        if isinstance(self.value, list):
            return str(choice_id) in self.value
        return str(choice_id) == self.value


@dataclass
class BoundProductForm:
    """A product form carrying values and, after validation, errors/data."""

    form: "ProductForm"
    values: dict[str, Any]
    errors: dict[str, str] = field(default_factory=dict)
    data: ProductFormData | None = None

    @property
    def is_valid(self) -> bool:
        return self.data is not None and not self.errors

    @property
    def fields(self) -> list[BoundField]:
        return [
            BoundField(
                spec=spec,
                value=self.values.get(spec.name),
                choices=self.form.choices_for(spec.name),
                error=self.errors.get(spec.name),
            )
            for spec in self.form.field_specs
        ]


def _normalize_values(raw: Mapping[str, Any], specs: Sequence[FieldSpec]) -> dict[str, Any]:
    """Turn raw input into display values: stripped strings, tags as a list."""
    values: dict[str, Any] = {}
    for spec in specs:
        value = raw.get(spec.name)
        if spec.widget == "multiselect":
            if value is None:
                tokens = []
            elif isinstance(value, str):
                tokens = [value]
            else:
                tokens = list(value)
            # "2,5" and ["2", "5"] display the same selection
            values[spec.name] = [
                part.strip() for t in tokens for part in str(t).split(",") if part.strip()
            ]
        else:
            values[spec.name] = "" if value is None else str(value).strip()
    return values


def _error_message(error: Mapping[str, Any]) -> str:
    if error["type"] == "missing":
        return REQUIRED_MESSAGE
    if error["type"] == "value_error":
        return str(error["ctx"]["error"])
    return error["msg"]


class ProductForm:
    """Product form built from the category and tag reference lists."""

    field_specs: tuple[FieldSpec, ...] = PRODUCT_FIELDS

    def __init__(self, categories: Sequence[Choice], tags: Sequence[Choice]):
        self.categories = list(categories)
        self.tags = list(tags)

    def choices_for(self, name: str) -> Sequence[Choice]:
        if name == "category_id":
            return self.categories
        if name == "tags":
            return self.tags
        return ()

    def unbound(self) -> BoundProductForm:
        """An empty form."""
        return BoundProductForm(form=self, values=_normalize_values({}, self.field_specs))

    def bind_defaults(self, record: Mapping[str, Any]) -> BoundProductForm:
        """Pre-populate the form from an existing record without validating."""
        return BoundProductForm(form=self, values=_normalize_values(record, self.field_specs))

    def bind(self, form_input: Mapping[str, Any]) -> BoundProductForm:
        """Bind submitted input and validate it."""
        values = _normalize_values(form_input, self.field_specs)
        payload = {name: value for name, value in values.items() if value not in ("", [])}

        try:
            data = ProductFormData.model_validate(
                payload,
                context={
                    "category_ids": {cid for cid, _ in self.categories},
                    "tag_ids": {tid for tid, _ in self.tags},
                },
            )
        except ValidationError as e:
            errors: dict[str, str] = {}
            for error in e.errors():
                name = str(error["loc"][0]) if error["loc"] else "__all__"
                errors.setdefault(name, _error_message(error))
            return BoundProductForm(form=self, values=values, errors=errors)

        return BoundProductForm(form=self, values=values, data=data)
