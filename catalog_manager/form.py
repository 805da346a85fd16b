"""Product form component.

Binds the product fields to explicit (value, on_change) pairs, re-validates
a field on every change and gates submission on full validation.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

from catalog_manager.exceptions import ValidationError
from catalog_manager.schemas import (
    FIELD_NAMES,
    ProductFormData,
    ProductUpdateData,
    normalize_field,
    validate_field,
    validate_product_draft,
    validate_product_update,
)

logger = structlog.get_logger()

SubmitCallback = Callable[[ProductFormData | ProductUpdateData], None]


@dataclass(frozen=True)
class FieldSpec:
    """Static description of a form input."""

    name: str
    label: str
    input_type: str
    placeholder: str | None = None


FIELD_SPECS: dict[str, FieldSpec] = {
    "name": FieldSpec("name", "Nome do Produto", "text", "Ex: Cadeira Gamer"),
    "description": FieldSpec("description", "Descrição", "textarea", "Descreva o produto..."),
    "price": FieldSpec("price", "Preço", "number"),
    "stock": FieldSpec("stock", "Quantidade em Estoque", "number"),
}


@dataclass(frozen=True)
class FormField:
    """Render-ready state of one input: its value, error and change handler."""

    spec: FieldSpec
    value: Any
    error: str | None
    on_change: Callable[[Any], None]

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def label(self) -> str:
        return self.spec.label


def _initial_values(initial_data: ProductFormData | None) -> dict[str, Any]:
    if initial_data is None:
        return {name: "" for name in FIELD_NAMES}
    return {
        "name": initial_data.name,
        "description": initial_data.description or "",
        "price": initial_data.price,
        "stock": initial_data.stock,
    }


def _comparable(name: str, value: Any) -> Any:
    value = normalize_field(name, value)
    # A missing description and a blank one are the same value.
    if name == "description" and (value is None or isinstance(value, str) and not value.strip()):
        return ""
    return value


class ProductForm:
    """Form holding a product draft.

    In partial mode a successful submit passes a ProductUpdateData holding
    only the fields that differ from the initial values. A form loaded from
    initial data otherwise submits every field as a ProductUpdateData, and a
    blank form submits ProductFormData.
    """

    def __init__(
        self,
        on_submit: SubmitCallback,
        initial_data: ProductFormData | None = None,
        partial: bool = False,
    ) -> None:
        self._on_submit = on_submit
        self.partial = partial
        self._initial: dict[str, Any] = {}
        self._values: dict[str, Any] = {}
        self._errors: dict[str, str] = {}
        self.reset(initial_data)

    def reset(self, initial_data: ProductFormData | None = None) -> None:
        """Reload the form from initial data (empty defaults when None)."""
        self.is_editing = initial_data is not None
        self._initial = _initial_values(initial_data)
        self._values = dict(self._initial)
        self._errors = {}

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._errors)

    @property
    def dirty_fields(self) -> list[str]:
        """Fields whose normalized value differs from the initial one, in form order."""
        return [
            n
            for n in FIELD_NAMES
            if _comparable(n, self._values[n]) != _comparable(n, self._initial[n])
        ]

    def field(self, name: str) -> FormField:
        """Get the bound state of one field."""
        if name not in FIELD_SPECS:
            raise KeyError(f"Unknown form field: {name}")
        return FormField(
            spec=FIELD_SPECS[name],
            value=self._values[name],
            error=self._errors.get(name),
            on_change=lambda value: self.set_value(name, value),
        )

    @property
    def fields(self) -> list[FormField]:
        return [self.field(name) for name in FIELD_NAMES]

    def set_value(self, name: str, value: Any) -> None:
        """Change a field value and re-run its validation."""
        if name not in FIELD_SPECS:
            raise KeyError(f"Unknown form field: {name}")

        self._values[name] = value
        error = validate_field(name, value)
        if error is None:
            self._errors.pop(name, None)
        else:
            self._errors[name] = error

    def submit(self) -> bool:
        """Validate the draft and hand it to the submit callback.

        Returns:
            True if the callback was called, False if validation failed.
        """
        try:
            data = validate_product_draft(self._values)
            payload: ProductFormData | ProductUpdateData = data
            if self.partial:
                payload = validate_product_update(
                    {name: self._values[name] for name in self.dirty_fields}
                )
            elif self.is_editing:
                # Full update: a cleared description is sent as "" so it clears.
                payload = validate_product_update(
                    {**data.model_dump(), "description": data.description or ""}
                )
        except ValidationError as e:
            self._errors = dict(e.field_errors)
            logger.debug("Form submission rejected", fields=sorted(e.field_errors))
            return False

        self._errors = {}
        self._on_submit(payload)
        return True
