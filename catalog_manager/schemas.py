"""Pydantic schemas for catalog products.

Defines the product record returned by the API, the validated form data
sent on create and the partial payload sent on update. Field names are
English in Python and Portuguese on the wire (nome, descricao, preco,
estoque); drafts may use either.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    StringConstraints,
    TypeAdapter,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from catalog_manager.exceptions import ValidationError

# ============================================================================
# Field Names and Messages
# ============================================================================

FIELD_NAMES: tuple[str, ...] = ("name", "description", "price", "stock")

WIRE_NAMES: dict[str, str] = {
    "name": "nome",
    "description": "descricao",
    "price": "preco",
    "stock": "estoque",
}

_FIELD_BY_KEY: dict[str, str] = {
    **{wire: field for field, wire in WIRE_NAMES.items()},
    **{field: field for field in WIRE_NAMES},
}

NAME_TOO_SHORT = "O nome deve ter no mínimo 3 caracteres."
DESCRIPTION_INVALID = "A descrição deve ser um texto."
PRICE_NOT_POSITIVE = "O preço deve ser um número positivo."
STOCK_NOT_INTEGER = "O estoque deve ser um número inteiro."
STOCK_NEGATIVE = "O estoque não pode ser negativo."


# ============================================================================
# Field Types
# ============================================================================

# Prices travel as JSON numbers; Decimal keeps them exact in Python.
JsonDecimal = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3)]
ProductPrice = Annotated[JsonDecimal, Field(gt=0)]
StockQuantity = Annotated[int, Field(ge=0)]


class _WireModel(BaseModel):
    """Base for models exchanged with the catalog API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict[str, Any]:
        """Serialize the explicitly set fields using wire names.

        Returns:
            JSON-compatible dictionary for a request body.
        """
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_unset=True,
            exclude_none=True,
        )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductFormData(_WireModel):
    """Validated product data, as submitted on create."""

    name: ProductName = Field(..., alias="nome")
    description: str | None = Field(None, alias="descricao")
    price: ProductPrice = Field(..., alias="preco")
    stock: StockQuantity = Field(..., alias="estoque")

    @field_validator("description")
    @classmethod
    def _blank_description_to_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


class ProductUpdateData(_WireModel):
    """Partial product data; only the fields that were set are sent."""

    name: ProductName | None = Field(None, alias="nome")
    description: str | None = Field(None, alias="descricao")
    price: ProductPrice | None = Field(None, alias="preco")
    stock: StockQuantity | None = Field(None, alias="estoque")

    @property
    def changed_fields(self) -> set[str]:
        """Names of the fields carried by this update."""
        return set(self.model_fields_set)


class Product(_WireModel):
    """Product record as stored by the server.

    The server is the authority, so values are only type-checked here.
    """

    id: int
    name: str = Field(..., alias="nome")
    description: str | None = Field(None, alias="descricao")
    price: JsonDecimal = Field(..., alias="preco")
    stock: int = Field(..., alias="estoque")

    def to_form_data(self) -> ProductFormData:
        """Build form initial data from this record without re-validating it."""
        return ProductFormData.model_construct(
            name=self.name,
            description=self.description,
            price=self.price,
            stock=self.stock,
        )


# ============================================================================
# Validation
# ============================================================================

_FIELD_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    "name": TypeAdapter(ProductName),
    "description": TypeAdapter(str | None),
    "price": TypeAdapter(ProductPrice),
    "stock": TypeAdapter(StockQuantity),
}


def _message_for(field: str, error_type: str) -> str:
    if field == "name":
        return NAME_TOO_SHORT
    if field == "price":
        return PRICE_NOT_POSITIVE
    if field == "stock":
        if error_type == "greater_than_equal":
            return STOCK_NEGATIVE
        return STOCK_NOT_INTEGER
    return DESCRIPTION_INVALID


def _collect_field_errors(exc: PydanticValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = _FIELD_BY_KEY.get(str(loc[0])) if loc else None
        if field is None or field in errors:
            continue
        errors[field] = _message_for(field, error["type"])
    return errors


def validate_product_draft(draft: Mapping[str, Any]) -> ProductFormData:
    """Validate a complete product draft.

    Args:
        draft: Raw values keyed by field name or wire name.

    Returns:
        Normalized ProductFormData.

    Raises:
        ValidationError: With one message per invalid field.
    """
    try:
        return ProductFormData.model_validate(dict(draft))
    except PydanticValidationError as e:
        raise ValidationError(_collect_field_errors(e)) from e


def validate_product_update(draft: Mapping[str, Any]) -> ProductUpdateData:
    """Validate a partial product draft.

    Only the supplied fields are checked and carried by the result.

    Args:
        draft: Raw values keyed by field name or wire name.

    Returns:
        ProductUpdateData with the supplied fields set.

    Raises:
        ValidationError: With one message per invalid field.
    """
    try:
        return ProductUpdateData.model_validate(dict(draft))
    except PydanticValidationError as e:
        raise ValidationError(_collect_field_errors(e)) from e


def validate_field(field: str, value: Any) -> str | None:
    """Validate a single field value for interactive feedback.

    Args:
        field: Field name (name, description, price, stock).
        value: Raw input value.

    Returns:
        Error message, or None when the value is valid.
    """
    try:
        _FIELD_ADAPTERS[field].validate_python(value)
    except PydanticValidationError as e:
        return _message_for(field, e.errors()[0]["type"])
    return None


def normalize_field(field: str, value: Any) -> Any:
    """Convert a raw field value to its validated form.

    Invalid values are returned unchanged, so "10.00" and Decimal("10.0")
    compare equal while a bad input still differs from any valid one.
    """
    try:
        return _FIELD_ADAPTERS[field].validate_python(value)
    except PydanticValidationError:
        return value
