"""Tests for product schemas and draft validation."""

from decimal import Decimal

import pytest

from catalog_manager.exceptions import ValidationError
from catalog_manager.schemas import (
    NAME_TOO_SHORT,
    PRICE_NOT_POSITIVE,
    STOCK_NEGATIVE,
    STOCK_NOT_INTEGER,
    Product,
    ProductFormData,
    validate_field,
    validate_product_draft,
    validate_product_update,
)


def draft(**overrides):
    values = {"name": "Mesa", "description": "", "price": "100.5", "stock": "3"}
    values.update(overrides)
    return values


class TestNameRule:
    """Tests for the name constraint."""

    @pytest.mark.parametrize("name", ["", "a", "ab", "  ab  "])
    def test_short_names_rejected(self, name) -> None:
        """Names shorter than 3 characters after trimming are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_product_draft(draft(name=name))
        assert exc_info.value.field_errors == {"name": NAME_TOO_SHORT}

    def test_name_is_trimmed(self) -> None:
        """Surrounding whitespace is removed from valid names."""
        data = validate_product_draft(draft(name="  Mesa  "))
        assert data.name == "Mesa"

    def test_missing_name_rejected(self) -> None:
        """A draft without a name fails on the name field."""
        values = draft()
        del values["name"]
        with pytest.raises(ValidationError) as exc_info:
            validate_product_draft(values)
        assert exc_info.value.field_errors["name"] == NAME_TOO_SHORT


class TestPriceRule:
    """Tests for the price constraint."""

    @pytest.mark.parametrize("price", [0, "0", -1, "-0.01", "abc", "", None])
    def test_invalid_prices_rejected(self, price) -> None:
        """Zero, negative and non-numeric prices are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_product_draft(draft(price=price))
        assert exc_info.value.field_errors == {"price": PRICE_NOT_POSITIVE}

    def test_smallest_price_accepted(self) -> None:
        """0.01 is a valid price."""
        data = validate_product_draft(draft(price=0.01))
        assert data.price == Decimal("0.01")

    def test_price_string_is_coerced(self) -> None:
        """Numeric strings coerce to Decimal."""
        data = validate_product_draft(draft(price="100.5"))
        assert data.price == Decimal("100.5")


class TestStockRule:
    """Tests for the stock constraint."""

    def test_zero_stock_accepted(self) -> None:
        """Zero stock is valid."""
        assert validate_product_draft(draft(stock=0)).stock == 0

    def test_stock_string_is_coerced(self) -> None:
        """Integer strings coerce to int."""
        assert validate_product_draft(draft(stock="12")).stock == 12

    @pytest.mark.parametrize("stock", [-1, "-1"])
    def test_negative_stock_rejected(self, stock) -> None:
        """Negative stock is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_product_draft(draft(stock=stock))
        assert exc_info.value.field_errors == {"stock": STOCK_NEGATIVE}

    @pytest.mark.parametrize("stock", [2.5, "2.5", "abc", ""])
    def test_non_integer_stock_rejected(self, stock) -> None:
        """Non-integer stock is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_product_draft(draft(stock=stock))
        assert exc_info.value.field_errors == {"stock": STOCK_NOT_INTEGER}


class TestDraftValidation:
    """Tests for whole-draft behavior."""

    def test_errors_collected_for_every_field(self) -> None:
        """All invalid fields are reported together."""
        with pytest.raises(ValidationError) as exc_info:
            validate_product_draft({"name": "x", "price": 0, "stock": -1})
        assert set(exc_info.value.field_errors) == {"name", "price", "stock"}

    def test_wire_names_accepted(self) -> None:
        """Drafts may use the API field names."""
        data = validate_product_draft({"nome": "Mesa", "preco": 100.5, "estoque": 3})

        assert data.to_payload() == {"nome": "Mesa", "preco": 100.5, "estoque": 3}

    def test_blank_description_omitted(self) -> None:
        """A blank description is not sent on create."""
        data = validate_product_draft(draft(description="   "))
        assert data.description is None
        assert "descricao" not in data.to_payload()

    def test_description_kept(self) -> None:
        """A description is carried as given."""
        data = validate_product_draft(draft(description="Madeira maciça"))
        assert data.to_payload()["descricao"] == "Madeira maciça"


class TestPartialValidation:
    """Tests for partial update validation."""

    def test_only_supplied_fields_carried(self) -> None:
        """A partial draft serializes only its own fields."""
        data = validate_product_update({"stock": "5"})

        assert data.changed_fields == {"stock"}
        assert data.to_payload() == {"estoque": 5}

    def test_supplied_fields_still_validated(self) -> None:
        """Supplied fields obey the same rules."""
        with pytest.raises(ValidationError) as exc_info:
            validate_product_update({"price": "0"})
        assert exc_info.value.field_errors == {"price": PRICE_NOT_POSITIVE}

    def test_cleared_description_sent(self) -> None:
        """Clearing the description on update sends an empty string."""
        data = validate_product_update({"description": ""})
        assert data.to_payload() == {"descricao": ""}


class TestValidateField:
    """Tests for single-field feedback."""

    def test_valid_value_has_no_error(self) -> None:
        assert validate_field("name", "Mesa") is None

    def test_invalid_values(self) -> None:
        assert validate_field("name", "ab") == NAME_TOO_SHORT
        assert validate_field("price", "0") == PRICE_NOT_POSITIVE
        assert validate_field("stock", "-3") == STOCK_NEGATIVE
        assert validate_field("stock", "1.5") == STOCK_NOT_INTEGER


class TestProduct:
    """Tests for the API product record."""

    def test_parses_api_payload(self) -> None:
        """Decimal prices sent as strings are parsed."""
        product = Product.model_validate(
            {"id": 7, "nome": "Mesa", "descricao": None, "preco": "100.50", "estoque": 3}
        )

        assert product.id == 7
        assert product.name == "Mesa"
        assert product.price == Decimal("100.50")

    def test_to_form_data(self) -> None:
        """Form initial data mirrors the record without the ID."""
        product = Product(id=3, nome="Sofá", preco=Decimal("1500"), estoque=1)

        data = product.to_form_data()

        assert isinstance(data, ProductFormData)
        assert (data.name, data.price, data.stock) == ("Sofá", Decimal("1500"), 1)
