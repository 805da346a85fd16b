"""Tests for the product form component."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from catalog_manager.form import ProductForm
from catalog_manager.schemas import (
    NAME_TOO_SHORT,
    PRICE_NOT_POSITIVE,
    STOCK_NEGATIVE,
    ProductFormData,
    ProductUpdateData,
)
from tests.conftest import make_product


class TestCreateMode:
    """Tests for an empty form."""

    def test_empty_defaults(self) -> None:
        form = ProductForm(MagicMock())

        assert form.values == {"name": "", "description": "", "price": "", "stock": ""}
        assert [f.label for f in form.fields] == [
            "Nome do Produto",
            "Descrição",
            "Preço",
            "Quantidade em Estoque",
        ]

    def test_invalid_submit_blocks_callback(self) -> None:
        """Submitting an empty form reports errors and skips the callback."""
        on_submit = MagicMock()
        form = ProductForm(on_submit)

        assert form.submit() is False

        on_submit.assert_not_called()
        assert set(form.errors) == {"name", "price", "stock"}
        assert form.field("name").error == NAME_TOO_SHORT

    def test_valid_submit_passes_normalized_data(self) -> None:
        on_submit = MagicMock()
        form = ProductForm(on_submit)
        form.field("name").on_change(" Mesa ")
        form.field("price").on_change("100.5")
        form.field("stock").on_change("3")

        assert form.submit() is True

        (data,), _ = on_submit.call_args
        assert isinstance(data, ProductFormData)
        assert data.to_payload() == {"nome": "Mesa", "preco": 100.5, "estoque": 3}
        assert form.errors == {}

    def test_change_revalidates_field(self) -> None:
        """Each change re-runs that field's validation."""
        form = ProductForm(MagicMock())

        form.set_value("price", "0")
        assert form.errors == {"price": PRICE_NOT_POSITIVE}

        form.set_value("price", "0.01")
        assert form.errors == {}

    def test_unknown_field(self) -> None:
        form = ProductForm(MagicMock())
        with pytest.raises(KeyError):
            form.set_value("sku", "X")


class TestEditMode:
    """Tests for a form pre-filled from a product."""

    def test_initial_data_prefills(self) -> None:
        product = make_product(4, "Sofá", "1500.00", 2, "Três lugares")
        form = ProductForm(MagicMock(), initial_data=product.to_form_data())

        assert form.values == {
            "name": "Sofá",
            "description": "Três lugares",
            "price": Decimal("1500.00"),
            "stock": 2,
        }
        assert form.dirty_fields == []

    def test_partial_submit_sends_changed_fields_only(self) -> None:
        on_submit = MagicMock()
        form = ProductForm(
            on_submit,
            initial_data=make_product(4, "Sofá", "1500.00", 2).to_form_data(),
            partial=True,
        )

        form.set_value("stock", "7")
        assert form.submit() is True

        (data,), _ = on_submit.call_args
        assert isinstance(data, ProductUpdateData)
        assert data.to_payload() == {"estoque": 7}

    def test_retyped_unchanged_price_is_not_sent(self) -> None:
        """Typed input equal to the initial number does not count as a change."""
        on_submit = MagicMock()
        form = ProductForm(
            on_submit,
            initial_data=make_product(4, "Sofá", "10.00", 2).to_form_data(),
            partial=True,
        )

        form.set_value("price", "10.00")
        form.set_value("stock", "5")
        assert form.dirty_fields == ["stock"]
        assert form.submit() is True

        (data,), _ = on_submit.call_args
        assert data.to_payload() == {"estoque": 5}

    def test_retyped_values_leave_form_clean(self) -> None:
        form = ProductForm(
            MagicMock(),
            initial_data=make_product(4, "Sofá", "10.00", 2).to_form_data(),
        )

        form.set_value("price", "10")
        form.set_value("stock", "2")
        form.set_value("description", "")

        assert form.dirty_fields == []

    def test_full_update_sends_cleared_description(self) -> None:
        on_submit = MagicMock()
        form = ProductForm(
            on_submit,
            initial_data=make_product(4, "Cadeira", "10.00", 2, "Antiga").to_form_data(),
            partial=False,
        )

        form.set_value("description", "")
        assert form.submit() is True

        (data,), _ = on_submit.call_args
        assert isinstance(data, ProductUpdateData)
        assert data.to_payload() == {
            "nome": "Cadeira",
            "descricao": "",
            "preco": 10.0,
            "estoque": 2,
        }

    def test_partial_submit_still_gated_on_whole_form(self) -> None:
        on_submit = MagicMock()
        form = ProductForm(
            on_submit,
            initial_data=make_product(4, "Sofá", "1500.00", 2).to_form_data(),
            partial=True,
        )

        form.set_value("stock", "-1")

        assert form.submit() is False
        assert form.errors == {"stock": STOCK_NEGATIVE}
        on_submit.assert_not_called()

    def test_reset(self) -> None:
        form = ProductForm(MagicMock(), initial_data=make_product().to_form_data())
        form.set_value("name", "x")

        form.reset()

        assert form.values["name"] == ""
        assert form.errors == {}
