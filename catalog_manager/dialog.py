"""Product dialog component.

Modal shell around the product form. Whether the dialog is open and which
product it edits are owned by the parent view and passed in as props.
"""

from collections.abc import Callable
from dataclasses import dataclass

from catalog_manager.form import FormField, ProductForm, SubmitCallback
from catalog_manager.schemas import Product

TITLE_CREATE = "Adicionar Novo Produto"
TITLE_EDIT = "Editar Produto"
DESCRIPTION_CREATE = "Preencha os dados para criar um novo produto no catálogo."
DESCRIPTION_EDIT = "Faça alterações no produto e clique em salvar quando terminar."
SAVE_LABEL = "Salvar"
SAVE_LABEL_PENDING = "Salvando..."
CANCEL_LABEL = "Cancelar"
DELETE_LABEL = "Deletar"


@dataclass(frozen=True)
class DialogProps:
    """Parent-owned dialog state."""

    is_open: bool = False
    editing_product: Product | None = None
    is_submitting: bool = False


@dataclass(frozen=True)
class DialogSnapshot:
    """Render-ready dialog state."""

    is_open: bool
    title: str
    description: str
    fields: list[FormField]
    save_label: str
    save_disabled: bool
    delete_visible: bool


class ProductDialog:
    """Dialog hosting a ProductForm with cancel, save and delete actions."""

    def __init__(
        self,
        on_open_change: Callable[[bool], None],
        on_submit: SubmitCallback,
        on_delete: Callable[[int], object] | None = None,
        partial_updates: bool = True,
    ) -> None:
        """Initialize the dialog.

        Args:
            on_open_change: Called with False when the user cancels.
            on_submit: Receives validated form data on save.
            on_delete: Receives the edited product ID on delete.
            partial_updates: Submit only changed fields when editing.
        """
        self._on_open_change = on_open_change
        self._on_delete = on_delete
        self.partial_updates = partial_updates
        self.props = DialogProps()
        self.form = ProductForm(on_submit)

    def set_props(self, props: DialogProps) -> None:
        """Apply new parent state.

        The form is reloaded when the dialog opens or its editing target
        changes, so each session starts from the product's current values.
        """
        previous = self.props
        self.props = props

        opened = props.is_open and not previous.is_open
        if opened or _product_id(props.editing_product) != _product_id(previous.editing_product):
            editing = props.editing_product
            self.form.partial = self.partial_updates and editing is not None
            self.form.reset(editing.to_form_data() if editing is not None else None)

    @property
    def is_editing(self) -> bool:
        return self.props.editing_product is not None

    @property
    def title(self) -> str:
        return TITLE_EDIT if self.is_editing else TITLE_CREATE

    @property
    def description(self) -> str:
        return DESCRIPTION_EDIT if self.is_editing else DESCRIPTION_CREATE

    @property
    def save_label(self) -> str:
        return SAVE_LABEL_PENDING if self.props.is_submitting else SAVE_LABEL

    @property
    def save_disabled(self) -> bool:
        return self.props.is_submitting

    @property
    def delete_visible(self) -> bool:
        return self.is_editing and self._on_delete is not None

    def cancel(self) -> None:
        """Close without side effects."""
        self._on_open_change(False)

    def save(self) -> bool:
        """Submit the hosted form.

        Returns:
            True if the form data was handed to the submit callback.
        """
        if not self.props.is_open or self.save_disabled:
            return False
        return self.form.submit()

    def delete(self) -> None:
        """Request deletion of the edited product."""
        product = self.props.editing_product
        if product is None or self._on_delete is None:
            return
        self._on_delete(product.id)

    def snapshot(self) -> DialogSnapshot:
        return DialogSnapshot(
            is_open=self.props.is_open,
            title=self.title,
            description=self.description,
            fields=self.form.fields,
            save_label=self.save_label,
            save_disabled=self.save_disabled,
            delete_visible=self.delete_visible,
        )


def _product_id(product: Product | None) -> int | None:
    return product.id if product is not None else None
