"""Product catalog view.

Root component: reads the product list through the query cache, renders it
as a table and wires the add, edit and delete actions to mutations. The
view re-renders on every cache, mutation and toast change and hands the
resulting CatalogSnapshot to its subscribers.

Phases:
    LOADING ──► READY
       │
       └──────► ERROR (until reload)
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from catalog_manager.api_client import ProductAPIClient
from catalog_manager.dialog import DELETE_LABEL, DialogProps, DialogSnapshot, ProductDialog
from catalog_manager.formatting import format_price
from catalog_manager.mutations import Mutation
from catalog_manager.notifications import Toast, ToastAction, Toaster
from catalog_manager.query_cache import QueryCache, QueryKey, QueryState
from catalog_manager.schemas import Product, ProductFormData, ProductUpdateData

logger = structlog.get_logger()

PRODUCTS_KEY: QueryKey = ("products",)

TABLE_HEADERS: tuple[str, ...] = ("Nome", "Preço", "Estoque", "Ações")
LOADING_MESSAGE = "Carregando produtos..."
ERROR_MESSAGE = "Ocorreu um erro ao buscar os produtos."
EMPTY_MESSAGE = "Nenhum produto cadastrado ainda."

CONFIRM_DELETE_MESSAGE = "Tem certeza que deseja deletar este produto?"
CONFIRM_DELETE_DURATION_MS = 5000

CREATE_SUCCESS = "Produto criado com sucesso."
CREATE_FAILURE = "Não foi possível criar o produto."
UPDATE_SUCCESS = "Produto atualizado com sucesso."
UPDATE_FAILURE = "Não foi possível atualizar o produto."
DELETE_SUCCESS = "Produto deletado com sucesso."
DELETE_FAILURE = "Não foi possível deletar o produto."


class ViewPhase(str, Enum):
    """Top-level rendering phase."""

    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


@dataclass(frozen=True)
class ProductRow:
    """One rendered table row."""

    product: Product
    name: str
    price: str
    stock: str
    delete_disabled: bool

    @property
    def product_id(self) -> int:
        return self.product.id


@dataclass(frozen=True)
class CatalogSnapshot:
    """Everything a renderer needs to draw the catalog."""

    phase: ViewPhase
    message: str | None
    headers: tuple[str, ...]
    rows: list[ProductRow]
    placeholder: str | None
    dialog: DialogSnapshot
    toasts: list[Toast]


class ProductCatalogView:
    """Table of products with create, edit and delete actions."""

    def __init__(
        self,
        api: ProductAPIClient,
        cache: QueryCache,
        toaster: Toaster,
        partial_updates: bool = True,
    ) -> None:
        """Initialize the view.

        Args:
            api: Catalog API client.
            cache: Query cache shared with other components.
            toaster: Notification queue.
            partial_updates: Send only changed fields when editing.
        """
        self.api = api
        self.cache = cache
        self.toaster = toaster

        self.is_dialog_open = False
        self.editing_product: Product | None = None

        self.create_mutation: Mutation[Product] = Mutation(
            "create_product",
            api.create_product,
            on_success=self._on_created,
            on_error=lambda error, *args: self.toaster.error(CREATE_FAILURE),
        )
        self.update_mutation: Mutation[Product] = Mutation(
            "update_product",
            api.update_product,
            on_success=self._on_updated,
            on_error=lambda error, *args: self.toaster.error(UPDATE_FAILURE),
        )
        self.delete_mutation: Mutation[None] = Mutation(
            "delete_product",
            api.delete_product,
            on_success=self._on_deleted,
            on_error=lambda error, *args: self.toaster.error(DELETE_FAILURE),
        )

        self.dialog = ProductDialog(
            on_open_change=self.set_dialog_open,
            on_submit=self.handle_form_submit,
            on_delete=self.handle_delete_click,
            partial_updates=partial_updates,
        )

        self._tasks: set[asyncio.Task] = set()
        self._unsubscribers: list[Callable[[], None]] = []
        self._listeners: list[Callable[[CatalogSnapshot], None]] = []

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def mount(self) -> None:
        """Start observing the cache and load the product list."""
        if not self._unsubscribers:
            self._unsubscribers = [
                self.cache.subscribe(PRODUCTS_KEY, self._on_cache_change),
                self.create_mutation.subscribe(self._on_mutation_change),
                self.update_mutation.subscribe(self._on_mutation_change),
                self.delete_mutation.subscribe(self._on_mutation_change),
                self.toaster.subscribe(lambda toasts: self.render()),
            ]
        self._sync_dialog()
        self.render()
        await self.cache.ensure(PRODUCTS_KEY, self.api.list_products)

    def unmount(self) -> None:
        """Stop observing. Pending mutations still complete."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    async def reload(self) -> None:
        """Fetch the product list again (leaves the ERROR phase)."""
        logger.info("Reloading products")
        await self.cache.refetch(PRODUCTS_KEY, self.api.list_products)

    async def settle(self) -> None:
        """Wait for pending mutations and the refetches they trigger."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        await self.cache.wait_until_idle(PRODUCTS_KEY)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def query_state(self) -> QueryState:
        return self.cache.get_state(PRODUCTS_KEY)

    @property
    def phase(self) -> ViewPhase:
        state = self.query_state
        if state.is_error:
            return ViewPhase.ERROR
        if state.data is None:
            return ViewPhase.LOADING
        return ViewPhase.READY

    @property
    def products(self) -> list[Product]:
        return list(self.query_state.data or [])

    @property
    def is_submitting(self) -> bool:
        return self.create_mutation.is_pending or self.update_mutation.is_pending

    @property
    def is_deleting(self) -> bool:
        return self.delete_mutation.is_pending

    # =========================================================================
    # User Actions
    # =========================================================================

    def handle_add_click(self) -> None:
        """Open the dialog to create a product."""
        self.editing_product = None
        self.set_dialog_open(True)

    def handle_edit_click(self, product: Product) -> None:
        """Open the dialog to edit product."""
        self.editing_product = product
        self.set_dialog_open(True)

    def set_dialog_open(self, is_open: bool) -> None:
        self.is_dialog_open = is_open
        self._sync_dialog()
        self.render()

    def handle_delete_click(self, product_id: int) -> Toast | None:
        """Ask for confirmation before deleting.

        The delete request is only issued when the toast action is clicked.

        Returns:
            The confirmation toast, or None while a delete is pending.
        """
        if self.is_deleting:
            return None
        return self.toaster.error(
            CONFIRM_DELETE_MESSAGE,
            action=ToastAction(DELETE_LABEL, lambda: self._confirm_delete(product_id)),
            duration_ms=CONFIRM_DELETE_DURATION_MS,
        )

    def handle_form_submit(
        self, data: ProductFormData | ProductUpdateData
    ) -> asyncio.Task | None:
        """Create or update depending on the editing target."""
        if self.is_submitting:
            return None
        if self.editing_product is not None:
            return self._track(self.update_mutation.mutate(self.editing_product.id, data))
        return self._track(self.create_mutation.mutate(data))

    def _confirm_delete(self, product_id: int) -> asyncio.Task | None:
        # Another confirmation toast may already have started a delete.
        if self.is_deleting:
            logger.info("Delete already pending", product_id=product_id)
            return None
        return self._track(self.delete_mutation.mutate(product_id))

    # =========================================================================
    # Mutation Outcomes
    # =========================================================================

    def _on_created(self, product: Product, data: ProductFormData) -> None:
        self.cache.invalidate(PRODUCTS_KEY)
        self.toaster.success(CREATE_SUCCESS)
        self.set_dialog_open(False)

    def _on_updated(
        self,
        product: Product,
        product_id: int,
        data: ProductFormData | ProductUpdateData,
    ) -> None:
        self.cache.invalidate(PRODUCTS_KEY)
        self.toaster.success(UPDATE_SUCCESS)
        self.editing_product = None
        self.set_dialog_open(False)

    def _on_deleted(self, result: None, product_id: int) -> None:
        self.cache.invalidate(PRODUCTS_KEY)
        self.toaster.success(DELETE_SUCCESS)
        if self.editing_product is not None and self.editing_product.id == product_id:
            self.editing_product = None
            self.set_dialog_open(False)

    # =========================================================================
    # Rendering
    # =========================================================================

    def subscribe(self, listener: Callable[[CatalogSnapshot], None]) -> Callable[[], None]:
        """Register a renderer called with a fresh snapshot on every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> CatalogSnapshot:
        phase = self.phase
        message = {
            ViewPhase.LOADING: LOADING_MESSAGE,
            ViewPhase.ERROR: ERROR_MESSAGE,
        }.get(phase)

        rows: list[ProductRow] = []
        placeholder = None
        if phase is ViewPhase.READY:
            rows = [
                ProductRow(
                    product=product,
                    name=product.name,
                    price=format_price(product.price),
                    stock=str(product.stock),
                    delete_disabled=self.is_deleting,
                )
                for product in self.products
            ]
            if not rows:
                placeholder = EMPTY_MESSAGE

        return CatalogSnapshot(
            phase=phase,
            message=message,
            headers=TABLE_HEADERS,
            rows=rows,
            placeholder=placeholder,
            dialog=self.dialog.snapshot(),
            toasts=self.toaster.active,
        )

    def render(self) -> CatalogSnapshot:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    def _sync_dialog(self) -> None:
        self.dialog.set_props(
            DialogProps(
                is_open=self.is_dialog_open,
                editing_product=self.editing_product,
                is_submitting=self.is_submitting,
            )
        )

    def _on_cache_change(self, state: QueryState) -> None:
        if state.is_error:
            logger.warning("Product list unavailable", error=str(state.error))
        self.render()

    def _on_mutation_change(self, mutation: Mutation) -> None:
        self._sync_dialog()
        self.render()

    def _track(self, task: asyncio.Task) -> asyncio.Task:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
