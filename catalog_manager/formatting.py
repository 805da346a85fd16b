"""Display formatting for the catalog view."""

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalog_manager.view import CatalogSnapshot

CURRENCY_PREFIX = "R$"


def format_price(amount: Decimal | float | str) -> str:
    """Format a price with two decimal places, e.g. `R$ 100.50`."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{CURRENCY_PREFIX} {value:.2f}"


def render_text(snapshot: "CatalogSnapshot") -> str:
    """Render a catalog snapshot as a plain text table.

    Args:
        snapshot: View snapshot to render.

    Returns:
        Multi-line string.
    """
    if snapshot.message is not None:
        return snapshot.message

    cells = [list(snapshot.headers[:-1])]
    if snapshot.placeholder is not None:
        cells.append([snapshot.placeholder])
    else:
        cells.extend([row.name, row.price, row.stock] for row in snapshot.rows)

    widths = [
        max(len(line[i]) for line in cells if len(line) > 1)
        for i in range(len(cells[0]))
    ]
    lines = []
    for line in cells:
        if len(line) == 1:
            lines.append(line[0])
        else:
            lines.append("  ".join(cell.ljust(w) for cell, w in zip(line, widths)).rstrip())

    dialog = snapshot.dialog
    if dialog.is_open:
        lines.append("")
        lines.append(f"[{dialog.title}] {dialog.description}")
        for field in dialog.fields:
            error = f"  ! {field.error}" if field.error else ""
            lines.append(f"  {field.label}: {field.value}{error}")
        lines.append(f"  <{dialog.save_label}>")

    for toast in snapshot.toasts:
        action = f" [{toast.action.label}]" if toast.action else ""
        lines.append(f"({toast.kind.value}) {toast.message}{action}")

    return "\n".join(lines)
