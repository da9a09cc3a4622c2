"""Client-side cart accumulator.

The cart is never persisted. It only turns into database rows when it is
handed to :func:`restaurantos.services.order_submission.submit_order`.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


@dataclass
class CartLine:
    menu_item_id: str
    name: str
    price: Decimal
    quantity: int = 1
    special_instructions: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Cart:
    lines: List[CartLine] = field(default_factory=list)

    def _find(self, item_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.menu_item_id == item_id:
                return line
        return None

    def add(self, item: Any) -> "Cart":
        """Add one unit of ``item`` (anything with ``id``, ``name`` and ``price``)."""
        line = self._find(str(item.id))
        if line:
            line.quantity += 1
        else:
            self.lines.append(
                CartLine(
                    menu_item_id=str(item.id),
                    name=item.name,
                    price=Decimal(str(item.price)),
                )
            )
        return self

    def remove(self, item_id: str) -> "Cart":
        """Remove one unit; drops the line when its quantity would reach zero."""
        line = self._find(str(item_id))
        if not line:
            return self
        if line.quantity > 1:
            line.quantity -= 1
        else:
            self.lines.remove(line)
        return self

    def set_instructions(self, item_id: str, text: Optional[str]) -> None:
        line = self._find(str(item_id))
        if line:
            line.special_instructions = (text or "").strip() or None

    def quantity_of(self, item_id: str) -> int:
        line = self._find(str(item_id))
        return line.quantity if line else 0

    def clear(self) -> None:
        self.lines.clear()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_amount(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0.00"))

    def to_submission_lines(self) -> List[Dict[str, Any]]:
        return [
            {
                "menu_item_id": line.menu_item_id,
                "quantity": line.quantity,
                "special_instructions": line.special_instructions,
            }
            for line in self.lines
        ]
