"""Database model exports."""

from .inventory import InventoryOnHand, InventorySeedClaim, Item, Warehouse

__all__ = [
    "Item",
    "Warehouse",
    "InventoryOnHand",
    "InventorySeedClaim",
]
