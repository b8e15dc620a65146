"""Enum definitions for store service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class ProductCategory(str, enum.Enum):
    TSHIRTS = "tshirts"
    HOODIES = "hoodies"
    PANTS = "pants"
    JACKETS = "jackets"
    ACCESSORIES = "accessories"


class ProductSize(str, enum.Enum):
    PP = "PP"
    P = "P"
    M = "M"
    G = "G"
    GG = "GG"
    XG = "XG"
    XXG = "XXG"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
