"""Enums for the Store Credit Service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class HistoryActionType(str, enum.Enum):
    ADD = "add"
    DEDUCT = "deduct"


class DeductFailureKind(str, enum.Enum):
    NO_STORE_CREDIT = "no_store_credit"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INVALID_AMOUNT = "invalid_amount"
