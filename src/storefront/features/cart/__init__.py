"""
Cart package for pricing, quantity policy and optimistic updates.
"""

from .models import CartTotals, CartView, LineItem, parse_cart
from .quantity import QuantityViolation, ViolationKind, effective_max, validate_quantity
from .totals import compute_totals, line_discount
from .mutator import CartItemMutator, LineState, MutationOutcome, OutcomeStatus
from .presenter import CartPresenter
from .service import CartService, create_cart_service

__all__ = [
    'CartTotals',
    'CartView',
    'LineItem',
    'parse_cart',
    'QuantityViolation',
    'ViolationKind',
    'effective_max',
    'validate_quantity',
    'compute_totals',
    'line_discount',
    'CartItemMutator',
    'LineState',
    'MutationOutcome',
    'OutcomeStatus',
    'CartPresenter',
    'CartService',
    'create_cart_service',
]
