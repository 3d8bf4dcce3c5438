"""Deposit administration routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from dead_pigeons.db import get_session
from dead_pigeons.schemas.transaction import TransactionRejectSchema, TransactionSchema
from dead_pigeons.services import get_services
from dead_pigeons.utils.responses import ok

transactions_bp = Blueprint("transactions", __name__, url_prefix="/transactions")

_transaction_schema = TransactionSchema()
_transactions_schema = TransactionSchema(many=True)
_reject_schema = TransactionRejectSchema()


@transactions_bp.get("/pending")
def list_pending():
    """Pending deposits, oldest first."""

    return ok(_transactions_schema.dump(get_services().transactions.list_pending(get_session())))


@transactions_bp.get("/<int:transaction_id>")
def get_transaction(transaction_id: int):
    found = get_services().transactions.get_transaction(get_session(), transaction_id)
    return ok(_transaction_schema.dump(found))


@transactions_bp.post("/<int:transaction_id>/approve")
def approve(transaction_id: int):
    approved = get_services().transactions.approve(get_session(), transaction_id)
    return ok(_transaction_schema.dump(approved))


@transactions_bp.post("/<int:transaction_id>/reject")
def reject(transaction_id: int):
    data = _reject_schema.load(request.get_json(silent=True) or {})
    rejected = get_services().transactions.reject(get_session(), transaction_id, reason=data.get("reason"))
    return ok(_transaction_schema.dump(rejected))
