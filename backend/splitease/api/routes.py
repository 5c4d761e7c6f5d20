from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from splitease.api.validators import (
    ApiValidationError,
    parse_amount,
    parse_expense_request,
    parse_ledger_entries,
    parse_member_id,
    parse_participants,
    parse_unique_member_ids,
    require_json_object,
)
from splitease.domain.balances import (
    aggregate,
    balance_between,
    balance_text,
    counterparty_balances,
    group_summary,
    summary_text,
)
from splitease.domain.engine import create_split, to_payload
from splitease.domain.errors import AlreadySettled, SplitError
from splitease.domain.models import ModelValidationError
from splitease.domain.money import sum_money
from splitease.domain.settlement import propose_settlement
from splitease.domain.split_logic import remaining_amount

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _json_error(message: str, *, status: int = 400, code: str = "bad_request"):
    return jsonify({"error": {"code": code, "message": message}}), status


def _split_error(e: SplitError):
    status = 409 if isinstance(e, AlreadySettled) else 422
    return _json_error(str(e), status=status, code=e.code)


def _currency() -> str:
    return current_app.config.get("CURRENCY", "INR")


def _symbol() -> str:
    return current_app.config.get("CURRENCY_SYMBOL", "₹")


@api_bp.errorhandler(ApiValidationError)
def _handle_api_validation(e: ApiValidationError):
    return _json_error(str(e), status=400)


@api_bp.errorhandler(SplitError)
def _handle_split_error(e: SplitError):
    return _split_error(e)


@api_bp.get("/health")
def health():
    return jsonify({"status": "ok"}), 200


@api_bp.post("/splits")
def create_split_endpoint():
    """
    JSON body:
      - description, amount, paidById, splittingType
      - members: [{id, username}]  (the group roster)
      - participants: [{memberId, included?, ratio?, customShare?}]
      - groupId (optional, copied into the payload)
    Response:
      - total, shares: [{userId, share}], payload: expense REST body
    """
    data = require_json_object(request.get_json(silent=True))
    expense, roster = parse_expense_request(data, _currency())

    outcome = create_split(
        expense,
        roster,
        allow_payer_excluded=current_app.config.get("ALLOW_PAYER_EXCLUDED", True),
    )
    if not outcome.is_ok:
        return _split_error(outcome.error)

    result = outcome.value
    group_id = data.get("groupId")
    return jsonify(
        {
            "total": result.expense_total.to_decimal_str(),
            "shares": [
                {"userId": s.member_id, "share": s.share.to_decimal_str()} for s in result.shares
            ],
            "payload": to_payload(
                result, roster, group_id=group_id if isinstance(group_id, str) else None
            ),
        }
    ), 200


@api_bp.post("/splits/remaining")
def remaining_endpoint():
    data = require_json_object(request.get_json(silent=True))
    if "amount" not in data:
        raise ApiValidationError("Missing field: amount")

    total = parse_amount(data["amount"], "amount", _currency())
    participants = parse_participants(data.get("participants", []), _currency())
    left = remaining_amount(total, participants)
    return jsonify({"remaining": left.to_decimal_str()}), 200


@api_bp.post("/balances")
def balances_endpoint():
    """
    JSON body:
      - entries: [{from, to, amount, kind: Expense|Settlement}]
      - groupMembers (optional): member ids for a group summary
      - viewerId (optional): adds the viewer-side view
    """
    data = require_json_object(request.get_json(silent=True))
    currency = _currency()
    balances = aggregate(parse_ledger_entries(data.get("entries", []), currency), currency=currency)

    body = {
        "balances": [
            {
                "memberA": b.member_a,
                "memberB": b.member_b,
                "netAmount": b.net_amount.to_decimal_str(),
            }
            for b in balances
        ]
    }

    viewer_id = parse_member_id(data, "viewerId") if data.get("viewerId") is not None else None

    if data.get("groupMembers") is not None:
        members = parse_unique_member_ids(data["groupMembers"], "groupMembers")
        try:
            summary = group_summary(balances, members, viewer_id=viewer_id, currency=currency)
        except ModelValidationError as e:
            raise ApiValidationError(str(e)) from e
        body["summary"] = {
            "perMember": [
                {"memberId": mb.member_id, "netAmount": mb.net_amount.to_decimal_str()}
                for mb in summary.per_member
            ],
            "overallNet": summary.overall_net.to_decimal_str(),
        }

    if viewer_id is not None:
        counterparties = counterparty_balances(balances, viewer_id)
        viewer_total = sum_money((mb.net_amount for mb in counterparties), currency)
        body["viewer"] = {
            "netAmount": viewer_total.to_decimal_str(),
            "summaryText": summary_text(viewer_total, symbol=_symbol()),
            "counterparties": [
                {
                    "userId": mb.member_id,
                    "amount": mb.net_amount.to_decimal_str(),
                    "text": balance_text(mb.net_amount, symbol=_symbol()),
                }
                for mb in counterparties
            ],
        }

    return jsonify(body), 200


@api_bp.post("/settlements/propose")
def propose_settlement_endpoint():
    data = require_json_object(request.get_json(silent=True))
    payer_id = parse_member_id(data, "payerId")
    payee_id = parse_member_id(data, "payeeId")
    if payer_id == payee_id:
        raise ApiValidationError("'payerId' and 'payeeId' must differ.")

    currency = _currency()
    balances = aggregate(parse_ledger_entries(data.get("entries", []), currency), currency=currency)
    pair = balance_between(balances, payer_id, payee_id, currency=currency)

    outcome = propose_settlement(pair, payer_id, payee_id)
    if not outcome.is_ok:
        logger.info("settlement refused (%s): %s", outcome.error.code, outcome.error)
        return _split_error(outcome.error)
    return jsonify({"amount": outcome.value.to_decimal_str()}), 200
