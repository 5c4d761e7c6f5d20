# backend/splitease/domain/validation.py
from __future__ import annotations

from splitease.domain.errors import (
    PayerNotIncluded,
    ReconciliationMismatch,
    Result,
)
from splitease.domain.models import SplitMethod, SplitResult
from splitease.domain.money import Money, MoneyError, sum_money


def validate(
    split_result: SplitResult,
    expense_total: Money,
    *,
    allow_payer_excluded: bool = True,
) -> Result[SplitResult]:
    """
    Check a split against the expense total.

    - Custom: shares must sum to the total exactly (no tolerance).
    - Equal/Ratio: the engine builds these penny-perfect, so a mismatch is an
      internal error and raises MoneyError instead of returning a failure.
    - The payer may pay without being a beneficiary unless
      allow_payer_excluded is False.
    """
    shares_total = sum_money((s.share for s in split_result.shares), expense_total.currency)

    if shares_total != expense_total:
        if split_result.split_method is not SplitMethod.CUSTOM:
            raise MoneyError(
                f"internal error: {split_result.split_method.value} split sums to "
                f"{shares_total} but total is {expense_total}"
            )
        return Result.fail(
            ReconciliationMismatch(
                f"split amounts total {shares_total}, but expense total is {expense_total}",
                shares_total_cents=shares_total.cents,
                expense_total_cents=expense_total.cents,
            )
        )

    if not allow_payer_excluded and split_result.paid_by_id not in split_result.member_ids:
        return Result.fail(
            PayerNotIncluded(f"payer {split_result.paid_by_id} must be included in the split")
        )

    return Result.ok(split_result)
