from __future__ import annotations

from reiops.domain.results import CashFlowResult, FinancingResult, OperatingResult


def compute_cash_flow(operations: OperatingResult, financing: FinancingResult) -> CashFlowResult:
    # actual debt service only; the stress payment is for qualification
    monthly_net = operations.noi_monthly - financing.monthly_payment
    return CashFlowResult(
        noi_monthly=operations.noi_monthly,
        monthly_net=monthly_net,
        annual_net=monthly_net * 12.0,
    )
