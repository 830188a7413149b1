"""Pre-purchase savings phase.

Before a buyer can enter a purchase strategy they may need to accumulate
its entry cost. During that time they keep paying their current rent and
invest whatever is left of the monthly budget (possibly a negative amount).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .investment import advance_investment, net_investment_value
from .timeline import annual_step_up, deflator, year_of_month
from .types import InvestmentState, MonthlySnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavingsPhaseResult:
    months: int
    final_investment: InvestmentState
    snapshots: tuple[MonthlySnapshot, ...]
    total_rent_paid: float
    total_spent_real: float
    reached_target: bool

    @property
    def capital(self) -> float:
        """Net capital available at the end of the phase."""
        return net_investment_value(self.final_investment)


def calculate_savings_phase(
    current_capital: float,
    current_rent: float,
    monthly_budget: float,
    target_amount: float,
    investment_rate: float,
    ipca_rate: float,
    max_months: int,
    rent_adjustment_rate: float | None = None,
) -> SavingsPhaseResult:
    """Simulate saving towards ``target_amount``.

    Each month: step rent (by ``rent_adjustment_rate``, or IPCA when None)
    and budget (by IPCA) at year boundaries, pay rent, invest
    ``budget - rent`` and stop as soon as the net investment value reaches
    the target.

    Args:
        current_capital: Capital available today (seeds the investment).
        current_rent: Rent paid today while saving.
        monthly_budget: Housing + saving budget for the first month.
        target_amount: Entry cost to accumulate.
        investment_rate: Monthly gross investment return.
        ipca_rate: Annual inflation.
        max_months: Upper bound on the phase (normally the horizon).
        rent_adjustment_rate: Annual rent adjustment.

    Returns:
        SavingsPhaseResult. When the target is never reached, ``months`` equals
        ``max_months`` and ``reached_target`` is False: the whole horizon was
        spent saving and the caller must skip the ownership phase.
    """
    rent_growth = ipca_rate if rent_adjustment_rate is None else rent_adjustment_rate
    investment = InvestmentState.seeded(current_capital)

    if current_capital >= target_amount:
        return SavingsPhaseResult(
            months=0,
            final_investment=investment,
            snapshots=(),
            total_rent_paid=0.0,
            total_spent_real=0.0,
            reached_target=True,
        )

    total_rent_paid = 0.0
    total_spent_real = 0.0
    snapshots: list[MonthlySnapshot] = []

    for m in range(1, int(max_months) + 1):
        rent = annual_step_up(current_rent, rent_growth, m)
        budget = annual_step_up(monthly_budget, ipca_rate, m)
        defl = deflator(ipca_rate, m)

        total_rent_paid += rent
        total_spent_real += rent / defl

        surplus = budget - rent
        investment = advance_investment(investment, investment_rate, surplus)
        net_wealth = net_investment_value(investment)

        snapshots.append(
            MonthlySnapshot(
                month=m,
                year=year_of_month(m),
                rent_paid=rent,
                investment_balance=net_wealth,
                investment_contribution=surplus,
                total_wealth=net_wealth,
                total_spent=total_rent_paid,
                total_wealth_real=net_wealth / defl,
                total_spent_real=total_spent_real,
            )
        )

        if net_wealth >= target_amount:
            logger.debug("Savings target %.2f reached after %d months", target_amount, m)
            return SavingsPhaseResult(
                months=m,
                final_investment=investment,
                snapshots=tuple(snapshots),
                total_rent_paid=total_rent_paid,
                total_spent_real=total_spent_real,
                reached_target=True,
            )

    logger.debug("Savings target %.2f not reached within %d months", target_amount, max_months)
    return SavingsPhaseResult(
        months=int(max_months),
        final_investment=investment,
        snapshots=tuple(snapshots),
        total_rent_paid=total_rent_paid,
        total_spent_real=total_spent_real,
        reached_target=False,
    )
