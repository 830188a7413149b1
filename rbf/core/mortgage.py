"""Loan amortization schedules (SAC and PRICE)."""

from __future__ import annotations

from .types import AmortizationRow, AmortizationType


class InvalidLoanTermError(ValueError):
    """Raised when a schedule is requested for a term shorter than one month."""


def annual_to_monthly_rate(annual: float) -> float:
    """Convert an annual effective rate (decimal) to the equivalent monthly rate.

    Uses compound conversion ``(1 + annual)^(1/12) - 1``. The monthly rate is
    clamped above -100% so ``1 + mr`` stays positive.
    """
    r = float(annual)
    if r <= -0.999999:
        r = -0.999999
    mr = (1.0 + r) ** (1.0 / 12.0) - 1.0
    return max(float(mr), -0.999999)


def _check_term(term_months: int) -> int:
    try:
        n = int(term_months)
    except (TypeError, ValueError) as exc:
        raise InvalidLoanTermError(f"Loan term must be a whole number of months, got {term_months!r}") from exc
    if n < 1:
        raise InvalidLoanTermError(f"Loan term must be at least 1 month, got {n}")
    return n


def _pmt(principal: float, mr: float, n: int) -> float:
    """Fixed annuity installment for a loan.

    Args:
        principal: Loan principal.
        mr: Effective monthly rate (decimal).
        n: Number of months (>= 1).

    Returns:
        Monthly installment (principal + interest only).
    """
    principal = float(principal)
    if principal <= 0:
        return 0.0
    if abs(mr) < 1e-12:
        return principal / float(n)
    pow_ = (1.0 + mr) ** n
    return principal * (mr * pow_) / (pow_ - 1.0)


def generate_sac_schedule(
    loan_amount: float,
    annual_rate: float,
    term_months: int,
    property_value: float,
    mip_rate: float,
    dfi_rate: float,
    admin_fee: float,
) -> list[AmortizationRow]:
    """Constant-amortization schedule: fixed principal, declining payment."""
    n = _check_term(term_months)
    mr = annual_to_monthly_rate(annual_rate)
    fixed_principal = float(loan_amount) / n
    dfi = float(property_value) * dfi_rate
    balance = float(loan_amount)
    schedule: list[AmortizationRow] = []

    for m in range(1, n + 1):
        interest = balance * mr
        insurance = balance * mip_rate + dfi
        payment = fixed_principal + interest + insurance + admin_fee

        # Clamp to absorb floating-point drift on the last rows.
        balance = max(balance - fixed_principal, 0.0)

        schedule.append(
            AmortizationRow(
                month=m,
                payment=payment,
                principal=fixed_principal,
                interest=interest,
                insurance=insurance,
                admin_fee=float(admin_fee),
                outstanding_balance=balance,
            )
        )

    return schedule


def generate_price_schedule(
    loan_amount: float,
    annual_rate: float,
    term_months: int,
    property_value: float,
    mip_rate: float,
    dfi_rate: float,
    admin_fee: float,
) -> list[AmortizationRow]:
    """Fixed-installment (French) schedule.

    The base installment (principal + interest) is constant; insurance and
    the admin fee float on top, so the total payment is only approximately
    fixed.
    """
    n = _check_term(term_months)
    mr = annual_to_monthly_rate(annual_rate)
    base_pmt = _pmt(loan_amount, mr, n)
    dfi = float(property_value) * dfi_rate
    balance = float(loan_amount)
    schedule: list[AmortizationRow] = []

    for m in range(1, n + 1):
        interest = balance * mr
        principal = base_pmt - interest
        insurance = balance * mip_rate + dfi
        payment = base_pmt + insurance + admin_fee

        balance = max(balance - principal, 0.0)

        schedule.append(
            AmortizationRow(
                month=m,
                payment=payment,
                principal=principal,
                interest=interest,
                insurance=insurance,
                admin_fee=float(admin_fee),
                outstanding_balance=balance,
            )
        )

    return schedule


def generate_schedule(
    amortization_type: AmortizationType,
    loan_amount: float,
    annual_rate: float,
    term_months: int,
    property_value: float,
    mip_rate: float,
    dfi_rate: float,
    admin_fee: float,
) -> list[AmortizationRow]:
    """Dispatch to the schedule generator for ``amortization_type``."""
    args = (loan_amount, annual_rate, term_months, property_value, mip_rate, dfi_rate, admin_fee)
    if amortization_type is AmortizationType.SAC:
        return generate_sac_schedule(*args)
    if amortization_type is AmortizationType.PRICE:
        return generate_price_schedule(*args)
    raise ValueError(f"Unhandled amortization type: {amortization_type!r}")
