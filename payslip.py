"""
Payslip builder.

Turns a wage breakdown into the read-only payslip summary: earnings lines,
deductions, employer contributions and net pay for one pay period.
"""
import calendar
from datetime import MAXYEAR, date
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel

from payroll_config import DEFAULT_PROFESSIONAL_TAX, DEFAULT_WORKING_DAYS_PER_MONTH, MIN_PAYROLL_YEAR
from salary_calculator import WageBreakdown, ZERO, parse_professional_tax, round_money


class Payslip(BaseModel):
    month: int
    year: int
    period_start: date
    period_end: date
    earnings: Dict[str, Decimal]
    deductions: Dict[str, Decimal]
    employer_contributions: Dict[str, Decimal]
    gross_salary: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    paid_days: Optional[int] = None
    working_days: int = DEFAULT_WORKING_DAYS_PER_MONTH


def pay_period(month: int, year: int):
    """
    First and last day of a monthly pay period.

    Raises:
        ValueError: If month is not 1-12 or year is outside MIN_PAYROLL_YEAR..MAXYEAR
    """
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    if not MIN_PAYROLL_YEAR <= year <= MAXYEAR:
        raise ValueError(f"year must be between {MIN_PAYROLL_YEAR} and {MAXYEAR}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def build_payslip(
    breakdown: WageBreakdown,
    month: int,
    year: int,
    professional_tax=DEFAULT_PROFESSIONAL_TAX,
    present_days: Optional[int] = None,
    leave_days: int = 0,
    working_days: int = DEFAULT_WORKING_DAYS_PER_MONTH,
) -> Payslip:
    """
    Build the payslip for one month from an unrounded breakdown.

    Net pay is prorated by attendance when ``present_days`` is given:
    ``net / working_days * (present_days + leave_days)``.
    An unusable professional tax falls back to the default amount.

    Raises:
        ValueError: If the period is invalid, working_days is not positive
            or day counts are negative
    """
    period_start, period_end = pay_period(month, year)
    if working_days <= 0:
        raise ValueError("working_days must be greater than 0")
    if present_days is not None and (present_days < 0 or leave_days < 0):
        raise ValueError("Attendance day counts cannot be negative")

    earnings = {
        'basic_salary': breakdown.basic_salary,
        'hra': breakdown.hra,
        'standard_allowance': breakdown.standard_allowance,
        'performance_bonus': breakdown.performance_bonus,
        'leave_travel_allowance': breakdown.leave_travel_allowance,
        'fixed_allowance': breakdown.fixed_allowance,
    }
    deductions = {
        'pf_employee': breakdown.pf_employee,
        'professional_tax': parse_professional_tax(professional_tax),
    }

    gross = sum(earnings.values(), ZERO)
    total_deductions = sum(deductions.values(), ZERO)
    net = gross - total_deductions

    paid_days = None
    if present_days is not None:
        paid_days = present_days + leave_days
        net = net / Decimal(working_days) * Decimal(paid_days)

    return Payslip(
        month=month,
        year=year,
        period_start=period_start,
        period_end=period_end,
        earnings={k: round_money(v) for k, v in earnings.items()},
        deductions={k: round_money(v) for k, v in deductions.items()},
        employer_contributions={'pf_employer': round_money(breakdown.pf_employer)},
        gross_salary=round_money(gross),
        total_deductions=round_money(total_deductions),
        net_salary=round_money(net),
        paid_days=paid_days,
        working_days=working_days,
    )
