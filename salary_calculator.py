"""
Salary breakdown calculator.

Derives every payslip line item from a monthly wage and a set of component
percentages. This is the single derivation rule used by the employee salary
screen, the self-service profile and the payslip builder.

All arithmetic runs on unrounded Decimal values; rounding to 2 decimals happens
only when a breakdown is presented (see ``WageBreakdown.rounded``).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from payroll_config import (
    DEFAULT_PERCENTAGES,
    DEFAULT_PROFESSIONAL_TAX,
    MAX_MONTHLY_WAGE,
    MAX_PROFESSIONAL_TAX,
    MONTHS_PER_YEAR,
    PERCENTAGE_MAX,
    PERCENTAGE_MIN,
)

HUNDRED = Decimal('100')
ZERO = Decimal('0')
CENT = Decimal('0.01')

WAGE_ERROR = "Please enter a valid monthly wage"
WAGE_LIMIT_ERROR = f"Monthly wage must not exceed {MAX_MONTHLY_WAGE}"
PROFESSIONAL_TAX_ERROR = "Professional tax must be a valid number greater than or equal to 0"
PROFESSIONAL_TAX_LIMIT_ERROR = f"Professional tax must not exceed {MAX_PROFESSIONAL_TAX}"

PERCENTAGE_LABELS = {
    'basic_salary_percentage': 'Basic salary percentage',
    'hra_percentage': 'HRA percentage',
    'standard_allowance_percentage': 'Standard allowance percentage',
    'performance_bonus_percentage': 'Performance bonus percentage',
    'leave_travel_allowance_percentage': 'Leave travel allowance percentage',
    'pf_employee_percentage': 'PF employee percentage',
    'pf_employer_percentage': 'PF employer percentage',
    'fixed_allowance_percentage': 'Fixed allowance percentage',
}

MONEY_FIELDS = (
    'monthly_wage',
    'yearly_wage',
    'basic_salary',
    'hra',
    'standard_allowance',
    'performance_bonus',
    'leave_travel_allowance',
    'fixed_allowance',
    'pf_employee',
    'pf_employer',
)


# ==================== TYPES ====================

class SalaryPercentages(BaseModel):
    """Component percentages; each one falls back to its default when absent."""
    model_config = ConfigDict(frozen=True)

    basic_salary_percentage: Decimal = DEFAULT_PERCENTAGES['basic_salary_percentage']
    hra_percentage: Decimal = DEFAULT_PERCENTAGES['hra_percentage']
    standard_allowance_percentage: Decimal = DEFAULT_PERCENTAGES['standard_allowance_percentage']
    performance_bonus_percentage: Decimal = DEFAULT_PERCENTAGES['performance_bonus_percentage']
    leave_travel_allowance_percentage: Decimal = DEFAULT_PERCENTAGES['leave_travel_allowance_percentage']
    pf_employee_percentage: Decimal = DEFAULT_PERCENTAGES['pf_employee_percentage']
    pf_employer_percentage: Decimal = DEFAULT_PERCENTAGES['pf_employer_percentage']


class Remainder(BaseModel):
    """Fixed allowance is whatever the named components leave of the wage."""
    model_config = ConfigDict(frozen=True)


class Pinned(BaseModel):
    """Fixed allowance is pinned to a percentage of the wage by the operator."""
    model_config = ConfigDict(frozen=True)

    percentage: Decimal


FixedAllowanceMode = Union[Remainder, Pinned]

REMAINDER = Remainder()


class WageBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    monthly_wage: Decimal
    yearly_wage: Decimal
    percentages: SalaryPercentages
    basic_salary: Decimal
    hra: Decimal
    standard_allowance: Decimal
    performance_bonus: Decimal
    leave_travel_allowance: Decimal
    fixed_allowance: Decimal
    fixed_allowance_percentage: Decimal
    fixed_allowance_pinned: bool = False
    pf_employee: Decimal
    pf_employer: Decimal

    @property
    def named_components_total(self) -> Decimal:
        """Earnings excluding the fixed allowance."""
        return (
            self.basic_salary
            + self.hra
            + self.standard_allowance
            + self.performance_bonus
            + self.leave_travel_allowance
        )

    @property
    def earnings_total(self) -> Decimal:
        return self.named_components_total + self.fixed_allowance

    def rounded(self) -> 'WageBreakdown':
        """Copy with money fields and the fixed allowance percentage at 2 decimals."""
        update = {name: round_money(getattr(self, name)) for name in MONEY_FIELDS}
        update['fixed_allowance_percentage'] = round_money(self.fixed_allowance_percentage)
        return self.model_copy(update=update)


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class Ok(BaseModel):
    model_config = ConfigDict(frozen=True)

    breakdown: WageBreakdown


class Overcommitted(BaseModel):
    """Components claim more than the wage; ``deficit`` is the excess."""
    model_config = ConfigDict(frozen=True)

    breakdown: WageBreakdown
    deficit: Decimal


BreakdownOutcome = Union[Ok, Overcommitted]


# ==================== INPUT PARSING ====================

def to_decimal(value) -> Optional[Decimal]:
    """
    Convert a form or JSON value to a finite Decimal.

    Returns None for missing, blank, boolean, non-numeric or non-finite input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    if not result.is_finite():
        return None
    return result


def parse_monthly_wage(value) -> Decimal:
    """Parse a monthly wage; anything unusable, negative or above the maximum counts as 0."""
    wage = to_decimal(value)
    if wage is None or wage < ZERO or wage > MAX_MONTHLY_WAGE:
        return ZERO
    return wage


def parse_professional_tax(value) -> Decimal:
    """Parse a flat professional tax; anything unusable, negative or too large takes the default."""
    tax = to_decimal(value)
    if tax is None or tax < ZERO or tax > MAX_PROFESSIONAL_TAX:
        return DEFAULT_PROFESSIONAL_TAX
    return tax


def clamp_percentage(value, default: Decimal) -> Decimal:
    """Absent or unparseable percentages take the default; others are clamped to [0, 100]."""
    percentage = to_decimal(value)
    if percentage is None:
        return default
    return min(max(percentage, PERCENTAGE_MIN), PERCENTAGE_MAX)


def resolve_percentages(
    percentages: Union[SalaryPercentages, Mapping, None] = None,
) -> SalaryPercentages:
    """Normalise caller percentages into a clamped SalaryPercentages."""
    if percentages is None:
        raw = {}
    elif isinstance(percentages, SalaryPercentages):
        raw = percentages.model_dump()
    else:
        raw = dict(percentages)

    resolved = {
        name: clamp_percentage(raw.get(name), default)
        for name, default in DEFAULT_PERCENTAGES.items()
    }
    return SalaryPercentages(**resolved)


def round_money(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


# ==================== DERIVATION ====================

def derive_breakdown(monthly_wage, percentages=None, mode: FixedAllowanceMode = REMAINDER) -> WageBreakdown:
    """
    Derive a complete wage breakdown.

    Args:
        monthly_wage: Wage as a number or form string; invalid input counts as 0
        percentages: SalaryPercentages, a mapping of percentage fields, or None
        mode: ``REMAINDER`` or ``Pinned(percentage)`` for the fixed allowance

    Returns:
        WageBreakdown: Unrounded breakdown. Overcommitted percentages give a
        negative fixed allowance rather than an error.
    """
    wage = parse_monthly_wage(monthly_wage)
    pcts = resolve_percentages(percentages)

    # Evaluation order matters: each step only uses earlier results
    yearly_wage = wage * MONTHS_PER_YEAR
    basic_salary = wage * pcts.basic_salary_percentage / HUNDRED
    hra = basic_salary * pcts.hra_percentage / HUNDRED
    standard_allowance = wage * pcts.standard_allowance_percentage / HUNDRED
    performance_bonus = basic_salary * pcts.performance_bonus_percentage / HUNDRED
    leave_travel_allowance = basic_salary * pcts.leave_travel_allowance_percentage / HUNDRED

    if isinstance(mode, Pinned):
        fixed_allowance_percentage = clamp_percentage(mode.percentage, ZERO)
        fixed_allowance = wage * fixed_allowance_percentage / HUNDRED
    else:
        fixed_allowance = wage - (
            basic_salary + hra + standard_allowance + performance_bonus + leave_travel_allowance
        )
        fixed_allowance_percentage = fixed_allowance / wage * HUNDRED if wage > ZERO else ZERO

    pf_employee = basic_salary * pcts.pf_employee_percentage / HUNDRED
    pf_employer = basic_salary * pcts.pf_employer_percentage / HUNDRED

    return WageBreakdown(
        monthly_wage=wage,
        yearly_wage=yearly_wage,
        percentages=pcts,
        basic_salary=basic_salary,
        hra=hra,
        standard_allowance=standard_allowance,
        performance_bonus=performance_bonus,
        leave_travel_allowance=leave_travel_allowance,
        fixed_allowance=fixed_allowance,
        fixed_allowance_percentage=fixed_allowance_percentage,
        fixed_allowance_pinned=isinstance(mode, Pinned),
        pf_employee=pf_employee,
        pf_employer=pf_employer,
    )


def derive_from_wage(monthly_wage, percentages=None) -> WageBreakdown:
    """Breakdown where the fixed allowance absorbs the remainder of the wage."""
    return derive_breakdown(monthly_wage, percentages, REMAINDER)


def derive_from_fixed_allowance_percentage(monthly_wage, fixed_allowance_percentage, percentages=None) -> WageBreakdown:
    """Breakdown with the fixed allowance pinned to a percentage of the wage."""
    pinned = Pinned(percentage=clamp_percentage(fixed_allowance_percentage, ZERO))
    return derive_breakdown(monthly_wage, percentages, pinned)


def assess(breakdown: WageBreakdown) -> BreakdownOutcome:
    """Tag a breakdown as Ok or Overcommitted without altering it."""
    if breakdown.fixed_allowance_pinned:
        deficit = breakdown.earnings_total - breakdown.monthly_wage
    else:
        deficit = -breakdown.fixed_allowance
    if deficit > ZERO:
        return Overcommitted(breakdown=breakdown, deficit=deficit)
    return Ok(breakdown=breakdown)


# ==================== VALIDATION ====================

def validate_for_save(monthly_wage, percentages=None, professional_tax=None) -> ValidationResult:
    """
    Check raw salary input before it is persisted.

    Args:
        monthly_wage: Raw wage value; must be a finite number between 0 and MAX_MONTHLY_WAGE
        percentages: Mapping or SalaryPercentages; supplied values must be in [0, 100]
        professional_tax: Optional flat amount; must be between 0 and MAX_PROFESSIONAL_TAX

    Returns:
        ValidationResult: ``valid`` is False when any error was found
    """
    errors = []

    wage = to_decimal(monthly_wage)
    if wage is None or wage < ZERO:
        errors.append(WAGE_ERROR)
    elif wage > MAX_MONTHLY_WAGE:
        errors.append(WAGE_LIMIT_ERROR)

    if isinstance(percentages, SalaryPercentages):
        raw = percentages.model_dump()
    else:
        raw = dict(percentages or {})

    for name, label in PERCENTAGE_LABELS.items():
        value = raw.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        percentage = to_decimal(value)
        if percentage is None or not PERCENTAGE_MIN <= percentage <= PERCENTAGE_MAX:
            errors.append(f"{label} must be between 0 and 100")

    if professional_tax is not None:
        tax = to_decimal(professional_tax)
        if tax is None or tax < ZERO:
            errors.append(PROFESSIONAL_TAX_ERROR)
        elif tax > MAX_PROFESSIONAL_TAX:
            errors.append(PROFESSIONAL_TAX_LIMIT_ERROR)

    return ValidationResult(valid=not errors, errors=errors)
