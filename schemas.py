"""
Schemas for salary settings

SalaryInfoRecord is what gets persisted per employee (collection ``salary_info``).
Only percentages and flat inputs are stored; component amounts are derived on read.
"""
from datetime import MAXYEAR, date
from decimal import Decimal
from typing import Optional, Union, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from payroll_config import (
    DEFAULT_PERCENTAGES,
    DEFAULT_PROFESSIONAL_TAX,
    DEFAULT_WAGE_TYPE,
    DEFAULT_WORKING_DAYS_PER_MONTH,
    MIN_PAYROLL_YEAR,
)

# Form fields may arrive as strings
FormNumber = Optional[Union[float, str]]


class PercentageInput(BaseModel):
    # Accept both snake_case and the camelCase field names sent by the web client
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    basic_salary_percentage: FormNumber = None
    hra_percentage: FormNumber = None
    standard_allowance_percentage: FormNumber = None
    performance_bonus_percentage: FormNumber = None
    leave_travel_allowance_percentage: FormNumber = None
    pf_employee_percentage: FormNumber = None
    pf_employer_percentage: FormNumber = None

    def percentages(self) -> Dict[str, object]:
        return {name: getattr(self, name) for name in DEFAULT_PERCENTAGES}


class SalaryCalculationRequest(PercentageInput):
    monthly_wage: FormNumber = None
    fixed_allowance_percentage: FormNumber = Field(None, description="Pin the fixed allowance to this percentage")
    professional_tax: FormNumber = None


class SalaryInfoUpdate(PercentageInput):
    wage_type: str = Field(DEFAULT_WAGE_TYPE, description="Fixed or Hourly")
    monthly_wage: FormNumber = None
    fixed_allowance_percentage: FormNumber = None
    professional_tax: FormNumber = None


class SalaryInfoRecord(BaseModel):
    employee_id: str
    wage_type: str = DEFAULT_WAGE_TYPE
    monthly_wage: Decimal
    basic_salary_percentage: Decimal = DEFAULT_PERCENTAGES['basic_salary_percentage']
    hra_percentage: Decimal = DEFAULT_PERCENTAGES['hra_percentage']
    standard_allowance_percentage: Decimal = DEFAULT_PERCENTAGES['standard_allowance_percentage']
    performance_bonus_percentage: Decimal = DEFAULT_PERCENTAGES['performance_bonus_percentage']
    leave_travel_allowance_percentage: Decimal = DEFAULT_PERCENTAGES['leave_travel_allowance_percentage']
    pf_employee_percentage: Decimal = DEFAULT_PERCENTAGES['pf_employee_percentage']
    pf_employer_percentage: Decimal = DEFAULT_PERCENTAGES['pf_employer_percentage']
    fixed_allowance_percentage: Optional[Decimal] = Field(None, description="Set when the fixed allowance is pinned")
    professional_tax: Decimal = DEFAULT_PROFESSIONAL_TAX

    def percentages(self) -> Dict[str, Decimal]:
        return {name: getattr(self, name) for name in DEFAULT_PERCENTAGES}


class SalaryBreakdownResult(BaseModel):
    wage_type: str = DEFAULT_WAGE_TYPE
    monthly_wage: float
    yearly_wage: float
    basic_salary: float
    basic_salary_percentage: float
    hra: float
    hra_percentage: float
    standard_allowance: float
    standard_allowance_percentage: float
    performance_bonus: float
    performance_bonus_percentage: float
    leave_travel_allowance: float
    leave_travel_allowance_percentage: float
    fixed_allowance: float
    fixed_allowance_percentage: float
    fixed_allowance_pinned: bool
    pf_employee: float
    pf_employee_percentage: float
    pf_employer: float
    pf_employer_percentage: float
    professional_tax: float
    status: str = Field(..., description="ok or overcommitted")
    deficit: float = 0.0


class PayslipRequest(BaseModel):
    month: int = Field(..., ge=1, le=12, description="Pay period month (1-12)")
    year: int = Field(..., ge=MIN_PAYROLL_YEAR, le=MAXYEAR, description="Pay period year")
    present_days: Optional[int] = Field(None, ge=0, description="Days present in the period")
    leave_days: int = Field(0, ge=0)
    working_days: int = Field(DEFAULT_WORKING_DAYS_PER_MONTH, gt=0)


class PayslipResult(BaseModel):
    employee_id: str
    month: int
    year: int
    period_start: date
    period_end: date
    earnings: Dict[str, float]
    deductions: Dict[str, float]
    employer_contributions: Dict[str, float]
    gross_salary: float
    total_deductions: float
    net_salary: float
    paid_days: Optional[int] = None
    working_days: int
