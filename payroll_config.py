"""
Static payroll defaults used when a salary record leaves a value out.
Per-employee values are stored with the salary record and always win.
"""
from decimal import Decimal

# Default component percentages
DEFAULT_PERCENTAGES = {
    'basic_salary_percentage': Decimal('60'),          # of monthly wage
    'hra_percentage': Decimal('10'),                   # of basic salary
    'standard_allowance_percentage': Decimal('0.5'),   # of monthly wage
    'performance_bonus_percentage': Decimal('8.33'),   # of basic salary
    'leave_travel_allowance_percentage': Decimal('8.33'),  # of basic salary
    'pf_employee_percentage': Decimal('12'),           # of basic salary
    'pf_employer_percentage': Decimal('12'),           # of basic salary
}

DEFAULT_PROFESSIONAL_TAX = Decimal('200')

DEFAULT_WAGE_TYPE = 'Fixed'
WAGE_TYPES = ('Fixed', 'Hourly')

MONTHS_PER_YEAR = Decimal('12')

# Used to prorate net pay against attendance
DEFAULT_WORKING_DAYS_PER_MONTH = 30

# Earliest payroll year accepted for a pay period
MIN_PAYROLL_YEAR = 2000

PERCENTAGE_MIN = Decimal('0')
PERCENTAGE_MAX = Decimal('100')

# Largest flat amounts accepted; keeps every derived amount representable at 2 decimals
MAX_MONTHLY_WAGE = Decimal('1000000000000')
MAX_PROFESSIONAL_TAX = Decimal('1000000000000')
