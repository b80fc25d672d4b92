import os
import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from config import Config
from payroll_config import DEFAULT_WAGE_TYPE, WAGE_TYPES
from payslip import build_payslip
from salary_calculator import (
    Overcommitted,
    WageBreakdown,
    assess,
    derive_from_fixed_allowance_percentage,
    derive_from_wage,
    parse_professional_tax,
    resolve_percentages,
    to_decimal,
    validate_for_save,
)
from salary_store import MongoSalaryStore, get_salary_store
from schemas import (
    PayslipRequest,
    PayslipResult,
    SalaryBreakdownResult,
    SalaryCalculationRequest,
    SalaryInfoRecord,
    SalaryInfoUpdate,
)

logger = logging.getLogger(__name__)


def setup_logging():
    """Configure root logging from Config."""
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format=Config.LOG_FORMAT,
    )
    logger.info(f"Logging initialized with level {Config.LOG_LEVEL}")


setup_logging()

app = FastAPI(title="Salary API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SalaryValidationError(Exception):
    """Salary input rejected before it could be saved."""

    def __init__(self, errors):
        super().__init__("; ".join(errors))
        self.errors = errors


@app.exception_handler(SalaryValidationError)
async def salary_validation_error_handler(request: Request, exc: SalaryValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "errors": [{"msg": e} for e in exc.errors]},
    )


@app.get("/")
def read_root():
    return {"message": "Salary API Running"}


# Helper to round to 2 decimals for display
rd = lambda x: round(float(x or 0), 2)


def derive(monthly_wage, percentages, fixed_allowance_percentage=None) -> WageBreakdown:
    # A usable fixed allowance percentage switches to pinned mode
    if to_decimal(fixed_allowance_percentage) is not None:
        return derive_from_fixed_allowance_percentage(monthly_wage, fixed_allowance_percentage, percentages)
    return derive_from_wage(monthly_wage, percentages)


def breakdown_result(breakdown: WageBreakdown, professional_tax, wage_type: str = DEFAULT_WAGE_TYPE) -> SalaryBreakdownResult:
    outcome = assess(breakdown)
    deficit = outcome.deficit if isinstance(outcome, Overcommitted) else 0
    shown = breakdown.rounded()
    pcts = shown.percentages

    return SalaryBreakdownResult(
        wage_type=wage_type,
        monthly_wage=rd(shown.monthly_wage),
        yearly_wage=rd(shown.yearly_wage),
        basic_salary=rd(shown.basic_salary),
        basic_salary_percentage=rd(pcts.basic_salary_percentage),
        hra=rd(shown.hra),
        hra_percentage=rd(pcts.hra_percentage),
        standard_allowance=rd(shown.standard_allowance),
        standard_allowance_percentage=rd(pcts.standard_allowance_percentage),
        performance_bonus=rd(shown.performance_bonus),
        performance_bonus_percentage=rd(pcts.performance_bonus_percentage),
        leave_travel_allowance=rd(shown.leave_travel_allowance),
        leave_travel_allowance_percentage=rd(pcts.leave_travel_allowance_percentage),
        fixed_allowance=rd(shown.fixed_allowance),
        fixed_allowance_percentage=rd(shown.fixed_allowance_percentage),
        fixed_allowance_pinned=shown.fixed_allowance_pinned,
        pf_employee=rd(shown.pf_employee),
        pf_employee_percentage=rd(pcts.pf_employee_percentage),
        pf_employer=rd(shown.pf_employer),
        pf_employer_percentage=rd(pcts.pf_employer_percentage),
        professional_tax=rd(professional_tax),
        status="overcommitted" if isinstance(outcome, Overcommitted) else "ok",
        deficit=rd(deficit),
    )


def record_breakdown(record: SalaryInfoRecord) -> WageBreakdown:
    return derive(record.monthly_wage, record.percentages(), record.fixed_allowance_percentage)


def load_record(employee_id: str, store) -> SalaryInfoRecord:
    record = store.get(employee_id)
    if record is None:
        logger.info(f"No salary information for employee {employee_id}")
        raise HTTPException(status_code=404, detail="Salary information not found")
    return record


@app.post("/api/salary/calculate", response_model=SalaryBreakdownResult)
def calculate_salary(payload: SalaryCalculationRequest):
    # Live preview: invalid wage input is treated as 0, never rejected
    breakdown = derive(payload.monthly_wage, payload.percentages(), payload.fixed_allowance_percentage)
    return breakdown_result(breakdown, parse_professional_tax(payload.professional_tax))


@app.get("/api/employees/{employee_id}/salary", response_model=SalaryBreakdownResult)
def get_salary_info(employee_id: str, store=Depends(get_salary_store)):
    record = load_record(employee_id, store)
    return breakdown_result(record_breakdown(record), record.professional_tax, record.wage_type)


@app.put("/api/employees/{employee_id}/salary", response_model=SalaryBreakdownResult)
def update_salary_info(employee_id: str, payload: SalaryInfoUpdate, store=Depends(get_salary_store)):
    raw_percentages = payload.percentages()
    raw_percentages["fixed_allowance_percentage"] = payload.fixed_allowance_percentage

    validation = validate_for_save(payload.monthly_wage, raw_percentages, payload.professional_tax)
    errors = list(validation.errors)
    if payload.wage_type not in WAGE_TYPES:
        errors.append(f"Wage type must be one of: {', '.join(WAGE_TYPES)}")
    if errors:
        logger.warning(f"Rejected salary update for employee {employee_id}: {errors}")
        raise SalaryValidationError(errors)

    percentages = resolve_percentages(payload.percentages())
    record = SalaryInfoRecord(
        employee_id=employee_id,
        wage_type=payload.wage_type,
        monthly_wage=to_decimal(payload.monthly_wage),
        fixed_allowance_percentage=to_decimal(payload.fixed_allowance_percentage),
        professional_tax=parse_professional_tax(payload.professional_tax),
        **percentages.model_dump(),
    )
    # Derive before saving so a record that cannot be presented is never stored
    breakdown = record_breakdown(record)
    result = breakdown_result(breakdown, record.professional_tax, record.wage_type)
    outcome = assess(breakdown)
    if isinstance(outcome, Overcommitted):
        logger.warning(
            f"Salary components for employee {employee_id} exceed the wage by {rd(outcome.deficit)}"
        )

    store.save(record)
    logger.info(f"Saved salary information for employee {employee_id}")
    return result


@app.post("/api/employees/{employee_id}/payslip", response_model=PayslipResult)
def generate_payslip(employee_id: str, payload: PayslipRequest, store=Depends(get_salary_store)):
    record = load_record(employee_id, store)
    slip = build_payslip(
        record_breakdown(record),
        payload.month,
        payload.year,
        record.professional_tax,
        present_days=payload.present_days,
        leave_days=payload.leave_days,
        working_days=payload.working_days,
    )
    logger.info(f"Generated payslip for employee {employee_id} for {payload.month:02d}/{payload.year}")
    return PayslipResult(
        employee_id=employee_id,
        month=slip.month,
        year=slip.year,
        period_start=slip.period_start,
        period_end=slip.period_end,
        earnings={k: rd(v) for k, v in slip.earnings.items()},
        deductions={k: rd(v) for k, v in slip.deductions.items()},
        employer_contributions={k: rd(v) for k, v in slip.employer_contributions.items()},
        gross_salary=rd(slip.gross_salary),
        total_deductions=rd(slip.total_deductions),
        net_salary=rd(slip.net_salary),
        paid_days=slip.paid_days,
        working_days=slip.working_days,
    )


@app.get("/test")
def storage_status(store=Depends(get_salary_store)):
    """Report which salary store is active and whether it answers"""
    if not isinstance(store, MongoSalaryStore):
        return {"backend": "Running", "storage": "memory", "connection_status": "Not Applicable"}

    response = {
        "backend": "Running",
        "storage": "mongodb",
        "collection": store.collection.name,
        "connection_status": "Connected",
    }
    try:
        store.collection.database.command("ping")
    except PyMongoError as e:
        logger.error(f"Salary store ping failed: {str(e)}")
        response["connection_status"] = f"Error: {str(e)[:50]}"
    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", Config.PORT))
    uvicorn.run(app, host=Config.HOST, port=port)
