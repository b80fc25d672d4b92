import pytest
from fastapi.testclient import TestClient

from main import app
from payroll_config import DEFAULT_WAGE_TYPE
from salary_store import MemorySalaryStore, MongoSalaryStore, get_salary_store


@pytest.fixture
def client():
    store = MemorySalaryStore()
    app.dependency_overrides[get_salary_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Salary API Running"}


def test_calculate_accepts_form_strings(client, scenario_a):
    body = {
        "monthlyWage": "50000",
        "basicSalaryPercentage": "60",
        "hraPercentage": 10,
        "standardAllowancePercentage": 0.5,
        "performanceBonusPercentage": 8.33,
        "leaveTravelAllowancePercentage": 8.33,
        "pfEmployeePercentage": 12,
        "pfEmployerPercentage": 12,
    }
    response = client.post("/api/salary/calculate", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["yearly_wage"] == 600000.0
    assert data["basic_salary"] == 30000.0
    assert data["hra"] == 3000.0
    assert data["standard_allowance"] == 250.0
    assert data["performance_bonus"] == 2499.0
    assert data["fixed_allowance"] == 11752.0
    assert data["fixed_allowance_percentage"] == 23.5
    assert data["pf_employee"] == 3600.0
    assert data["professional_tax"] == 200.0
    assert data["status"] == "ok"
    assert data["deficit"] == 0.0


def test_calculate_reports_default_wage_type(client):
    data = client.post("/api/salary/calculate", json={"monthly_wage": 1000}).json()
    assert data["wage_type"] == DEFAULT_WAGE_TYPE


def test_calculate_preview_treats_bad_wage_as_zero(client):
    response = client.post("/api/salary/calculate", json={"monthly_wage": "abc"})
    assert response.status_code == 200
    data = response.json()
    assert data["monthly_wage"] == 0.0
    assert data["fixed_allowance"] == 0.0
    assert data["fixed_allowance_percentage"] == 0.0


def test_calculate_reports_overcommitment(client):
    body = {
        "monthly_wage": 10000,
        "basic_salary_percentage": 90,
        "hra_percentage": 50,
        "standard_allowance_percentage": 0,
        "performance_bonus_percentage": 0,
        "leave_travel_allowance_percentage": 0,
    }
    data = client.post("/api/salary/calculate", json=body).json()
    assert data["fixed_allowance"] == -3500.0
    assert data["status"] == "overcommitted"
    assert data["deficit"] == 3500.0


def test_calculate_with_pinned_fixed_allowance(client, scenario_a):
    body = dict(scenario_a, monthly_wage=50000, fixed_allowance_percentage=20)
    data = client.post("/api/salary/calculate", json=body).json()
    assert data["fixed_allowance"] == 10000.0
    assert data["fixed_allowance_pinned"] is True


def test_get_missing_salary_info(client):
    response = client.get("/api/employees/EMP00001/salary")
    assert response.status_code == 404


@pytest.mark.parametrize("wage", [None, "", "abc", -5])
def test_save_rejects_invalid_wage(client, wage):
    response = client.put("/api/employees/EMP00001/salary", json={"monthly_wage": wage})
    assert response.status_code == 400
    assert response.json()["errors"][0]["msg"] == "Please enter a valid monthly wage"
    assert client.get("/api/employees/EMP00001/salary").status_code == 404


def test_save_rejects_out_of_range_percentage(client):
    response = client.put(
        "/api/employees/EMP00001/salary",
        json={"monthly_wage": 50000, "hra_percentage": 150},
    )
    assert response.status_code == 400
    assert response.json()["errors"] == [{"msg": "HRA percentage must be between 0 and 100"}]


def test_save_rejects_unknown_wage_type(client):
    response = client.put(
        "/api/employees/EMP00001/salary",
        json={"monthly_wage": 50000, "wage_type": "Weekly"},
    )
    assert response.status_code == 400


def test_save_then_read_back(client, scenario_a):
    body = dict(scenario_a, monthlyWage="50000", professionalTax=250, wageType="Fixed")
    saved = client.put("/api/employees/EMP00001/salary", json=body)
    assert saved.status_code == 200

    loaded = client.get("/api/employees/EMP00001/salary")
    assert loaded.status_code == 200
    assert loaded.json() == saved.json()
    assert loaded.json()["professional_tax"] == 250.0
    assert loaded.json()["fixed_allowance"] == 11752.0


def test_save_fills_missing_percentages_with_defaults(client):
    data = client.put("/api/employees/EMP00002/salary", json={"monthly_wage": 10000}).json()
    assert data["basic_salary_percentage"] == 60.0
    assert data["hra_percentage"] == 10.0
    assert data["basic_salary"] == 6000.0
    assert data["professional_tax"] == 200.0


@pytest.mark.parametrize("wage", ["1e25", "1e999999", 1000000000000.01])
def test_save_rejects_wage_above_limit(client, wage):
    response = client.put("/api/employees/EMP00001/salary", json={"monthly_wage": wage})
    assert response.status_code == 400
    assert response.json()["errors"] == [{"msg": "Monthly wage must not exceed 1000000000000"}]
    assert client.get("/api/employees/EMP00001/salary").status_code == 404


def test_save_accepts_wage_at_limit(client):
    response = client.put("/api/employees/EMP00001/salary", json={"monthly_wage": "1000000000000"})
    assert response.status_code == 200
    assert response.json()["yearly_wage"] == 12000000000000.0
    assert client.get("/api/employees/EMP00001/salary").status_code == 200


@pytest.mark.parametrize("wage", ["1e25", "1e999999"])
def test_preview_of_oversized_wage_does_not_fail(client, wage):
    response = client.post("/api/salary/calculate", json={"monthly_wage": wage})
    assert response.status_code == 200
    assert response.json()["monthly_wage"] == 0.0


def test_preview_negative_professional_tax_takes_default(client):
    data = client.post("/api/salary/calculate", json={"monthly_wage": 1000, "professional_tax": -5}).json()
    assert data["professional_tax"] == 200.0


def test_payslip_from_saved_salary(client, scenario_a):
    client.put("/api/employees/EMP00001/salary", json=dict(scenario_a, monthly_wage=50000))

    response = client.post(
        "/api/employees/EMP00001/payslip",
        json={"month": 2, "year": 2024, "present_days": 20, "leave_days": 4},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["month"] == 2
    assert data["year"] == 2024
    assert data["period_start"] == "2024-02-01"
    assert data["period_end"] == "2024-02-29"
    assert data["gross_salary"] == 50000.0
    assert data["total_deductions"] == 3800.0
    assert data["net_salary"] == 36960.0
    assert data["paid_days"] == 24


def test_payslip_without_attendance(client, scenario_a):
    client.put("/api/employees/EMP00001/salary", json=dict(scenario_a, monthly_wage=50000))
    data = client.post("/api/employees/EMP00001/payslip", json={"month": 11, "year": 2025}).json()
    assert data["net_salary"] == 46200.0
    assert data["paid_days"] is None
    assert data["period_end"] == "2025-11-30"


def test_payslip_requires_salary_info(client):
    response = client.post("/api/employees/EMP00009/payslip", json={"month": 1, "year": 2025})
    assert response.status_code == 404


@pytest.mark.parametrize("body", [
    {"month": 1, "year": 2025, "working_days": 0},
    {"month": 0, "year": 2025},
    {"month": 13, "year": 2025},
    {"month": 1, "year": 1999},
    {"year": 2025},
    {"month": 1},
])
def test_payslip_rejects_bad_request(client, scenario_a, body):
    client.put("/api/employees/EMP00001/salary", json=dict(scenario_a, monthly_wage=50000))
    response = client.post("/api/employees/EMP00001/payslip", json=body)
    assert response.status_code == 422


def test_status_with_memory_store(client):
    response = client.get("/test")
    assert response.status_code == 200
    assert response.json() == {"backend": "Running", "storage": "memory", "connection_status": "Not Applicable"}


def test_status_with_mongo_store(fake_db):
    app.dependency_overrides[get_salary_store] = lambda: MongoSalaryStore(fake_db)
    try:
        data = TestClient(app).get("/test").json()
    finally:
        app.dependency_overrides.clear()
    assert data["storage"] == "mongodb"
    assert data["collection"] == "salary_info"
    assert data["connection_status"] == "Connected"
    assert fake_db.commands == ["ping"]
