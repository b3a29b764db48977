import pytest

from modules.security.model import UserRole


def _employee_body(**overrides):
    body = {
        "employeeId": "E-100",
        "firstName": "Ann",
        "lastName": "Lee",
        "email": "ann.lee@example.com",
        "department": "Engineering",
        "position": "Engineer",
        "salary": 72000,
        "hireDate": "2023-03-01",
    }
    body.update(overrides)
    return body


@pytest.fixture
def hr(as_role):
    return as_role(UserRole.HR)


class TestEmployeeWrites:
    def test_create_requires_hr(self, client, as_role):
        res = client.post("/api/employees/", json=_employee_body(), headers=as_role(UserRole.EMPLOYEE))
        assert res.status_code == 403

    def test_create(self, client, hr):
        res = client.post("/api/employees/", json=_employee_body(), headers=hr)
        assert res.status_code == 201
        data = res.json()
        assert data["employeeId"] == "E-100"
        assert data["fullName"] == "Ann Lee"
        assert data["isActive"] is True

    def test_negative_salary_rejected(self, client, hr):
        res = client.post("/api/employees/", json=_employee_body(salary=-1), headers=hr)
        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "salary"

    def test_duplicate_email(self, client, hr, make_employee):
        make_employee(email="ann.lee@example.com")
        res = client.post("/api/employees/", json=_employee_body(), headers=hr)
        assert res.status_code == 400
        assert res.json()["message"] == "Employee with this ID or email already exists"

    def test_missing_manager(self, client, hr):
        res = client.post("/api/employees/", json=_employee_body(manager=9999), headers=hr)
        assert res.status_code == 400
        assert res.json()["errors"] == [{"field": "manager", "message": "Manager not found"}]

    def test_update(self, client, hr, make_employee):
        emp = make_employee()
        res = client.put(f"/api/employees/{emp.id}", json={"position": "Lead"}, headers=hr)
        assert res.status_code == 200
        assert res.json()["position"] == "Lead"

    def test_cannot_manage_self(self, client, hr, make_employee):
        emp = make_employee()
        res = client.put(f"/api/employees/{emp.id}", json={"manager": emp.id}, headers=hr)
        assert res.status_code == 400

    def test_soft_delete(self, client, hr, make_employee):
        emp = make_employee()
        res = client.delete(f"/api/employees/{emp.id}", headers=hr)
        assert res.json() == {"message": "Employee deleted successfully"}

        # hidden from the list, still readable by id
        listed = client.get("/api/employees/", headers=hr).json()
        assert emp.id not in [e["id"] for e in listed["employees"]]
        detail = client.get(f"/api/employees/{emp.id}", headers=hr)
        assert detail.status_code == 200
        assert detail.json()["isActive"] is False

        # and no longer mutable
        assert client.put(f"/api/employees/{emp.id}", json={"position": "X"}, headers=hr).status_code == 404
        assert client.delete(f"/api/employees/{emp.id}", headers=hr).status_code == 404


class TestEmployeeListing:
    def test_pagination_meta(self, client, hr, make_employee):
        for _ in range(25):
            make_employee()
        res = client.get("/api/employees/?page=3&limit=10", headers=hr)
        data = res.json()
        assert data["total"] == 25
        assert data["totalPages"] == 3
        assert data["currentPage"] == 3
        assert len(data["employees"]) == 5

    def test_search_by_full_name_is_case_insensitive(self, client, hr, make_employee):
        make_employee(first_name="Grace", last_name="Hopper")
        make_employee(first_name="Alan", last_name="Turing")
        res = client.get("/api/employees/?search=grace hop", headers=hr)
        names = [e["lastName"] for e in res.json()["employees"]]
        assert names == ["Hopper"]

    def test_search_escapes_wildcards(self, client, hr, make_employee):
        make_employee(first_name="Plain")
        res = client.get("/api/employees/?search=%25", headers=hr)
        assert res.json()["total"] == 0

    def test_department_filter_and_route(self, client, hr, make_employee):
        make_employee(department="Sales")
        make_employee(department="Engineering")
        assert client.get("/api/employees/?department=Sales", headers=hr).json()["total"] == 1
        res = client.get("/api/employees/department/Sales", headers=hr)
        assert [e["department"] for e in res.json()] == ["Sales"]

    def test_sort_by_last_name(self, client, hr, make_employee):
        make_employee(last_name="Zed")
        make_employee(last_name="Abe")
        res = client.get("/api/employees/?sortBy=lastName&sortOrder=asc", headers=hr)
        assert [e["lastName"] for e in res.json()["employees"]] == ["Abe", "Zed"]

    def test_unknown_sort_key(self, client, hr):
        res = client.get("/api/employees/?sortBy=password", headers=hr)
        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "sortBy"

    def test_limit_out_of_range(self, client, hr):
        assert client.get("/api/employees/?limit=0", headers=hr).status_code == 400
        assert client.get("/api/employees/?page=0", headers=hr).status_code == 400

    def test_hire_date_range(self, client, hr, make_employee):
        from datetime import date

        make_employee(hire_date=date(2021, 5, 1))
        make_employee(hire_date=date(2023, 5, 1))
        res = client.get("/api/employees/?dateFrom=2023-01-01&dateTo=2023-05-01", headers=hr)
        assert res.json()["total"] == 1

    def test_any_user_can_read(self, client, as_role, make_employee):
        emp = make_employee()
        res = client.get(f"/api/employees/{emp.id}", headers=as_role(UserRole.EMPLOYEE))
        assert res.status_code == 200

    def test_unknown_id(self, client, hr):
        res = client.get("/api/employees/999", headers=hr)
        assert res.status_code == 404
        assert res.json() == {"message": "Employee not found"}
