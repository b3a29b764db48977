import pytest

from modules.performance.models import EvaluationStatus
from modules.performance.workflow import can_transition
from modules.security.model import UserRole


def _categories(rating=4):
    return {
        key: {"rating": rating, "comments": f"{key} notes"}
        for key in ("technicalSkills", "communication", "teamwork", "leadership", "productivity")
    }


@pytest.fixture
def people(make_employee):
    return {
        "employee": make_employee(first_name="Ivy", last_name="Ng"),
        "evaluator": make_employee(first_name="Max", last_name="Boss"),
    }


@pytest.fixture
def body(people):
    def _body(**overrides):
        data = {
            "employee": people["employee"].id,
            "evaluator": people["evaluator"].id,
            "evaluationPeriod": {"startDate": "2024-01-01T00:00:00", "endDate": "2024-06-30T00:00:00"},
            "overallRating": 4,
            "categories": _categories(),
            "strengths": ["Ownership", "  "],
            "areasForImprovement": ["Estimates"],
            "goals": [{"description": "Mentor a junior", "targetDate": "2024-12-31T00:00:00"}],
            "comments": "Solid half",
        }
        data.update(overrides)
        return data

    return _body


@pytest.fixture
def create(client, as_role, body):
    headers = as_role(UserRole.EMPLOYEE)

    def _create(**overrides):
        res = client.post("/api/performance/", json=body(**overrides), headers=headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _create


class TestWorkflowRules:
    @pytest.mark.parametrize(
        "current,new,allowed",
        [
            ("draft", "submitted", True),
            ("draft", "approved", False),
            ("submitted", "approved", True),
            ("submitted", "rejected", True),
            ("submitted", "draft", False),
            ("approved", "rejected", False),
            ("rejected", "rejected", True),
        ],
    )
    def test_can_transition(self, current, new, allowed):
        assert can_transition(EvaluationStatus(current), EvaluationStatus(new)) is allowed


class TestCreate:
    def test_create_returns_nested_shape(self, create, people):
        perf = create()
        assert perf["status"] == "draft"
        assert perf["employee"]["id"] == people["employee"].id
        assert perf["evaluator"]["firstName"] == "Max"
        assert perf["categories"]["technicalSkills"] == {"rating": 4, "comments": "technicalSkills notes"}
        assert perf["strengths"] == ["Ownership"]
        assert perf["goals"][0]["status"] == "pending"
        assert perf["averageCategoryRating"] == 4.0

    def test_average_category_rating_is_unrounded(self, create):
        cats = _categories(3)
        cats["leadership"]["rating"] = 5
        cats["teamwork"]["rating"] = 5
        perf = create(categories=cats)
        assert perf["averageCategoryRating"] == pytest.approx(3.8)

    def test_period_must_be_ordered(self, client, as_role, body):
        data = body(evaluationPeriod={"startDate": "2024-06-30T00:00:00", "endDate": "2024-01-01T00:00:00"})
        res = client.post("/api/performance/", json=data, headers=as_role())
        assert res.status_code == 400
        assert res.json()["errors"][0]["message"] == "Start date must be before end date"

    def test_rating_out_of_range(self, client, as_role, body):
        res = client.post("/api/performance/", json=body(overallRating=6), headers=as_role())
        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "overallRating"

    def test_cannot_start_approved(self, client, as_role, body):
        res = client.post("/api/performance/", json=body(status="approved"), headers=as_role(UserRole.ADMIN))
        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "status"

    def test_evaluator_must_exist(self, client, as_role, body):
        res = client.post("/api/performance/", json=body(evaluator=999), headers=as_role())
        assert res.status_code == 400
        assert res.json()["errors"] == [{"field": "evaluator", "message": "Employee not found"}]


class TestStatusChanges:
    def test_happy_path(self, client, create, as_role):
        perf = create()
        url = f"/api/performance/{perf['id']}/status"
        assert client.patch(url, json={"status": "submitted"}, headers=as_role()).json()["status"] == "submitted"
        res = client.patch(url, json={"status": "approved"}, headers=as_role(UserRole.MANAGER))
        assert res.json()["status"] == "approved"

    def test_employee_cannot_approve(self, client, create, as_role):
        perf = create(status="submitted")
        res = client.patch(f"/api/performance/{perf['id']}/status", json={"status": "approved"}, headers=as_role())
        assert res.status_code == 403

    def test_skipping_submission_is_rejected(self, client, create, as_role):
        perf = create()
        res = client.patch(
            f"/api/performance/{perf['id']}/status", json={"status": "approved"}, headers=as_role(UserRole.HR)
        )
        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "status"

    def test_terminal_status(self, client, create, as_role):
        perf = create(status="submitted")
        url = f"/api/performance/{perf['id']}/status"
        hr = as_role(UserRole.HR)
        assert client.patch(url, json={"status": "rejected"}, headers=hr).status_code == 200
        assert client.patch(url, json={"status": "draft"}, headers=hr).status_code == 400
        # same status again is a no-op
        assert client.patch(url, json={"status": "rejected"}, headers=hr).status_code == 200

    def test_put_checks_status_too(self, client, create, body, as_role):
        perf = create()
        res = client.put(f"/api/performance/{perf['id']}", json=body(status="rejected"), headers=as_role(UserRole.HR))
        assert res.status_code == 400

    def test_put_replaces_content(self, client, create, body, as_role):
        perf = create()
        res = client.put(
            f"/api/performance/{perf['id']}",
            json=body(overallRating=2, goals=[], strengths=["Focus"]),
            headers=as_role(),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["overallRating"] == 2
        assert data["goals"] == []
        assert data["strengths"] == ["Focus"]
        assert data["status"] == "draft"


class TestListing:
    def test_filters(self, client, create, people, as_role, make_employee):
        create()
        create(status="submitted")
        other = make_employee()
        create(employee=other.id)
        headers = as_role()

        assert client.get("/api/performance/?status=submitted", headers=headers).json()["total"] == 1
        by_emp = client.get(f"/api/performance/employee/{people['employee'].id}", headers=headers).json()
        assert by_emp["total"] == 2
        by_eval = client.get(f"/api/performance/evaluator/{people['evaluator'].id}", headers=headers).json()
        assert by_eval["total"] == 3

    def test_name_search_counts_all_matches(self, client, create, as_role, make_employee):
        for _ in range(3):
            create()
        stranger = make_employee(first_name="Zoe", last_name="Quinn")
        create(employee=stranger.id)

        res = client.get("/api/performance/?search=ivy&limit=2", headers=as_role()).json()
        assert res["total"] == 3
        assert res["totalPages"] == 2
        assert len(res["performances"]) == 2

        # evaluator names are searched as well
        assert client.get("/api/performance/?search=boss", headers=as_role()).json()["total"] == 4

    def test_delete_is_hr_only_and_soft(self, client, create, as_role):
        perf = create()
        url = f"/api/performance/{perf['id']}"
        assert client.delete(url, headers=as_role()).status_code == 403

        res = client.delete(url, headers=as_role(UserRole.HR))
        assert res.json() == {"message": "Performance evaluation deleted successfully"}
        assert client.get("/api/performance/", headers=as_role()).json()["total"] == 0
        assert client.get(url, headers=as_role()).json()["isActive"] is False
        assert client.delete(url, headers=as_role(UserRole.HR)).status_code == 404
