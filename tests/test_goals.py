import pytest

from modules.security.model import UserRole


@pytest.fixture
def owner(make_user):
    return make_user(UserRole.EMPLOYEE)


@pytest.fixture
def headers(owner, auth_headers):
    return auth_headers(owner)


@pytest.fixture
def employee(make_employee):
    return make_employee()


@pytest.fixture
def new_goal(client, headers, employee, iso_in_days):
    def _create(**overrides):
        body = {
            "title": "Ship the release",
            "targetType": "quarterly",
            "dueDate": iso_in_days(30),
            "progress": 0,
            "assignedEmployee": employee.id,
        }
        body.update(overrides)
        res = client.post("/api/goals/", json=body, headers=headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _create


class TestGoalDerivedFields:
    def test_finished_goal_past_due_is_completed(self, new_goal, iso_in_days):
        goal = new_goal(progress=100, dueDate=iso_in_days(-1))
        assert goal["status"] == "completed"
        assert goal["progressPercentage"] == "100%"

    def test_overdue_and_in_progress(self, new_goal, iso_in_days):
        assert new_goal(progress=20, dueDate=iso_in_days(-1))["status"] == "overdue"
        assert new_goal(progress=20, dueDate=iso_in_days(5))["status"] == "in-progress"

    def test_progress_range_is_enforced(self, client, headers, employee, iso_in_days):
        body = {
            "title": "Too much",
            "targetType": "annual",
            "dueDate": iso_in_days(5),
            "progress": 101,
            "assignedEmployee": employee.id,
        }
        res = client.post("/api/goals/", json=body, headers=headers)
        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "progress"

    def test_unknown_employee(self, client, headers, iso_in_days):
        body = {"title": "x", "targetType": "annual", "dueDate": iso_in_days(5), "assignedEmployee": 999}
        res = client.post("/api/goals/", json=body, headers=headers)
        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "assignedEmployee"


class TestGoalListing:
    def test_list_is_scoped_to_owner(self, client, new_goal, as_role):
        new_goal()
        other = client.get("/api/goals/", headers=as_role(UserRole.EMPLOYEE)).json()
        assert other["total"] == 0

    def test_status_filter_runs_before_pagination(self, client, headers, new_goal, iso_in_days):
        for _ in range(3):
            new_goal(progress=10, dueDate=iso_in_days(-2))
        for _ in range(4):
            new_goal(progress=10, dueDate=iso_in_days(10))
        new_goal(progress=100, dueDate=iso_in_days(-2))

        res = client.get("/api/goals/?status=overdue&limit=2", headers=headers).json()
        assert res["total"] == 3
        assert res["totalPages"] == 2
        assert all(g["status"] == "overdue" for g in res["goals"])

        completed = client.get("/api/goals/?status=completed", headers=headers).json()
        assert completed["total"] == 1

    def test_by_type(self, client, headers, new_goal):
        new_goal(targetType="annual")
        new_goal(targetType="quarterly")
        res = client.get("/api/goals/type/annual", headers=headers)
        assert [g["targetType"] for g in res.json()] == ["annual"]

    def test_by_employee(self, client, headers, new_goal, employee):
        new_goal()
        res = client.get(f"/api/goals/employee/{employee.id}", headers=headers).json()
        assert res["total"] == 1
        assert res["goals"][0]["assignedEmployee"]["id"] == employee.id

    def test_search_title(self, client, headers, new_goal):
        new_goal(title="Improve onboarding")
        new_goal(title="Cut costs")
        res = client.get("/api/goals/?search=ONBOARD", headers=headers).json()
        assert [g["title"] for g in res["goals"]] == ["Improve onboarding"]


class TestGoalOwnership:
    def test_owner_updates_progress(self, client, headers, new_goal):
        goal = new_goal()
        res = client.patch(f"/api/goals/{goal['id']}/progress", json={"progress": 100}, headers=headers)
        assert res.status_code == 200
        assert res.json()["status"] == "completed"

    def test_non_owner_cannot_mutate(self, client, new_goal, as_role):
        goal = new_goal()
        stranger = as_role(UserRole.ADMIN)
        assert client.put(f"/api/goals/{goal['id']}", json={"title": "mine"}, headers=stranger).status_code == 403
        assert client.delete(f"/api/goals/{goal['id']}", headers=stranger).status_code == 403

    def test_detail_read_rules(self, client, new_goal, as_role):
        goal = new_goal()
        assert client.get(f"/api/goals/{goal['id']}", headers=as_role(UserRole.EMPLOYEE)).status_code == 403
        assert client.get(f"/api/goals/{goal['id']}", headers=as_role(UserRole.MANAGER)).status_code == 200

    def test_soft_delete(self, client, headers, new_goal):
        goal = new_goal()
        res = client.delete(f"/api/goals/{goal['id']}", headers=headers)
        assert res.json() == {"message": "Goal deleted successfully"}
        assert client.get("/api/goals/", headers=headers).json()["total"] == 0
        assert client.get(f"/api/goals/{goal['id']}", headers=headers).json()["isActive"] is False
        assert client.put(f"/api/goals/{goal['id']}", json={"title": "x"}, headers=headers).status_code == 404
