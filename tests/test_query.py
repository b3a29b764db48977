import pytest
from fastapi import HTTPException

from modules.common.query import Page, SortSpec, like_pattern
from modules.employees.models import Employee

SPEC = SortSpec(
    columns={"createdAt": Employee.created_at, "lastName": Employee.last_name},
    default_key="createdAt",
    aliases={"surname": "lastName"},
)


def test_sort_resolution():
    assert SPEC.resolve(None) is Employee.created_at
    assert SPEC.resolve("lastName") is Employee.last_name
    assert SPEC.resolve("surname") is Employee.last_name
    # snake_case from older clients
    assert SPEC.resolve("last_name") is Employee.last_name


def test_unknown_sort_key_is_a_field_error():
    with pytest.raises(HTTPException) as exc:
        SPEC.resolve("salary")
    assert exc.value.status_code == 400
    assert exc.value.detail[0]["field"] == "sortBy"


def test_like_pattern_escapes_wildcards():
    assert like_pattern("50%_off") == "%50\\%\\_off%"


@pytest.mark.parametrize("total,limit,pages", [(0, 10, 0), (10, 10, 1), (11, 10, 2), (25, 10, 3)])
def test_page_meta(total, limit, pages):
    page = Page(items=[], total=total, page=1, limit=limit)
    assert page.meta() == {"total_pages": pages, "current_page": 1, "total": total}
