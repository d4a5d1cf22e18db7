import pytest

from schoolms.common.exceptions import ResourceNotFound
from schoolms.container import decorate_services
from schoolms.schemas.common import PagedResponse, SearchRequest
from schoolms.schemas.people import StudentDto, StudentPhoto, StudentUpdate
from schoolms.services.caching import CachingStudentService
from schoolms.services.contracts import StudentServiceProtocol

pytestmark = pytest.mark.asyncio


def student(student_id=5, first_name="An"):
    return StudentDto(id=student_id, first_name=first_name, last_name="Nguyen")


@pytest.fixture
def inner(make_inner):
    service = make_inner(StudentServiceProtocol)
    service.get_student_by_id.return_value = student()
    service.get_paged_students.side_effect = lambda request: PagedResponse[StudentDto](
        items=[student()], total_count=30, page=request.page
    )
    return service


@pytest.fixture
def students(container, inner):
    return decorate_services(container, {"student": inner})["student"]


class TestStudentReads:
    async def test_decorator_keeps_the_contract(self, students):
        assert isinstance(students, CachingStudentService)
        assert isinstance(students, StudentServiceProtocol)
        assert CachingStudentService.get_student_by_id.__name__ == "get_student_by_id"

    async def test_get_update_get(self, students, inner):
        first = await students.get_student_by_id(5)
        second = await students.get_student_by_id(5)
        assert first == second
        assert inner.get_student_by_id.await_count == 1

        renamed = student(first_name="Binh")
        inner.update_student.return_value = renamed
        inner.get_student_by_id.return_value = renamed
        await students.update_student(5, StudentUpdate(first_name="Binh"))

        third = await students.get_student_by_id(5)
        assert third.first_name == "Binh"
        assert inner.get_student_by_id.await_count == 2

    async def test_pages_are_cached_separately(self, students, inner):
        page1 = await students.get_paged_students(SearchRequest(page=1))
        page2 = await students.get_paged_students(SearchRequest(page=2))
        again = await students.get_paged_students(SearchRequest(page=1))

        assert (page1.page, page2.page, again.page) == (1, 2, 1)
        assert inner.get_paged_students.await_count == 2

    async def test_not_found_passes_through_uncached(self, students, inner):
        inner.get_student_by_id.side_effect = ResourceNotFound(
            resource_type="student", resource_id=99
        )

        for _ in range(2):
            with pytest.raises(ResourceNotFound):
                await students.get_student_by_id(99)

        assert inner.get_student_by_id.await_count == 2

    async def test_none_is_not_cached(self, students, inner):
        inner.get_student_detail.return_value = None

        assert await students.get_student_detail(7) is None
        assert await students.get_student_detail(7) is None
        assert inner.get_student_detail.await_count == 2

    async def test_dashboard_expires_after_its_ttl(self, students, inner, clock):
        inner.get_student_dashboard.return_value = {"student_id": 5}

        await students.get_student_dashboard(5)
        clock.advance(300)
        await students.get_student_dashboard(5)
        assert inner.get_student_dashboard.await_count == 1

        clock.advance(1)
        await students.get_student_dashboard(5)
        assert inner.get_student_dashboard.await_count == 2


class TestStudentWrites:
    async def test_update_drops_every_student_view(self, students, inner, backend):
        inner.get_student_dashboard.return_value = {"student_id": 5}
        inner.get_student_grades.return_value = PagedResponse[StudentDto]()
        inner.update_student.return_value = student()

        await students.get_student_by_id(5)
        await students.get_student_dashboard(5)
        await students.get_student_grades(5, SearchRequest())
        await students.get_paged_students(SearchRequest())
        await students.get_student_by_id(6)

        await students.update_student(5, StudentUpdate(first_name="X"))

        assert not await backend.exists("student_5")
        assert not await backend.exists("student_dashboard_5")
        assert not await backend.exists("student_5_grade_list__1_10__False")
        assert not await backend.exists("student_list__1_10__False")
        assert await backend.exists("student_6")

    async def test_create_drops_list_pages(self, students, inner, backend):
        inner.create_student.return_value = student(student_id=11)
        await students.get_paged_students(SearchRequest())

        await students.create_student(payload=None)

        assert not await backend.exists("student_list__1_10__False")
        assert inner.create_student.await_count == 1

    async def test_failed_write_invalidates_nothing(self, students, inner, backend):
        inner.delete_student.return_value = False
        await students.get_student_by_id(5)

        assert await students.delete_student(5) is False
        assert await backend.exists("student_5")

    async def test_write_error_propagates_and_keeps_cache(self, students, inner, backend):
        inner.update_student.side_effect = ResourceNotFound(resource_type="student")
        await students.get_student_by_id(5)

        with pytest.raises(ResourceNotFound):
            await students.update_student(5, StudentUpdate())

        assert await backend.exists("student_5")

    async def test_photo_upload_uses_payload_id(self, students, inner, backend):
        inner.upload_student_photo.return_value = True
        await students.get_student_by_id(5)

        await students.upload_student_photo(
            StudentPhoto(student_id=5, photo_url="https://cdn.example/5.png")
        )

        assert not await backend.exists("student_5")
