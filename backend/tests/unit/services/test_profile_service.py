"""
Unit Tests for ProfileService
Tests for: profile view with lazy class assignment, department selection, partial updates
"""
import pytest
from sqlalchemy import select, func

from internship.core.exceptions import StudentNotFoundError, UnauthorizedError, UnknownDepartmentError
from internship.core.security import Principal
from internship.models import Department, Student, StudentClass
from internship.schemas.profile import UpdateProfileRequest
from internship.services.profile_service import ProfileService


def principal_for(student: Student) -> Principal:
    return Principal(email=student.email, role="student", subject_id=student.id)


async def count_classes(db) -> int:
    result = await db.execute(select(func.count(StudentClass.id)))
    return result.scalar_one()


class TestGetProfile:
    async def test_without_department_asks_for_selection(self, db_session, new_student):
        response = await ProfileService(db_session).get_profile(principal_for(new_student))

        assert response.message == "Please select a department before viewing or creating a class"
        assert response.student.department is None
        assert response.student.class_name is None
        assert await count_classes(db_session) == 0

    async def test_existing_class_is_reused(self, db_session, student, student_class):
        response = await ProfileService(db_session).get_profile(principal_for(student))

        assert response.message is None
        assert response.student.department == "Computer Applications"
        assert response.student.class_name == "21MX"
        assert await count_classes(db_session) == 1

    async def test_class_created_from_email_prefix(self, db_session, new_student, department):
        service = ProfileService(db_session)
        principal = principal_for(new_student)
        await service.select_department(principal, department.id)

        response = await service.get_profile(principal)

        assert response.student.class_name == "22MX"
        created = await db_session.execute(select(StudentClass).where(StudentClass.name == "22MX"))
        student_class = created.scalar_one()
        assert student_class.department_id == department.id
        assert student_class.tutor_id is None
        refreshed = await db_session.get(Student, new_student.id)
        assert refreshed.class_id == student_class.id

    async def test_same_prefix_shares_class(self, db_session, department):
        first = Student(email="23cs001@psgtech.ac.in", name="First", department_id=department.id)
        second = Student(email="23cs002@psgtech.ac.in", name="Second", department_id=department.id)
        db_session.add_all([first, second])
        await db_session.commit()
        service = ProfileService(db_session)

        await service.get_profile(principal_for(first))
        await service.get_profile(principal_for(second))

        assert first.class_id is not None
        assert first.class_id == second.class_id
        assert await count_classes(db_session) == 1

    async def test_same_class_name_in_other_department_is_separate(self, db_session, student, student_class):
        other = Department(name="Mechanical", code="MECH")
        db_session.add(other)
        await db_session.flush()
        peer = Student(email="21mx999@psgtech.ac.in", name="Peer", department_id=other.id)
        db_session.add(peer)
        await db_session.commit()

        await ProfileService(db_session).get_profile(principal_for(peer))

        assert peer.class_id != student_class.id
        assert await count_classes(db_session) == 2

    async def test_custom_cohort_resolver(self, db_session, student, department):
        service = ProfileService(db_session, cohort_resolver=lambda email: "BATCH-A")

        response = await service.get_profile(principal_for(student))

        assert response.student.class_name == "BATCH-A"

    async def test_staff_rejected(self, db_session, tutor_principal):
        with pytest.raises(UnauthorizedError) as exc_info:
            await ProfileService(db_session).get_profile(tutor_principal)

        assert exc_info.value.message == "Unauthorized: Only students can view profile"

    async def test_unknown_student(self, db_session):
        principal = Principal(email="ghost@psgtech.ac.in", role="student", subject_id="x")

        with pytest.raises(StudentNotFoundError):
            await ProfileService(db_session).get_profile(principal)


class TestSelectDepartment:
    async def test_select_department(self, db_session, new_student, department):
        response = await ProfileService(db_session).select_department(principal_for(new_student), department.id)

        assert response.department == "Computer Applications"
        assert response.message == "Department selected successfully"
        refreshed = await db_session.get(Student, new_student.id)
        assert refreshed.department_id == department.id

    async def test_unknown_department(self, db_session, new_student):
        with pytest.raises(UnknownDepartmentError):
            await ProfileService(db_session).select_department(principal_for(new_student), "missing")


class TestUpdateProfile:
    async def test_only_sent_fields_change(self, db_session, student):
        request = UpdateProfileRequest(year=5)

        response = await ProfileService(db_session).update_profile(principal_for(student), request)

        assert response.student.year == 5
        assert response.student.roll_number == "21MX101"
        assert response.student.department == "Computer Applications"

    async def test_change_department(self, db_session, new_student, department):
        request = UpdateProfileRequest(departmentId=department.id, rollNumber="22MX999")

        response = await ProfileService(db_session).update_profile(principal_for(new_student), request)

        assert response.student.department == "Computer Applications"
        assert response.student.roll_number == "22MX999"

    async def test_no_department_reports_unknown(self, db_session, new_student):
        response = await ProfileService(db_session).update_profile(
            principal_for(new_student), UpdateProfileRequest(year=2)
        )

        assert response.student.department == "Unknown"

    async def test_invalid_department(self, db_session, student):
        with pytest.raises(UnknownDepartmentError) as exc_info:
            await ProfileService(db_session).update_profile(
                principal_for(student), UpdateProfileRequest(departmentId="missing")
            )

        assert exc_info.value.message == "Invalid department ID"


class TestListDepartments:
    async def test_sorted_by_name(self, db_session, department):
        db_session.add(Department(name="Applied Mathematics", code="AM"))
        await db_session.commit()

        response = await ProfileService(db_session).list_departments()

        assert [d.name for d in response.departments] == ["Applied Mathematics", "Computer Applications"]
