"""
Internship Undertaking Service - Test Configuration and Fixtures
"""
import os
from datetime import date
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DEBUG'] = 'false'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['NOTIFICATION_DISPATCH_ON_REQUEST'] = 'false'
os.environ['NOTIFICATION_DISPATCH_INTERVAL_SECONDS'] = '0'
os.environ['SMTP_USER'] = ''
os.environ['SMTP_PASSWORD'] = ''

from internship.main import app
from internship.core.database import Base, get_db
from internship.core.security import Principal, create_principal_token
from internship.models import Department, Staff, StudentClass, Student, Submission, SubmissionStatus

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
# NullPool: every test runs on its own event loop
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================
# Directory records
# ============================================

@pytest.fixture
async def department(db_session: AsyncSession) -> Department:
    """Department the student belongs to"""
    department = Department(name='Computer Applications', code='MCA')
    db_session.add(department)
    await db_session.commit()
    return department


@pytest.fixture
async def student_class(db_session: AsyncSession, department: Department) -> StudentClass:
    """Class 21MX with no tutor bound yet"""
    student_class = StudentClass(name='21MX', department_id=department.id)
    db_session.add(student_class)
    await db_session.commit()
    return student_class


@pytest.fixture
async def tutor(db_session: AsyncSession) -> Staff:
    staff = Staff(email='t1@psgtech.ac.in', name=fake.name())
    db_session.add(staff)
    await db_session.commit()
    return staff


@pytest.fixture
async def other_tutor(db_session: AsyncSession) -> Staff:
    staff = Staff(email='t2@psgtech.ac.in', name=fake.name())
    db_session.add(staff)
    await db_session.commit()
    return staff


@pytest.fixture
async def student(db_session: AsyncSession, department: Department, student_class: StudentClass) -> Student:
    """Student with department and class already set"""
    student = Student(
        email='21mx101@psgtech.ac.in',
        name=fake.name(),
        roll_number='21MX101',
        year=4,
        department_id=department.id,
        class_id=student_class.id,
    )
    db_session.add(student)
    await db_session.commit()
    return student


@pytest.fixture
async def new_student(db_session: AsyncSession) -> Student:
    """Student who has not selected a department yet"""
    student = Student(email='22mx205@psgtech.ac.in', name=fake.name(), roll_number='22MX205', year=3)
    db_session.add(student)
    await db_session.commit()
    return student


@pytest.fixture
async def submission(db_session: AsyncSession, student: Student, tutor: Staff) -> Submission:
    """Pending submission assigned to `tutor`"""
    submission = Submission(
        student_id=student.id,
        tutor_id=tutor.id,
        company_name=fake.company(),
        company_address=fake.address(),
        role='Software Engineer Intern',
        supervisor_name=fake.name(),
        supervisor_email='mentor@acme.example.com',
        department_guide=fake.name(),
        start_date=date(2024, 6, 1),
        end_date=date(2024, 11, 30),
        stipend=15000,
        status=SubmissionStatus.PENDING,
        processed=False,
    )
    db_session.add(submission)
    await db_session.commit()
    return submission


@pytest.fixture
def submission_payload(tutor: Staff) -> dict:
    """Valid request body for POST /submissions"""
    return {
        'company_name': 'Acme Analytics',
        'company_address': '12 Race Course Road, Coimbatore',
        'role': 'Data Engineering Intern',
        'supervisor_name': fake.name(),
        'supervisor_email': 'lead@acme.example.com',
        'department_guide': fake.name(),
        'start_date': '2024-06-01',
        'end_date': '2024-11-30',
        'stipend': 20000,
        'tutor_email': tutor.email,
    }


# ============================================
# Principals and auth headers
# ============================================

@pytest.fixture
def student_principal(student: Student) -> Principal:
    return Principal(email=student.email, role='student', subject_id=student.id)


@pytest.fixture
def tutor_principal(tutor: Staff) -> Principal:
    return Principal(email=tutor.email, role='staff', subject_id=tutor.id)


@pytest.fixture
def other_tutor_principal(other_tutor: Staff) -> Principal:
    return Principal(email=other_tutor.email, role='staff', subject_id=other_tutor.id)


def _headers(email: str, role: str, subject_id: str) -> dict:
    token = create_principal_token(email, role, subject_id)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def student_headers(student: Student) -> dict:
    return _headers(student.email, 'student', student.id)


@pytest.fixture
def new_student_headers(new_student: Student) -> dict:
    return _headers(new_student.email, 'student', new_student.id)


@pytest.fixture
def tutor_headers(tutor: Staff) -> dict:
    return _headers(tutor.email, 'staff', tutor.id)


@pytest.fixture
def other_tutor_headers(other_tutor: Staff) -> dict:
    return _headers(other_tutor.email, 'staff', other_tutor.id)


@pytest.fixture
def admin_headers() -> dict:
    return _headers('admin@psgtech.ac.in', 'admin', 'admin')
