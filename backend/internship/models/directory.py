"""
Directory Models
- Department, Class (cohort) and Staff reference data
- Student records and their department/class bindings
"""

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from internship.core.database import Base, generate_uuid


class Department(Base):
    """Department model"""
    __tablename__ = "departments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), unique=True, nullable=False)  # e.g., Computer Science and Engineering
    code = Column(String(20), nullable=True)                 # e.g., CSE
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    classes = relationship("StudentClass", back_populates="department")
    students = relationship("Student", back_populates="department")

    def __repr__(self):
        return f"<Department {self.name}>"


class Staff(Base):
    """Staff member who can act as a class tutor"""
    __tablename__ = "staff"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Staff {self.email}>"


class StudentClass(Base):
    """
    Class/cohort model.

    The tutor binding is set by the first submission from a member and
    overwritten when a later submission names a different tutor. `version`
    guards that read-modify-write against concurrent submitters.
    """
    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("department_id", "name", name="uq_classes_department_name"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(50), nullable=False)  # derived cohort name, e.g. 21MX
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=False)
    tutor_id = Column(String(36), ForeignKey("staff.id"), nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    department = relationship("Department", back_populates="classes")
    tutor = relationship("Staff")
    students = relationship("Student", back_populates="student_class")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<StudentClass {self.name}>"


class Student(Base):
    """Student model - provisioned externally, edited through the profile endpoints"""
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    roll_number = Column(String(50), nullable=True)
    year = Column(Integer, nullable=True)

    department_id = Column(String(36), ForeignKey("departments.id"), nullable=True)
    class_id = Column(String(36), ForeignKey("classes.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    department = relationship("Department", back_populates="students")
    student_class = relationship("StudentClass", back_populates="students")
    submissions = relationship("Submission", back_populates="student")

    def __repr__(self):
        return f"<Student {self.email}>"
