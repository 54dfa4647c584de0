from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

from sqlalchemy import Boolean, Column, Date, DateTime, Numeric, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

Base = declarative_base()


def _money():
    return Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)


class EmployeeRow(Base):
    __tablename__ = "employees"

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False, index=True)
    company = Column(String(20), nullable=True)
    admission_date = Column(Date, nullable=True)
    dismissal_date = Column(Date, nullable=True)
    birth_date = Column(Date, nullable=True)
    address = Column(String(300), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(2), nullable=True)
    cep = Column(String(9), nullable=True)
    phone = Column(String(20), nullable=True)
    father_name = Column(String(200), nullable=True)
    mother_name = Column(String(200), nullable=True)
    cpf = Column(String(14), nullable=True, unique=True)
    rg = Column(String(20), nullable=True)
    ctps = Column(String(20), nullable=True)
    pis = Column(String(20), nullable=True)
    voter_id = Column(String(20), nullable=True)
    role = Column(String(200), nullable=True)
    salary = _money()
    role_accumulation = _money()

    created_at = Column(DateTime, default=datetime.utcnow)


class PayrollRecordRow(Base):
    __tablename__ = "payroll_records"

    id = Column(String(36), primary_key=True)
    # No foreign key: a record may outlive or precede its employee.
    employee_id = Column(String(36), nullable=False, index=True)
    closing_date = Column(Date, nullable=True)

    other_income = _money()
    bonuses = _money()
    vt = Column(Boolean, nullable=False, default=False)
    basic_basket = _money()
    ot100 = _money()
    ot70 = _money()
    ot50 = _money()
    vr = _money()

    advances = _money()
    absences = _money()
    loans = _money()
    other_discounts = _money()
    pharmacy = _money()
    supermarket = _money()
    dental = _money()
    medical = _money()
    other_convenios = _money()

    observations = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)


def make_engine(database_url: str, **kwargs: Any) -> Engine:
    return create_engine(database_url, pool_pre_ping=True, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
