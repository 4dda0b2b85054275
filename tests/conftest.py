import pytest

from app import create_app
from config import Config
from extensions import db
from services.catalog_source import clear_caches
from services.degree_areas import DegreeArea, GENERAL_EDUCATION, TECHNICAL
from utils.course_catalog import build_catalog
from utils.semesters import build_semester_sequence


CATALOG_RECORDS = [
    {"code": "CSC 1401", "name": "Introduction to Programming", "credits": 3},
    # no prerequisites in the data; the built-in override adds CSC 1401
    {"code": "CSC 2302", "name": "Data Structures", "credits": 3},
    {"code": "CSC 2306", "name": "Object Oriented Programming", "credits": 3, "prerequisites": "CSC 1401 + CSC 2302"},
    {"code": "MTH 1303", "name": "Calculus I", "credits": 3},
    {"code": "MTH 1304", "name": "Discrete Mathematics", "credits": 3, "prerequisites": "MTH 1303"},
    {"code": "ENG 1301", "name": "English Composition I", "credits": 3, "category": "English", "required": True},
    {"code": "ENG 2303", "name": "Technical Writing", "credits": 3, "prerequisites": "ENG 1301",
     "category": "English", "required": True},
    {"code": "HIS 1301", "name": "History Course", "credits": 3, "category": "History"},
    {"code": "HIS 2301", "name": "History Course", "credits": 3, "category": "History"},
    {"code": "FYE 1101", "name": "FYE Seminar I", "credits": 1, "category": "Foundation", "required": True},
]

EXTRA_RECORDS = [
    {"code": "PHY 1401", "name": "Physics I", "credits": 4, "prerequisites": "MTH 1303 / CSC 1401"},
    {"code": "BIG 5001", "name": "Studio A", "credits": 8},
    {"code": "BIG 5002", "name": "Studio B", "credits": 8},
    {"code": "BIG 5003", "name": "Studio C", "credits": 6},
    {"code": "BIG 5004", "name": "Lab", "credits": 1},
]

FIRST_SEMESTER = ("CSC 1401", "MTH 1303", "FYE 1101")


@pytest.fixture
def catalog():
    return build_catalog(CATALOG_RECORDS + EXTRA_RECORDS)


@pytest.fixture
def plan_catalog():
    # generator fixture: every course belongs to one of `areas`
    return build_catalog(CATALOG_RECORDS)


@pytest.fixture
def areas(plan_catalog):
    def members(predicate):
        return tuple(c.code for c in plan_catalog if predicate(c))

    def required(codes, only_flagged=False):
        return frozenset(
            plan_catalog.get(c).key for c in codes if not only_flagged or plan_catalog.get(c).required
        )

    tech = members(lambda c: c.category is None)
    english = members(lambda c: c.category == "English")
    history = members(lambda c: c.category == "History")
    foundation = members(lambda c: c.category == "Foundation")
    return [
        DegreeArea("Technical", TECHNICAL, 15, tech, required(tech)),
        DegreeArea("English", GENERAL_EDUCATION, 6, english, required(english, True)),
        DegreeArea("History", GENERAL_EDUCATION, 3, history, required(history, True)),
        DegreeArea("Foundation", GENERAL_EDUCATION, 1, foundation, required(foundation, True), foundation=True),
    ]


@pytest.fixture
def slots():
    # Fall 2024, Spring 2025, Summer 2025, Fall 2025, Spring 2026, Summer 2026
    return build_semester_sequence("Fall", 2024, "Summer", 2025)


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "WARNING"


@pytest.fixture
def app():
    clear_caches()
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def catalog_records():
    return [dict(r) for r in CATALOG_RECORDS]


@pytest.fixture
def first_semester():
    return FIRST_SEMESTER
