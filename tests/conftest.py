import pytest

from shapegraph.loader import load_shapes
from shapegraph.shacl_extractor import extract_statements


@pytest.fixture
def examples_dir(request):
    return request.config.rootpath / "examples"


@pytest.fixture
def flight_shacl(examples_dir):
    return (examples_dir / "flight-schema.ttl").read_text()


@pytest.fixture
def person_shacl(examples_dir):
    return (examples_dir / "person.shacl.ttl").read_text()


@pytest.fixture
def movies_shacl(examples_dir):
    return (examples_dir / "movies.shacl.ttl").read_text()


@pytest.fixture
def person_statements(person_shacl):
    return extract_statements(load_shapes(person_shacl))


@pytest.fixture
def flight_statements(flight_shacl):
    return extract_statements(load_shapes(flight_shacl))
