from envvars_scan.core.scanner.compose import parse_compose_content
from envvars_scan.core.scanner.models import ValueSource

COMPOSE = """services:
  app:
    image: "myapp:${TAG}"
    environment:
      - DB_HOST=db
      - API_URL=${API_URL}
      REDIS_URL: "redis://cache"
    ports:
      - "$PORT:80"
"""


def test_definitions_carry_values():
    occs = parse_compose_content(COMPOSE, "/app/docker-compose.yml")
    defs = {o.name: o for o in occs if o.pattern == "environment-definition"}
    assert defs["DB_HOST"].value == "db"
    assert defs["DB_HOST"].line == 5
    assert defs["DB_HOST"].value_source is ValueSource.DOCKER_COMPOSE
    assert defs["REDIS_URL"].value == "redis://cache"
    assert defs["API_URL"].value == "${API_URL}"


def test_references_have_no_value():
    occs = parse_compose_content(COMPOSE)
    refs = [(o.name, o.line) for o in occs if o.pattern == "variable-reference"]
    assert refs == [("TAG", 3), ("PORT", 9)]
    assert all(o.value is None for o in occs if o.pattern == "variable-reference")


def test_self_reference_recorded_once():
    occs = parse_compose_content("    - API_URL=${API_URL}\n")
    assert len(occs) == 1
    assert occs[0].language == "docker-compose"
