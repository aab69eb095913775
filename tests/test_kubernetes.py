from envvars_scan.core.scanner.kubernetes import (
    OUTSIDE,
    Section,
    SectionState,
    ends_section,
    get_manifest_kind,
    next_state,
    parse_k8s_content,
    scan_k8s_manifests,
    split_documents,
)
from envvars_scan.core.scanner.models import ValueSource
from envvars_scan.core.scanner.patterns import clean_scalar

DEPLOYMENT = """apiVersion: apps/v1
kind: Deployment
metadata:
  name: web
spec:
  template:
    spec:
      containers:
        - name: app
          env:
            - name: DB_HOST
              value: "db.internal"
            - name: DB_PASSWORD
              valueFrom:
                secretKeyRef:
                  name: db
                  key: password
            # comment inside env
            - name: LOG_LEVEL
              value: debug
          ports:
            - containerPort: 80
"""

CONFIGMAP = """apiVersion: v1
kind: ConfigMap
metadata:
  name: settings
data:
  FEATURE_FLAGS: "a,b"
  STARTUP_SCRIPT: |
    echo one
    echo two
  AFTER_SCRIPT: done
  lowercase_key: ignored
"""

SECRET = """apiVersion: v1
kind: Secret
metadata:
  name: creds
type: Opaque
data:
  PASSWORD: cGFzcw==
  BROKEN: not-base64!!
stringData:
  API_TOKEN: plain-token
"""


def _values(occs):
    return {o.name: o.value for o in occs}


# ------------------------------------------------------------
# State machine
# ------------------------------------------------------------

def test_env_header_opens_workload_section():
    state, is_header = next_state(OUTSIDE, "Deployment", "          env:")
    assert is_header
    assert state == SectionState(Section.WORKLOAD_ENV, 10)


def test_env_header_ignored_for_configmap():
    state, is_header = next_state(OUTSIDE, "ConfigMap", "  env:")
    assert not is_header
    assert state == OUTSIDE


def test_secret_data_and_string_data_are_exclusive():
    state, _ = next_state(OUTSIDE, "Secret", "data:")
    assert state.section is Section.SECRET_DATA
    state, is_header = next_state(state, "Secret", "stringData:")
    assert is_header
    assert state.section is Section.SECRET_STRING_DATA


def test_section_boundaries():
    state = SectionState(Section.WORKLOAD_ENV, 4)
    assert not ends_section(state, "    - name: A")
    assert not ends_section(state, "      value: x")
    assert not ends_section(state, "")
    assert not ends_section(state, "  # comment")
    assert ends_section(state, "    ports:")
    assert ends_section(state, "  image: x")
    assert not ends_section(state, "  - name: B")
    assert not ends_section(state, "- top-level item")
    assert not ends_section(OUTSIDE, "anything:")


def test_shallower_line_returns_to_outside():
    state = SectionState(Section.CONFIG_DATA, 0)
    new_state, is_header = next_state(state, "ConfigMap", "metadata:")
    assert new_state == OUTSIDE
    assert not is_header


# ------------------------------------------------------------
# Documents
# ------------------------------------------------------------

def test_split_documents_tracks_offsets():
    docs = list(split_documents("a: 1\n---\nb: 2\nc: 3\n---\n"))
    assert docs[0] == (0, ["a: 1"])
    assert docs[1] == (2, ["b: 2", "c: 3"])
    assert docs[2] == (5, [""])


def test_manifest_kind_requires_api_version():
    assert get_manifest_kind("apiVersion: v1\nkind: ConfigMap") == "ConfigMap"
    assert get_manifest_kind("kind: ConfigMap") is None


# ------------------------------------------------------------
# Resources
# ------------------------------------------------------------

def test_deployment_env():
    occs = parse_k8s_content(DEPLOYMENT, "/k8s/web.yaml")
    assert [o.name for o in occs] == ["DB_HOST", "DB_PASSWORD", "LOG_LEVEL"]
    db_host = occs[0]
    assert db_host.value == "db.internal"
    assert db_host.line == 11
    assert db_host.value_source is ValueSource.K8S_DEPLOYMENT
    assert db_host.pattern == "deployment"
    assert db_host.language == "kubernetes"
    assert occs[1].value is None
    assert occs[2].value == "debug"


def test_configmap_data_with_block_scalar():
    occs = parse_k8s_content(CONFIGMAP)
    assert _values(occs) == {
        "FEATURE_FLAGS": "a,b",
        "STARTUP_SCRIPT": "echo one\necho two",
        "AFTER_SCRIPT": "done",
    }
    assert all(o.value_source is ValueSource.K8S_CONFIGMAP for o in occs)
    assert all(o.pattern == "configmap" for o in occs)


def test_secret_data_is_base64_decoded():
    occs = parse_k8s_content(SECRET)
    password = next(o for o in occs if o.name == "PASSWORD")
    assert password.value == "pass"
    assert password.value_source is ValueSource.K8S_SECRET
    assert password.pattern == "secret"
    assert password.line == 7


def test_invalid_base64_keeps_raw_value():
    values = _values(parse_k8s_content(SECRET))
    assert values["BROKEN"] == "not-base64!!"


def test_string_data_is_literal():
    values = _values(parse_k8s_content(SECRET))
    assert values["API_TOKEN"] == "plain-token"


def test_multi_document_line_numbers():
    content = CONFIGMAP + "---\n" + SECRET
    occs = parse_k8s_content(content)
    password = next(o for o in occs if o.name == "PASSWORD")
    offset = len(CONFIGMAP.split("\n"))
    assert password.line == offset + 7


def test_non_manifest_yaml_ignored():
    assert parse_k8s_content("services:\n  app:\n    env:\n      - name: FOO\n") == []


def test_unsupported_kind_ignored():
    content = "apiVersion: v1\nkind: Service\nspec:\n  env:\n    - name: FOO\n      value: x\n"
    assert parse_k8s_content(content) == []


def test_scan_k8s_manifests(make_tree):
    root = make_tree({
        "k8s/secret.yaml": SECRET,
        "k8s/deploy.yml": DEPLOYMENT,
        "node_modules/chart/secret.yaml": SECRET,
    })
    occs, errors = scan_k8s_manifests(root)
    assert errors == []
    assert len([o for o in occs if o.name == "PASSWORD"]) == 1
    assert {o.name for o in occs} >= {"PASSWORD", "DB_HOST"}


def test_configmap_data_ends_at_sibling_key():
    content = (
        "apiVersion: v1\n"
        "kind: ConfigMap\n"
        "data:\n"
        "  APP_MODE: prod\n"
        "binaryData:\n"
        "  LOGO_PNG: iVBORw0KGgo=\n"
    )
    assert _values(parse_k8s_content(content)) == {"APP_MODE": "prod"}


def test_values_drop_trailing_comments():
    content = (
        "apiVersion: v1\n"
        "kind: Pod\n"
        "spec:\n"
        "  containers:\n"
        "    - name: app\n"
        "      env:\n"
        "        - name: DB\n"
        '          value: "db"  # primary\n'
        "        - name: REGION\n"
        "          value: eu-west-1 # default region\n"
        "---\n"
        "apiVersion: v1\n"
        "kind: ConfigMap\n"
        "data:\n"
        "  CACHE_TTL: '300' # seconds\n"
        "  COLOR: blue # theme\n"
        '  MOTTO: "a # b"\n'
    )
    assert _values(parse_k8s_content(content)) == {
        "DB": "db",
        "REGION": "eu-west-1",
        "CACHE_TTL": "300",
        "COLOR": "blue",
        "MOTTO": "a # b",
    }


def test_clean_scalar():
    assert clean_scalar('"db"  # primary') == "db"
    assert clean_scalar("plain # note") == "plain"
    assert clean_scalar("color#fff") == "color#fff"
    assert clean_scalar('"unterminated') == '"unterminated'
    assert clean_scalar("|") == "|"
