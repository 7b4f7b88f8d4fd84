import pytest

from batchsubmit import config
from batchsubmit.config import _clean, _parse_fields, load_settings


ENV_VARS = [
    "BATCHSUBMIT_ENDPOINT_URL",
    "BATCHSUBMIT_TOKEN",
    "BATCHSUBMIT_FIELDS",
    "BATCHSUBMIT_ATTACHMENT_COLUMN",
    "BATCHSUBMIT_ATTACHMENT_FIELD",
    "BATCHSUBMIT_ATTACHMENT_DIR",
    "BATCHSUBMIT_STRICT_ATTACHMENTS",
    "BATCHSUBMIT_ID_COLUMN",
    "BATCHSUBMIT_TIMEOUT_SEC",
    "BATCHSUBMIT_EXCEL_HEADER_ROW",
]


@pytest.fixture
def env(monkeypatch):
    """Clean environment with the .env file ignored."""
    monkeypatch.setattr(config, "load_dotenv", lambda **kwargs: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("BATCHSUBMIT_ENDPOINT_URL", "https://forms.example.com/api/submit")
    monkeypatch.setenv("BATCHSUBMIT_TOKEN", "tok")
    monkeypatch.setenv("BATCHSUBMIT_FIELDS", "id,name,email")
    return monkeypatch


def test_defaults(env):
    s = load_settings()

    assert s.endpoint_url == "https://forms.example.com/api/submit"
    assert s.token == "tok"
    assert s.fields == ["id", "name", "email"]
    assert s.attachment_column is None
    assert s.attachment_field == "file"
    assert s.attachment_dir is None
    assert s.strict_attachments is False
    assert s.id_column == "id"
    assert s.timeout_sec == 30
    assert s.excel_header_row == 0


def test_optional_settings(env):
    env.setenv("BATCHSUBMIT_ATTACHMENT_COLUMN", "resume_path")
    env.setenv("BATCHSUBMIT_ATTACHMENT_FIELD", "cv")
    env.setenv("BATCHSUBMIT_ATTACHMENT_DIR", "/data/cvs")
    env.setenv("BATCHSUBMIT_STRICT_ATTACHMENTS", "yes")
    env.setenv("BATCHSUBMIT_ID_COLUMN", "email")
    env.setenv("BATCHSUBMIT_TIMEOUT_SEC", "5")
    env.setenv("BATCHSUBMIT_EXCEL_HEADER_ROW", "2")

    s = load_settings()

    assert s.attachment_column == "resume_path"
    assert s.attachment_field == "cv"
    assert s.attachment_dir == "/data/cvs"
    assert s.strict_attachments is True
    assert s.id_column == "email"
    assert s.timeout_sec == 5
    assert s.excel_header_row == 2


def test_endpoint_without_scheme_gets_https(env):
    env.setenv("BATCHSUBMIT_ENDPOINT_URL", '"forms.example.com/submit"')

    assert load_settings().endpoint_url == "https://forms.example.com/submit"


@pytest.mark.parametrize("name", [
    "BATCHSUBMIT_ENDPOINT_URL",
    "BATCHSUBMIT_TOKEN",
    "BATCHSUBMIT_FIELDS",
])
def test_missing_required_setting(env, name):
    env.delenv(name)

    with pytest.raises(RuntimeError, match=name):
        load_settings()


def test_blank_field_list_is_missing(env):
    env.setenv("BATCHSUBMIT_FIELDS", " , ,")

    with pytest.raises(RuntimeError, match="BATCHSUBMIT_FIELDS"):
        load_settings()


def test_bad_timeout(env):
    env.setenv("BATCHSUBMIT_TIMEOUT_SEC", "soon")

    with pytest.raises(RuntimeError, match="Invalid numeric setting"):
        load_settings()


@pytest.mark.parametrize("raw, expected", [
    ("  hello  ", "hello"),
    ('"quoted"', "quoted"),
    ("'quoted'", "quoted"),
    ("", None),
    (None, None),
])
def test_clean(raw, expected):
    assert _clean(raw) == expected


def test_parse_fields_strips_and_dedupes():
    assert _parse_fields(" id, name ,,id,email ") == ["id", "name", "email"]


def test_attachment_field_clashing_with_scalar_field(env):
    env.setenv("BATCHSUBMIT_ATTACHMENT_COLUMN", "resume_path")
    env.setenv("BATCHSUBMIT_ATTACHMENT_FIELD", "email")

    with pytest.raises(RuntimeError, match="BATCHSUBMIT_ATTACHMENT_FIELD"):
        load_settings()


def test_attachment_field_ignored_without_attachment_column(env):
    env.setenv("BATCHSUBMIT_ATTACHMENT_FIELD", "email")

    assert load_settings().attachment_field == "email"
