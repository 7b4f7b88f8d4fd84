import csv

import pytest

from batchsubmit import config, run_submitter


@pytest.fixture
def cli_env(monkeypatch, make_client):
    monkeypatch.setattr(config, "load_dotenv", lambda **kwargs: False)
    monkeypatch.setenv("BATCHSUBMIT_ENDPOINT_URL", "https://forms.example.com/submit")
    monkeypatch.setenv("BATCHSUBMIT_TOKEN", "tok")
    monkeypatch.setenv("BATCHSUBMIT_FIELDS", "id,name")
    monkeypatch.setenv("BATCHSUBMIT_ATTACHMENT_COLUMN", "cv")
    for name in ("BATCHSUBMIT_ATTACHMENT_DIR", "BATCHSUBMIT_STRICT_ATTACHMENTS",
                 "BATCHSUBMIT_ATTACHMENT_FIELD", "BATCHSUBMIT_ID_COLUMN",
                 "BATCHSUBMIT_TIMEOUT_SEC", "BATCHSUBMIT_EXCEL_HEADER_ROW"):
        monkeypatch.delenv(name, raising=False)

    clients = []

    class CliClient(make_client):
        def __init__(self, settings):
            super().__init__(responses=[
                (201, "application/json", '{"ref": "A"}'),
                (400, "application/json", '{"detail": "bad"}'),
            ])
            self.settings = settings
            clients.append(self)

        def set_static_token(self, token):
            self.token = token

    monkeypatch.setattr(run_submitter, "HttpClient", CliClient)
    return clients


@pytest.fixture
def input_csv(tmp_path):
    (tmp_path / "alice.txt").write_text("cv")
    path = tmp_path / "people.csv"
    path.write_text("id,name,cv\n1,Alice,alice.txt\n2,Bob,missing.txt\n", encoding="utf-8")
    return path


def _read_results(out_dir):
    [path] = list(out_dir.glob("results_*.csv"))
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def test_full_run_writes_results(cli_env, input_csv, tmp_path):
    out_dir = tmp_path / "out"

    code = run_submitter.run_submitter([str(input_csv), "--output-dir", str(out_dir)])

    assert code == 0
    [client] = cli_env
    assert client.token == "tok"
    assert client.closed
    # Relative attachment paths resolve next to the input file
    assert client.calls[0]["files"]["file"]["filename"] == "alice.txt"
    assert client.calls[1]["files"] == {}

    records = _read_results(out_dir)
    assert [r["RowId"] for r in records] == ["1", "2"]
    assert [r["Ok"] for r in records] == ["True", "False"]
    assert records[0]["Response"] == '{"ref": "A"}'
    assert records[0]["Attachment"].endswith("alice.txt")
    assert records[1]["HTTPStatus"] == "400"
    assert "bad" in records[1]["Error"]


def test_strict_flag(cli_env, input_csv, tmp_path):
    out_dir = tmp_path / "out"

    run_submitter.run_submitter([str(input_csv), "--output-dir", str(out_dir), "--strict"])

    [client] = cli_env
    assert len(client.calls) == 1
    records = _read_results(out_dir)
    assert records[1]["Ok"] == "False"
    assert "Attachment not found" in records[1]["Error"]


def test_dry_run_sends_nothing(cli_env, input_csv, tmp_path):
    out_dir = tmp_path / "out"

    code = run_submitter.run_submitter([str(input_csv), "--output-dir", str(out_dir), "--dry-run"])

    assert code == 0
    assert cli_env == []
    assert not out_dir.exists()


def test_missing_input_file(cli_env, tmp_path):
    code = run_submitter.run_submitter([str(tmp_path / "nope.csv")])

    assert code == 1
    assert cli_env == []


def test_missing_config(cli_env, input_csv, monkeypatch):
    monkeypatch.delenv("BATCHSUBMIT_TOKEN")

    assert run_submitter.run_submitter([str(input_csv)]) == 1


def test_unusable_attachment_path_still_writes_all_results(cli_env, tmp_path):
    path = tmp_path / "people.csv"
    long_name = "a" * 300 + ".pdf"
    path.write_text(
        f"id,name,cv\n1,Alice,~no_such_user_xyz/cv.pdf\n2,Bob,{long_name}\n",
        encoding="utf-8",
    )
    out_dir = tmp_path / "out"

    code = run_submitter.run_submitter([str(path), "--output-dir", str(out_dir)])

    assert code == 0
    [client] = cli_env
    assert [c["files"] for c in client.calls] == [{}, {}]
    assert [r["RowId"] for r in _read_results(out_dir)] == ["1", "2"]
