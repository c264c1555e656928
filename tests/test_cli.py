import json

import pytest

from kakeibo.cli import main


@pytest.fixture
def run(data_dir):
    def _run(*argv):
        return main(["--data-dir", str(data_dir), *argv])

    return _run


def test_add_and_list(run, capsys):
    assert run("transaction", "add", "2024-01-05", "250", "--store", "Cafe") == 0
    assert run("transaction", "add", "2024-01-20", "1050", "--type", "income") == 0
    capsys.readouterr()

    assert run("transaction", "list", "--month", "2024-01") == 0
    out = capsys.readouterr().out
    assert "Found 2 transactions" in out
    assert "-¥300 Cafe (expense)" in out
    assert "+¥1,000 未指定 (income)" in out


def test_list_empty(run, capsys):
    assert run("transaction", "list", "--year", "2024") == 0
    assert "No transactions found." in capsys.readouterr().out


def test_edit_and_delete_unknown_ids_are_noops(run, capsys):
    assert run("transaction", "edit", "missing", "--amount", "500") == 0
    assert run("transaction", "delete", "missing") == 0
    assert capsys.readouterr().out.count("nothing changed") == 2


def test_edit_amount_keeps_expense_sign(run, data_dir, capsys):
    assert run("transaction", "add", "2024-01-05", "250", "--store", "Cafe") == 0
    records = json.loads((data_dir / "transactions.json").read_text(encoding="utf-8"))
    tid = records[0]["id"]

    assert run("transaction", "edit", tid, "--amount", "500") == 0
    assert "-¥500 Cafe (expense)" in capsys.readouterr().out
    records = json.loads((data_dir / "transactions.json").read_text(encoding="utf-8"))
    assert records[0]["amount"] == -500


def test_edit_amount_with_type_switches_sign(run, data_dir, capsys):
    assert run("transaction", "add", "2024-01-05", "250") == 0
    tid = json.loads((data_dir / "transactions.json").read_text(encoding="utf-8"))[0]["id"]

    assert run("transaction", "edit", tid, "--amount", "500", "--type", "income") == 0
    assert "+¥500" in capsys.readouterr().out


def test_show_unknown_id_fails(run, capsys):
    assert run("transaction", "show", "missing") == 1
    assert "not found" in capsys.readouterr().err


def test_invalid_month_is_rejected_by_parser(run):
    with pytest.raises(SystemExit):
        run("report", "monthly", "2024-13")


def test_monthly_report_to_stdout_and_file(run, capsys, tmp_path):
    run("transaction", "add", "2024-01-05", "250", "--store", "Cafe")
    capsys.readouterr()

    assert run("report", "monthly", "2024-01", "--no-grouping") == 0
    assert "2024-01-05\t-¥300\tCafe" in capsys.readouterr().out

    assert run("report", "monthly", "2024-01", "--output-dir", str(tmp_path / "out")) == 0
    written = (tmp_path / "out" / "finance-report-2024-01.txt").read_text(encoding="utf-8")
    assert written.startswith("=== 2024-01 収支レポート ===")


def test_yearly_report_file(run, tmp_path):
    run("transaction", "add", "2024-03-01", "1200")
    assert run("report", "yearly", "2024", "--output-dir", str(tmp_path)) == 0
    written = (tmp_path / "yearly-finance-report-2024.txt").read_text(encoding="utf-8")
    assert "年間総支出: -¥1,200" in written


def test_summary_and_series(run, capsys):
    run("transaction", "add", "2024-01-05", "300")
    run("transaction", "add", "2024-01-06", "1000", "--type", "income")
    capsys.readouterr()

    assert run("summary", "2024-01") == 0
    out = capsys.readouterr().out
    assert "Year 2024" in out and "Month 2024-01" in out
    assert "Balance: +¥700" in out

    assert run("series", "2024-01") == 0
    out = capsys.readouterr().out
    assert "2024-01-06\t+¥1,000\t-¥0\t+¥700" in out
    assert "Axis: -400 .. 1100" in out


def test_ingest_candidates(run, capsys, tmp_path):
    candidates = tmp_path / "candidates.json"
    candidates.write_text(
        json.dumps(
            [
                {"date": "2024-04-01", "store": "OCR", "amount": -980, "type": "expense"},
                {"date": "2024-04-02", "store": "", "amount": 3050, "type": "income"},
            ]
        ),
        encoding="utf-8",
    )
    assert run("transaction", "ingest", str(candidates)) == 0
    assert "Imported 2 transactions." in capsys.readouterr().out


def test_ingest_rejects_non_array(run, capsys, tmp_path):
    candidates = tmp_path / "candidates.json"
    candidates.write_text('{"date": "2024-04-01"}', encoding="utf-8")
    assert run("transaction", "ingest", str(candidates)) == 1
    assert "Validation error" in capsys.readouterr().err


def test_backup_export_and_restore(run, capsys, tmp_path, monkeypatch):
    run("transaction", "add", "2024-01-05", "250", "--store", "Cafe")
    assert run("backup", "export", "--output-dir", str(tmp_path / "backups")) == 0
    backup_file = next((tmp_path / "backups").glob("finance-backup-*.json"))

    run("transaction", "add", "2024-02-01", "100")
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    assert run("backup", "restore", str(backup_file)) == 1
    capsys.readouterr()

    assert run("backup", "restore", str(backup_file), "--yes") == 0
    assert "1件の取引を復元しました" in capsys.readouterr().out

    run("transaction", "list")
    out = capsys.readouterr().out
    assert "Found 1 transactions" in out


def test_restore_invalid_backup(run, capsys, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text('{"version": "1.0"}', encoding="utf-8")
    assert run("backup", "restore", str(bad), "--yes") == 1
    assert "無効なバックアップファイルです" in capsys.readouterr().err


def test_restore_missing_file(run, capsys, tmp_path):
    assert run("backup", "restore", str(tmp_path / "missing.json"), "--yes") == 1
    assert "バックアップファイルの読み込みに失敗しました" in capsys.readouterr().err
