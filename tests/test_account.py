from __future__ import annotations

from conftest import FakeRunner, make_accounts


def test_account_set_when_no_sentinel(token_file) -> None:
    runner = FakeRunner({"account get": "Mullvad account: 1234567890123456\nExpires at: 2027-01-01"})
    assert make_accounts(runner, token_file).is_account_set()


def test_account_not_set_on_sentinel(token_file) -> None:
    runner = FakeRunner({"account get": "No account configured"})
    assert not make_accounts(runner, token_file).is_account_set()


def test_unexpected_output_counts_as_configured(token_file) -> None:
    runner = FakeRunner({"account get": "Error: daemon not running"})
    assert make_accounts(runner, token_file).is_account_set()


def test_set_account_passes_token_verbatim(token_file) -> None:
    runner = FakeRunner()
    assert make_accounts(runner, token_file).set_account()
    assert runner.calls == [["mullvad", "account", "set", "1234567890123456"]]


def test_set_account_without_file(tmp_path) -> None:
    runner = FakeRunner()
    assert not make_accounts(runner, tmp_path / "missing.txt").set_account()
    assert runner.calls == []


def test_set_account_with_empty_file(tmp_path) -> None:
    path = tmp_path / "account.txt"
    path.write_text("  \n", encoding="utf-8")
    runner = FakeRunner()
    assert not make_accounts(runner, path).set_account()
    assert runner.count("account set") == 0


def test_assert_account_is_idempotent_when_configured(token_file) -> None:
    runner = FakeRunner({"account get": "Mullvad account: 1234567890123456"})
    assert make_accounts(runner, token_file).assert_account()
    assert runner.count("account set") == 0


def test_assert_account_sets_when_missing(token_file) -> None:
    runner = FakeRunner({"account get": "No account configured"})
    assert make_accounts(runner, token_file).assert_account()
    assert runner.subcommands() == ["account get", "account set 1234567890123456"]


def test_assert_account_fails_without_token(tmp_path) -> None:
    runner = FakeRunner({"account get": "No account configured"})
    assert not make_accounts(runner, tmp_path / "nope.txt").assert_account()


def test_token_is_not_logged(token_file, caplog) -> None:
    runner = FakeRunner({"account get": "No account configured"})
    with caplog.at_level("DEBUG"):
        make_accounts(runner, token_file).assert_account()
    assert "1234567890123456" not in caplog.text
