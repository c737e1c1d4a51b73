# =============================================================================
# Command Line Tests
# =============================================================================

import pytest

from mailmirror.app import main, parse_args, print_envelopes, print_folders


def test_parse_args_defaults():
    args = parse_args([])
    assert args.pages == 1
    assert args.account is None
    assert not args.debug


def test_parse_args():
    args = parse_args(["--account", "work", "--folder", "Archive", "--pages", "3", "--debug"])
    assert (args.account, args.folder, args.pages, args.debug) == ("work", "Archive", 3, True)


def test_pages_must_be_positive():
    with pytest.raises(SystemExit):
        parse_args(["--pages", "0"])


def test_paths(monkeypatch, temp_dir, capsys):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
    assert main(["--paths"]) == 0
    assert str(temp_dir / "mailmirror" / "config.toml") in capsys.readouterr().out


@pytest.mark.asyncio
async def test_printing(controller, capsys):
    await controller.load_info()
    print_folders(controller)
    print_envelopes(controller)

    out = capsys.readouterr().out
    assert "* INBOX" in out
    assert "INBOX message 100" in out
    assert "50 older messages not loaded" in out
