"""Tests for command line parsing."""

import pytest

from udp_mqtt_gateway.config import DEFAULT_CONFIG_PATH, parse_args


def test_defaults():
    options = parse_args([])

    assert options.verbosity == 0
    assert options.config_path == DEFAULT_CONFIG_PATH == "/etc/udpmqttgw.conf"


def test_verbose_and_config_path():
    options = parse_args(["-v", "-c=/tmp/gw.conf"])

    assert options.verbosity == 1
    assert options.config_path == "/tmp/gw.conf"


def test_flags_in_any_order_last_path_wins():
    options = parse_args(["-c=/tmp/a.conf", "-v", "-c=/tmp/b.conf"])

    assert options.verbosity == 1
    assert options.config_path == "/tmp/b.conf"


def test_repeated_verbose_enables_trace_level():
    assert parse_args(["-v", "-v"]).verbosity == 2
    assert parse_args(["-vv"]).verbosity == 2


def test_help_exits_success(capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_args(["-h"])

    assert excinfo.value.code == 0
    assert "-c FILE" in capsys.readouterr().out


@pytest.mark.parametrize("argv", [["-x"], ["foo"], ["--verbose"], ["-v", "extra"]])
def test_unrecognized_argument_exits_failure(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_args(argv)

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("usage:")
    assert "error:" in err
