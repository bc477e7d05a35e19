import pytest

from nginxctl.utils import log


def test_messages_below_level_are_dropped(capsys):
    log.set_level("info")

    log.debug("probing %s", "nginx")
    log.verbose("sending %s", "TERM")
    log.info("nginx started")

    err = capsys.readouterr().err
    assert "probing" not in err
    assert "sending" not in err
    assert "nginx started" in err


def test_debug_level_prints_everything(capsys):
    log.set_level("debug")

    log.debug("starting nginx: %s", "/usr/local/openresty/nginx/sbin/nginx -p /tmp/kong-test")

    err = capsys.readouterr().err
    assert "debug: starting nginx: /usr/local/openresty/nginx/sbin/nginx -p /tmp/kong-test" in err


def test_markup_in_messages_is_printed_literally(capsys):
    log.error("nginx: [emerg] bind() failed")

    assert "nginx: [emerg] bind() failed" in capsys.readouterr().err


def test_quiet_silences_errors(capsys):
    log.set_level("quiet")

    log.error("boom")

    assert capsys.readouterr().err == ""


def test_set_level_accepts_warning_alias_and_rejects_unknown():
    log.set_level("WARNING")
    assert log.get_level() == "warn"

    with pytest.raises(ValueError):
        log.set_level("chatty")
