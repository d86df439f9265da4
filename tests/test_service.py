import logging
import logging.handlers

import pytest

from burner_sync import __main__ as entry
from burner_sync import service
from burner_sync.config import Config, Credentials


@pytest.fixture
def cfg(tmp_path):
    c = Config(tmp_path / "config.json")
    c.home_folder = str(tmp_path / "home")
    return c


@pytest.fixture
def creds():
    return Credentials(host="localhost", port="9990", token="tok")


def test_setup_logging_installs_file_and_stderr_handlers(cfg, tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        service.setup_logging(cfg, "debug", log_path=tmp_path / "sync.log")
        added = [h for h in root.handlers if h not in before]
        assert root.level == logging.DEBUG
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in added)
        assert any(type(h) is logging.StreamHandler for h in added)
        logging.getLogger("burner_sync.test").info("hello log")
        for h in added:
            h.flush()
        assert "hello log" in (tmp_path / "sync.log").read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            if h not in before:
                root.removeHandler(h)
                h.close()
        root.setLevel(level)


def test_build_coordinator_follows_config(cfg, creds):
    cfg.debounce_scope = "path"
    cfg.request_timeout = 3
    coord = service.build_coordinator(cfg, creds)

    assert coord.scope == "path"
    assert str(coord.home_folder) == cfg.home_folder
    assert coord._uploader.endpoint == "http://localhost:9990/"


def test_start_sync_requires_home(cfg, creds):
    with pytest.raises(FileNotFoundError):
        service.start_sync(cfg, creds)


def test_start_sync_watches_home(cfg, creds, tmp_path):
    (tmp_path / "home").mkdir()
    watcher, coord = service.start_sync(cfg, creds)
    try:
        assert watcher.is_running
        assert coord.pending == {}
    finally:
        watcher.stop()


def test_parser_options():
    args = entry.build_parser().parse_args(["scripts", "--push-all", "--log-level", "DEBUG"])
    assert args.home == "scripts"
    assert args.push_all is True
    assert args.log_level == "DEBUG"


def test_main_exits_when_credentials_missing(tmp_path, monkeypatch):
    for key in ("HOST", "PORT", "TOKEN"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(service, "setup_logging", lambda *a, **k: None)
    ran = []
    monkeypatch.setattr(service, "run_foreground", lambda *a, **k: ran.append(a))

    with pytest.raises(SystemExit) as exc:
        entry.main(["--config", str(tmp_path / "c.json"), "--env", str(tmp_path / "none.env")])

    assert exc.value.code == 1
    assert ran == []


def test_main_runs_with_credentials(tmp_path, monkeypatch):
    for key in ("HOST", "PORT", "TOKEN"):
        monkeypatch.delenv(key, raising=False)
    env = tmp_path / ".env"
    env.write_text("HOST=h\nPORT=1\nTOKEN=t\n", encoding="utf-8")
    monkeypatch.setattr(service, "setup_logging", lambda *a, **k: None)
    ran = []
    monkeypatch.setattr(service, "run_foreground", lambda cfg, creds, push_all: ran.append((cfg, creds, push_all)))

    entry.main([str(tmp_path / "home"), "--config", str(tmp_path / "c.json"), "--env", str(env), "--push-all"])

    (cfg, creds, push_all), = ran
    assert cfg.home_folder == str((tmp_path / "home").resolve())
    assert creds.token == "t"
    assert push_all is True


def test_build_coordinator_tolerates_scope_typo(tmp_path, creds):
    path = tmp_path / "typo.json"
    path.write_text('{"debounce_scope": "paths"}', encoding="utf-8")

    coord = service.build_coordinator(Config(path), creds)

    assert coord.scope == "global"
