import pytest

from adminlib import assets, bootstrap, dialogs, elevation
from adminlib.bootstrap import prepare, run_script
from adminlib.config import BootstrapConfig
from adminlib.errors import AssetsMissingError
from adminlib.logging_utils import error_records
from adminlib.modules import ModuleSpec


@pytest.fixture
def config(assets_dir):
    return BootstrapConfig(assets_dir=assets_dir, asset_file="codes.csv", require_admin=False, interactive=False)


@pytest.fixture
def calls(monkeypatch, assets_dir):
    """Record the order of the bootstrap steps."""
    order = []

    def fake_verify(folder, file_name, interactive=None):
        order.append("assets")
        return assets_dir

    def fake_admin(**kwargs):
        order.append("admin")
        return True

    def fake_load(specs, **kwargs):
        order.append("modules")
        return True

    monkeypatch.setattr(assets, "verify_assets_folder", fake_verify)
    monkeypatch.setattr(elevation, "ensure_admin", fake_admin)
    monkeypatch.setattr(bootstrap, "load_modules", fake_load)
    return order


def test_prepare_runs_steps_in_order(config, calls):
    context = prepare(config.with_overrides(require_admin=True), [ModuleSpec("json")])
    assert calls == ["assets", "admin", "modules"]
    assert context is not None
    assert context.assets_dir == config.assets_dir


def test_prepare_skips_elevation_when_not_required(config, calls):
    assert prepare(config) is not None
    assert calls == ["assets", "modules"]


def test_prepare_stops_when_not_elevated(config, calls, monkeypatch):
    def not_admin(**kwargs):
        calls.append("admin")
        return False

    monkeypatch.setattr(elevation, "ensure_admin", not_admin)

    assert prepare(config.with_overrides(require_admin=True)) is None
    assert calls == ["assets", "admin"]


def test_bootstrap_false_when_assets_missing(tmp_path):
    config = BootstrapConfig(assets_dir=tmp_path / "missing", require_admin=False, interactive=False)
    assert bootstrap.bootstrap(config) is False
    assert [r.tag for r in error_records()] == ["AssetsFolderMissing"]


def test_run_script_success_gives_context(config):
    seen = {}

    def body(ctx):
        seen["rows"] = ctx.asset_rows()
        seen["path"] = ctx.asset_path

    assert run_script(body, config) == 0
    assert seen["path"] == config.assets_dir / "codes.csv"
    assert [row["Department"] for row in seen["rows"]] == ["ADM", "BIO"]


def test_run_script_bootstrap_failure_skips_body(tmp_path):
    config = BootstrapConfig(assets_dir=tmp_path / "missing", require_admin=False, interactive=False)
    body_calls = []

    assert run_script(body_calls.append, config) == 1
    assert body_calls == []


def test_run_script_body_returning_false(config):
    assert run_script(lambda ctx: False, config) == 1


def test_run_script_body_exception(config):
    def body(ctx):
        raise RuntimeError("report crashed")

    assert run_script(body, config) == 1


def test_run_script_keyboard_interrupt(config):
    def body(ctx):
        raise KeyboardInterrupt

    assert run_script(body, config) == 1


def test_run_script_admin_error_is_recorded(config):
    def body(ctx):
        raise AssetsMissingError("codes vanished")

    assert run_script(body, config, name="report") == 1
    assert [r.tag for r in error_records()] == ["AssetsFolderMissing"]


def test_prepare_passes_located_folder_to_relaunch(config, calls, monkeypatch, tmp_path):
    seen = {}

    def fake_admin(**kwargs):
        seen.update(kwargs)
        return False

    monkeypatch.setattr(elevation, "ensure_admin", fake_admin)
    located = config.with_overrides(assets_dir=tmp_path / "elsewhere", require_admin=True)

    assert prepare(located) is None
    assert seen["extra_args"] == ("--assets-dir", str(config.assets_dir))


def test_prepare_relaunch_without_extra_args_when_folder_unchanged(config, monkeypatch):
    seen = {}

    def fake_admin(**kwargs):
        seen.update(kwargs)
        return False

    monkeypatch.setattr(elevation, "ensure_admin", fake_admin)

    assert prepare(config.with_overrides(require_admin=True)) is None
    assert seen["extra_args"] == ()


def test_run_script_dialog_failure_during_bootstrap(tmp_path, monkeypatch):
    def no_display(target):
        raise RuntimeError("no display")

    monkeypatch.setattr(dialogs.ft, "app", no_display)
    config = BootstrapConfig(assets_dir=tmp_path / "missing", require_admin=False, interactive=True)

    assert run_script(lambda ctx: True, config) == 1
    assert [r.tag for r in error_records()] == ["AssetsFolderMissing"]


def test_run_script_keyboard_interrupt_while_loading_modules(config, monkeypatch):
    def interrupted(specs, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(bootstrap, "load_modules", interrupted)
    body_calls = []

    assert run_script(body_calls.append, config, [ModuleSpec("openpyxl")]) == 1
    assert body_calls == []
