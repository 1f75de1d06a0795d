#!/usr/bin/env python3
"""
Tests for the hlab entry point: privilege check, wiring and exit codes
"""
import subprocess
from unittest import mock

import pytest

import hlab
from commands import ComposeDeploy, Deploy, Install, Manage
from libs.config import HostConfig
from services.lxc import LXCService


def _no_subprocess(*args, **kwargs):
    raise AssertionError(f"unexpected subprocess call: {args}")


@pytest.fixture
def no_side_effects(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _no_subprocess)
    monkeypatch.setattr(subprocess, "call", _no_subprocess)


@pytest.mark.parametrize("argv", [[], ["deploy"], ["list"], ["backup", "local"], ["install", "trilium"]])
def test_non_root_exits_1_without_side_effects(monkeypatch, no_side_effects, tmp_path, argv):
    monkeypatch.setattr("services.lxc.os.geteuid", lambda: 1000)
    monkeypatch.delenv("PROXMOX_HOST", raising=False)
    if argv == ["deploy"]:
        argv = ["deploy", str(tmp_path / "missing.conf")]
    assert hlab.main(argv) == 1
    assert not (tmp_path / "missing.conf").exists()


def test_invalid_command_exits_1():
    with pytest.raises(SystemExit) as excinfo:
        hlab.main(["frobnicate"])
    assert excinfo.value.code == 1


def test_missing_config_exits_0(monkeypatch, no_side_effects, tmp_path):
    monkeypatch.setattr("services.lxc.os.geteuid", lambda: 0)
    monkeypatch.delenv("PROXMOX_HOST", raising=False)
    config_path = tmp_path / "deployment-config.conf"
    assert hlab.main(["deploy", str(config_path)]) == 0
    assert "TRILIUM_ENABLED=true" in config_path.read_text(encoding="utf-8")


def test_invalid_config_exits_1(monkeypatch, no_side_effects, tmp_path):
    monkeypatch.setattr("services.lxc.os.geteuid", lambda: 0)
    monkeypatch.delenv("PROXMOX_HOST", raising=False)
    config_path = tmp_path / "deployment-config.conf"
    config_path.write_text("TRILIUM_ENABLED=maybe\n", encoding="utf-8")
    assert hlab.main(["deploy", str(config_path)]) == 1


def test_container_wiring():
    args = hlab.build_parser().parse_args(["--host", "root@pve.lan", "list"])
    di = hlab.build_container(args)
    lxc_service = di.lxc_service()
    assert isinstance(lxc_service, LXCService)
    assert lxc_service.host == "pve.lan" and not lxc_service.is_local
    # one connection shared by every service
    assert di.pct_service().lxc is lxc_service
    assert di.template_service().lxc is lxc_service
    assert isinstance(hlab.resolve_command(di, "deploy"), Deploy)
    assert isinstance(hlab.resolve_command(di, "install"), Install)
    assert isinstance(hlab.resolve_command(di, "compose"), ComposeDeploy)
    manage = hlab.resolve_command(di, None)
    assert isinstance(manage, Manage)
    assert manage.backup_service.lxc is lxc_service


def test_provisioner_factory_accepts_host():
    args = hlab.build_parser().parse_args(["deploy"])
    di = hlab.build_container(args)
    deploy = di.deploy()
    provisioner = deploy.provisioner_factory(host=HostConfig(storage="VM_Data"))
    assert provisioner.host.storage == "VM_Data"
    assert provisioner.pct is di.pct_service()


def test_host_defaults_to_environment(monkeypatch):
    monkeypatch.setenv("PROXMOX_HOST", "pve.lan")
    args = hlab.build_parser().parse_args(["urls"])
    assert args.host == "pve.lan"


def test_remote_privilege_check_uses_id(monkeypatch):
    lxc_service = LXCService(host="admin@pve.lan")
    monkeypatch.setattr(lxc_service, "execute", lambda command, timeout=None: ("1000", 0))
    with pytest.raises(hlab.PrivilegeError):
        hlab.check_privileges(lxc_service)
    monkeypatch.setattr(lxc_service, "execute", lambda command, timeout=None: ("0", 0))
    hlab.check_privileges(lxc_service)


def _closed_stdin(message):
    raise EOFError


@pytest.mark.parametrize("argv", [["compose"], []])
def test_closed_stdin_exits_1(monkeypatch, no_side_effects, argv):
    monkeypatch.setattr("services.lxc.os.geteuid", lambda: 0)
    monkeypatch.delenv("PROXMOX_HOST", raising=False)
    monkeypatch.setattr("builtins.input", _closed_stdin)
    assert hlab.main(argv) == 1


def test_remote_execute_combines_stderr():
    lxc_service = LXCService(host="root@pve.lan")
    client = mock.MagicMock()
    stdout, stderr = mock.MagicMock(), mock.MagicMock()
    stdout.read.return_value = b"created\nwarning: low space\n"
    stderr.read.return_value = b""
    stdout.channel.recv_exit_status.return_value = 0
    client.exec_command.return_value = (mock.MagicMock(), stdout, stderr)
    lxc_service._client = client
    assert lxc_service.execute("pct list", timeout=5) == ("created\nwarning: low space", 0)
    stdout.channel.set_combine_stderr.assert_called_once_with(True)
