#!/usr/bin/env python3
"""
Tests for provisioning: idempotence, creation parameters, installers and failure policy
"""
import argparse
import base64

import pytest

from commands.deploy import Deploy, ProvisionAborted, ProvisionStatus
from ct import INSTALLERS
from ct.pihole import extract_password
from libs.catalog import ServiceKind
from libs.config import DeployConfig, HostConfig, ServiceSpec, parse_env
from libs.errors import TemplateNotFound

TRILIUM_ONLY = """TRILIUM_ENABLED=true
TRILIUM_CTID=101
TRILIUM_IP=10.1.10.11/24
"""


def make_spec(catalog, kind, enabled=True, **changes):
    definition = catalog[kind]
    values = dict(
        name=definition.display_name,
        kind=kind,
        enabled=enabled,
        ctid=definition.ctid,
        hostname=definition.hostname,
        address=definition.address,
        gateway="10.1.10.254",
        cores=definition.cores,
        memory=definition.memory,
        disk=definition.disk,
    )
    values.update(changes)
    return ServiceSpec(**values)


def test_every_kind_has_an_installer():
    assert set(INSTALLERS) == set(ServiceKind)


def test_disabled_entry_has_no_side_effects(catalog, fake_host, provisioner_factory, host_config):
    provisioner = provisioner_factory(host_config)
    result = provisioner.provision(make_spec(catalog, ServiceKind.PIHOLE, enabled=False))
    assert result.status == ProvisionStatus.DISABLED
    assert fake_host.commands == []


def test_existing_ctid_is_skipped_without_mutation(catalog, fake_host, provisioner_factory, host_config):
    fake_host.containers[101] = ["running", "Trilium-Notes"]
    result = provisioner_factory(host_config).provision(make_spec(catalog, ServiceKind.TRILIUM))
    assert result.status == ProvisionStatus.SKIPPED_EXISTS
    assert fake_host.commands == ["pct status 101 2>&1"]
    assert fake_host.mutating == []


def test_trilium_only_scenario(tmp_path, catalog, fake_host, provisioner_factory, sleeps, caplog):
    config_path = tmp_path / "deployment-config.conf"
    config_path.write_text(TRILIUM_ONLY, encoding="utf-8")
    deploy = Deploy(catalog=catalog, provisioner_factory=provisioner_factory)
    with caplog.at_level("INFO"):
        assert deploy.run(argparse.Namespace(config=str(config_path))) == 0
    assert fake_host.created == [101]
    assert sleeps == [5]
    assert "Running Trilium installation in CT 101..." in caplog.text
    assert "Access Trilium Notes at: http://10.1.10.11:8080" in caplog.text


def test_trilium_only_results(catalog, fake_host, provisioner_factory):
    cfg = DeployConfig.from_dict(parse_env(TRILIUM_ONLY), catalog)
    results = provisioner_factory(cfg.host).run(cfg.services)
    by_kind = {r.spec.kind: r for r in results}
    assert by_kind[ServiceKind.TRILIUM].status == ProvisionStatus.CREATED
    assert by_kind[ServiceKind.TRILIUM].access_url == "http://10.1.10.11:8080"
    others = [r.status for kind, r in by_kind.items() if kind != ServiceKind.TRILIUM]
    assert len(others) == len(ServiceKind) - 1
    assert all(status == ProvisionStatus.DISABLED for status in others)
    assert fake_host.created == [101]


def test_second_run_is_idempotent(catalog, fake_host, provisioner_factory, host_config):
    specs = [
        make_spec(catalog, ServiceKind.TRILIUM),
        make_spec(catalog, ServiceKind.HOMARR),
    ]
    first = provisioner_factory(host_config).run(specs)
    assert [r.status for r in first] == [ProvisionStatus.CREATED, ProvisionStatus.CREATED]
    created = list(fake_host.created)

    del fake_host.commands[:]
    second = provisioner_factory(host_config).run(specs)
    assert [r.status for r in second] == [ProvisionStatus.SKIPPED_EXISTS, ProvisionStatus.SKIPPED_EXISTS]
    assert fake_host.mutating == []
    assert sorted(created) == [101, 102]


def test_create_parameters_for_docker_service(catalog, fake_host, provisioner_factory, host_config):
    result = provisioner_factory(host_config).provision(make_spec(catalog, ServiceKind.HOMARR))
    assert result.access_url == "http://10.1.10.12:7575"
    create = next(cmd for cmd in fake_host.commands if cmd.startswith("pct create"))
    assert "local:vztmpl/debian-12-standard_12.7-1_amd64.tar.zst" in create
    assert "--net0 name=eth0,bridge=vmbr0,ip=10.1.10.12/24,gw=10.1.10.254" in create
    assert "--storage VM_Data --rootfs VM_Data:12" in create
    assert "--features nesting=1" in create
    assert "--nameserver 10.1.10.254" in create
    assert any("lxc.apparmor.profile: unconfined" in cmd and "/etc/pve/lxc/102.conf" in cmd for cmd in fake_host.commands)
    inner = fake_host.exec_commands(102)
    assert any("docker-compose-plugin" in cmd for cmd in inner)
    assert any("docker compose up -d" in cmd for cmd in inner)


def test_native_service_gets_no_nesting(catalog, fake_host, provisioner_factory, host_config):
    provisioner_factory(host_config).provision(make_spec(catalog, ServiceKind.TRILIUM))
    create = next(cmd for cmd in fake_host.commands if cmd.startswith("pct create"))
    assert "nesting" not in create
    assert not any("apparmor" in cmd for cmd in fake_host.commands)


def test_template_downloaded_once_when_not_cached(catalog, provisioner_factory, host_config, fake_host):
    fake_host.cached = False
    provisioner = provisioner_factory(host_config)
    provisioner.run([make_spec(catalog, ServiceKind.TRILIUM), make_spec(catalog, ServiceKind.UNIFI)])
    downloads = [cmd for cmd in fake_host.commands if cmd.startswith("pveam download")]
    assert downloads == ["pveam download local debian-12-standard_12.7-1_amd64.tar.zst 2>&1"]


def test_missing_template_is_fatal(catalog, provisioner_factory, fake_host):
    host = HostConfig(gateway="10.1.10.254", template="alpine-3.19")
    with pytest.raises(TemplateNotFound):
        provisioner_factory(host).provision(make_spec(catalog, ServiceKind.TRILIUM))
    assert fake_host.created == []


def test_dhcp_url_read_back_from_container(catalog, fake_host, provisioner_factory):
    fake_host.ips[101] = "10.1.10.57 fd00::57"
    host = HostConfig(storage="local-lvm")
    result = provisioner_factory(host).provision(make_spec(catalog, ServiceKind.TRILIUM, address="dhcp", gateway=None))
    assert result.access_url == "http://10.1.10.57:8080"
    create = next(cmd for cmd in fake_host.commands if cmd.startswith("pct create"))
    assert "ip=dhcp" in create and "gw=" not in create and "--nameserver" not in create


def test_abort_policy_stops_batch(catalog, fake_host, provisioner_factory, host_config):
    fake_host.fail("api.github.com")
    specs = [make_spec(catalog, ServiceKind.TRILIUM), make_spec(catalog, ServiceKind.HOMARR)]
    with pytest.raises(ProvisionAborted) as excinfo:
        provisioner_factory(host_config).run(specs)
    assert excinfo.value.exit_code == 100
    assert [r.status for r in excinfo.value.results] == [ProvisionStatus.FAILED]
    # no rollback, and HOMARR never started
    assert fake_host.created == [101]


def test_continue_policy_records_failure(catalog, fake_host, provisioner_factory):
    fake_host.fail("api.github.com")
    host = HostConfig(storage="VM_Data", gateway="10.1.10.254", on_failure="continue")
    specs = [make_spec(catalog, ServiceKind.TRILIUM), make_spec(catalog, ServiceKind.HOMARR)]
    results = provisioner_factory(host).run(specs)
    assert [r.status for r in results] == [ProvisionStatus.FAILED, ProvisionStatus.CREATED]
    assert results[0].exit_code == 100
    assert "Resolve Trilium release URL" in results[0].error


def test_deploy_command_exit_code_on_abort(tmp_path, catalog, fake_host, provisioner_factory):
    fake_host.fail("api.github.com")
    config_path = tmp_path / "deployment-config.conf"
    config_path.write_text(TRILIUM_ONLY, encoding="utf-8")
    deploy = Deploy(catalog=catalog, provisioner_factory=provisioner_factory)
    with pytest.raises(ProvisionAborted) as excinfo:
        deploy.run(argparse.Namespace(config=str(config_path)))
    assert excinfo.value.exit_code == 100


def test_pihole_password_extracted(catalog, fake_host, provisioner_factory, host_config):
    fake_host.respond(
        "install.pi-hole.net",
        "  [i] Installation complete!\n"
        "  [i] Web Interface password: \x1b[1;32mXk3pQ9\x1b[0m\n"
        "  [i] This can be changed using 'pihole -a -p'\n",
    )
    result = provisioner_factory(host_config).provision(make_spec(catalog, ServiceKind.PIHOLE))
    assert result.credentials == {"Pi-hole admin password": "Xk3pQ9"}
    assert result.access_url == "http://10.1.10.10/admin"
    setup = next(cmd for cmd in fake_host.exec_commands(110) if "setupVars.conf" in cmd)
    payload = base64.b64decode(setup.split()[1]).decode()
    assert "IPV4_ADDRESS=10.1.10.10/24" in payload


@pytest.mark.parametrize(
    "output, password",
    [
        ("  [i] Web Interface password: \x1b[1;32mAbc12XyZ\x1b[0m\n  [i] Done\n", "Abc12XyZ"),
        ("  Your Admin Webpage login password is Xk3pQ9\n", "Xk3pQ9"),
        ("  Enter New Password (Blank for no password):\n  New password: s3cret\n", "s3cret"),
        # status line with no value must not pick up the next line
        ("  [✓] New password set\n  [i] Done\n", None),
        ("  [i] Web Interface password: \n  [i] Done\n", None),
        ("", None),
    ],
)
def test_extract_password(output, password):
    assert extract_password(output) == password


def test_pihole_without_password_adds_note(catalog, fake_host, provisioner_factory, host_config):
    result = provisioner_factory(host_config).provision(make_spec(catalog, ServiceKind.PIHOLE))
    assert result.credentials == {}
    assert any("pihole -a -p" in note for note in result.notes)


def test_observium_generates_credentials(catalog, fake_host, provisioner_factory, host_config):
    result = provisioner_factory(host_config).provision(make_spec(catalog, ServiceKind.OBSERVIUM))
    assert result.access_url == "http://10.1.10.13"
    assert result.credentials["Username"] == "admin"
    assert result.credentials["Password"] and result.credentials["Database password"]
    inner = fake_host.exec_commands(103)
    assert any("./adduser.php admin" in cmd for cmd in inner)
    assert any("CREATE DATABASE IF NOT EXISTS observium" in cmd for cmd in inner)


def test_unifi_adds_vendor_repositories(catalog, fake_host, provisioner_factory, host_config):
    result = provisioner_factory(host_config).provision(make_spec(catalog, ServiceKind.UNIFI))
    assert result.access_url == "https://10.1.10.14:8443"
    inner = fake_host.exec_commands(104)
    assert any("100-ubnt-unifi.list" in cmd for cmd in inner)
    assert any("mongodb-org unifi" in cmd for cmd in inner)


def test_compose_host_env_and_links(catalog, fake_host, provisioner_factory, host_config):
    result = provisioner_factory(host_config).provision(make_spec(catalog, ServiceKind.COMPOSE))
    assert result.links["Trilium Notes"] == "http://10.1.10.20:8081"
    assert set(result.credentials) == {"Pi-hole Password", "UniFi DB Password"}
    env_cmd = next(cmd for cmd in fake_host.exec_commands(200) if "/opt/docker-services/.env" in cmd)
    env = base64.b64decode(env_cmd.split()[1]).decode()
    assert "HOST_IP=10.1.10.20\n" in env
    assert "HOSTNAME=docker-services\n" in env
    assert f"PIHOLE_PASSWORD={result.credentials['Pi-hole Password']}\n" in env

