#!/usr/bin/env python3
"""
hlab - provision and manage homelab application containers on Proxmox
Creates LXC containers with pct, installs Pi-hole, Trilium, Homarr, Observium,
UniFi or a docker-compose host inside them, and reports the access URLs
"""
import argparse
import logging
import os
import sys
from dependency_injector import containers, providers
from commands import ComposeDeploy, Deploy, Install, Manage, Provisioner
from libs.catalog import load_catalog
from libs.config import DEFAULT_CONFIG_FILE, SSHConfig
from libs.errors import ConfigMissing, HlabError, PrivilegeError
from libs.logger import get_logger, init_logger
from services import BackupService, LXCService, PCTService, TemplateService

logger = get_logger(__name__)


class HlabArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits 1 on invalid usage."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = HlabArgumentParser(
        prog="hlab",
        description="Provision homelab application containers on a Proxmox host",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Run without a command for the interactive management menu.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every host command and its output")
    parser.add_argument(
        "--host",
        default=os.environ.get("PROXMOX_HOST"),
        help="Proxmox host ([user@]host) to manage over SSH (default: $PROXMOX_HOST, or run locally)",
    )
    parser.add_argument("--catalog", default=None, help="Service catalog YAML (default: bundled catalog)")
    parser.add_argument("--log-file", default=None, help="Also write a DEBUG log to this file")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    deploy_parser = subparsers.add_parser("deploy", help="Deploy every enabled service from the config file")
    deploy_parser.add_argument(
        "config", nargs="?", default=str(DEFAULT_CONFIG_FILE), help=f"Config file (default: {DEFAULT_CONFIG_FILE})"
    )
    install_parser = subparsers.add_parser("install", help="Interactively deploy one or all services")
    install_parser.add_argument("service", nargs="?", default=None, help="Service to deploy (skips the menu)")
    subparsers.add_parser("compose", help="Deploy a docker-compose services host")

    subparsers.add_parser("list", help="List service containers")
    subparsers.add_parser("urls", help="Show service access URLs")
    subparsers.add_parser("resources", help="Show container resource usage")
    subparsers.add_parser("update", help="Update packages and services in every container")
    backup_parser = subparsers.add_parser("backup", help="Back up every service container with vzdump")
    backup_parser.add_argument("storage", nargs="?", default=None, help="Backup storage (default: local)")
    subparsers.add_parser("start", help="Start all service containers")
    subparsers.add_parser("stop", help="Stop all service containers")
    enter_parser = subparsers.add_parser("enter", help="Open a console in a container")
    enter_parser.add_argument("ctid", nargs="?", default=None, help="Container ID (prompted when omitted)")
    return parser


def build_container(args) -> containers.DynamicContainer:
    """Wire services and commands for one run."""
    di = containers.DynamicContainer()

    # Catalog is only parsed when a command needs it
    di.catalog = providers.Singleton(load_catalog, args.catalog)

    # One host connection per run, shared by every service
    di.lxc_service = providers.Singleton(LXCService, host=args.host, ssh_config=SSHConfig())
    di.pct_service = providers.Singleton(PCTService, lxc_service=di.lxc_service)
    di.template_service = providers.Singleton(TemplateService, lxc_service=di.lxc_service)
    di.backup_service = providers.Singleton(BackupService, lxc_service=di.lxc_service)

    # Host settings differ per command, so commands receive the factory
    di.provisioner = providers.Factory(
        Provisioner,
        catalog=di.catalog,
        pct_service=di.pct_service,
        template_service=di.template_service,
    )

    di.deploy = providers.Factory(
        Deploy,
        catalog=di.catalog,
        pct_service=di.pct_service,
        provisioner_factory=di.provisioner.provider,
    )
    di.install = providers.Factory(
        Install,
        catalog=di.catalog,
        pct_service=di.pct_service,
        template_service=di.template_service,
        provisioner_factory=di.provisioner.provider,
    )
    di.compose = providers.Factory(
        ComposeDeploy,
        catalog=di.catalog,
        pct_service=di.pct_service,
        provisioner_factory=di.provisioner.provider,
    )
    di.manage = providers.Factory(
        Manage,
        catalog=di.catalog,
        pct_service=di.pct_service,
        backup_service=di.backup_service,
    )
    return di


def check_privileges(lxc_service: LXCService):
    """pct needs root on the Proxmox host."""
    if lxc_service.effective_uid() != 0:
        raise PrivilegeError(f"This tool must be run as root on the Proxmox host ({lxc_service.target})")


def resolve_command(di: containers.DynamicContainer, command):
    if command == "deploy":
        return di.deploy()
    if command == "install":
        return di.install()
    if command == "compose":
        return di.compose()
    # management commands and the no-argument menu
    return di.manage()


def main(argv=None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    log_level = logging.DEBUG if args.verbose else logging.INFO
    init_logger(level=log_level)

    di = build_container(args)
    lxc_service = di.lxc_service()
    try:
        check_privileges(lxc_service)
        if args.log_file:
            init_logger(level=log_level, log_file=args.log_file)
        return resolve_command(di, args.command).run(args)
    except ConfigMissing as err:
        logger.info("Example config written to %s", err.path)
        logger.info("Please edit the config file and run this command again")
        return err.exit_code
    except HlabError as err:
        logger.error("%s", err)
        return err.exit_code
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
    finally:
        lxc_service.disconnect()


if __name__ == "__main__":
    sys.exit(main())
