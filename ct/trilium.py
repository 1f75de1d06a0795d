"""
Trilium Notes - latest TriliumNext server release run by systemd
"""
import logging
import shlex

from cli import FileOps, SystemCtl
from libs.catalog import ServiceKind
from .base import InstallOutcome, Installer

logger = logging.getLogger(__name__)

URL_FILE = "/tmp/trilium_url.txt"
ARCHIVE = "/tmp/trilium.tar.xz"

UNIT_TEMPLATE = """[Unit]
Description=Trilium Notes
After=network.target

[Service]
Type=simple
ExecStart={install_dir}/trilium.sh
WorkingDirectory={install_dir}
Restart=always
User=root

[Install]
WantedBy=multi-user.target
"""


class TriliumInstaller(Installer):
    """Install Trilium Notes server"""
    kind = ServiceKind.TRILIUM
    description = "Trilium installation"

    def install(self) -> InstallOutcome:
        install_dir = self.params["install_dir"]
        logger.info("Installing Trilium...")
        self.apt_upgrade()
        self.apt_install(self.definition.packages)

        logger.info("Downloading latest TriliumNext server...")
        jq_filter = (
            '.assets[] | select(.name | test("{}")) | .browser_download_url'.format(self.params["asset_pattern"])
        )
        self.run(
            f"curl -fsSL {shlex.quote(self.params['release_api'])} | jq -r {shlex.quote(jq_filter)} > {URL_FILE}"
            f" && test -s {URL_FILE}",
            "Resolve Trilium release URL",
            timeout=120,
        )
        self.run(f"wget -q -i {URL_FILE} -O {ARCHIVE}", "Download Trilium")
        self.run(f"tar -xf {ARCHIVE} -C /tmp/", "Unpack Trilium")
        self.run(f"mv /tmp/TriliumNextNotes-*-linux-x64 {shlex.quote(install_dir)}", "Move Trilium into place")

        unit = UNIT_TEMPLATE.format(install_dir=install_dir)
        self.run(FileOps.write_cmd("/etc/systemd/system/trilium.service", unit), "Write trilium.service")
        self.run(SystemCtl.daemon_reload_cmd(), "systemctl daemon-reload")
        self.run(SystemCtl.enable_now_cmd("trilium"), "Enable trilium service")
        return InstallOutcome()
