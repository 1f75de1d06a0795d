"""
Observium - network monitoring on Apache, PHP and MariaDB
"""
import logging
import posixpath
import shlex

from cli import FileOps, MySQL, Sed, SystemCtl
from libs.catalog import ServiceKind
from .base import InstallOutcome, Installer, generate_password

logger = logging.getLogger(__name__)

TARBALL = "/tmp/observium.tar.gz"
DATABASE = "observium"
DB_USER = "observium"
ADMIN_LEVEL = 10

VHOST_TEMPLATE = """<VirtualHost *:80>
    DocumentRoot {install_dir}/html
    ServerName {hostname}
    <Directory {install_dir}/html>
        AllowOverride All
        Require all granted
    </Directory>
</VirtualHost>
"""


class ObserviumInstaller(Installer):
    """Install Observium Community Edition"""
    kind = ServiceKind.OBSERVIUM
    description = "Observium installation"

    def install(self) -> InstallOutcome:
        install_dir = self.params["install_dir"]
        admin_user = self.params.get("admin_user", "admin")
        config_php = f"{install_dir}/config.php"
        logger.info("Installing Observium dependencies...")
        logger.warning("Observium installation is complex and takes 10-15 minutes")
        self.apt_upgrade()
        self.apt_install(self.definition.packages)

        logger.info("Setting up MariaDB...")
        db_pass = generate_password()
        self.run(SystemCtl.start_cmd("mariadb"), "Start MariaDB")
        self.run(MySQL.create_database_cmd(DATABASE), "Create Observium database")
        self.run(MySQL.create_user_cmd(DB_USER, db_pass, DATABASE), "Create Observium database user")

        logger.info("Installing Observium Community Edition...")
        self.run(FileOps.download_cmd(self.params["tarball_url"], TARBALL), "Download Observium")
        self.run(f"tar zxf {TARBALL} -C {shlex.quote(posixpath.dirname(install_dir))}", "Unpack Observium")
        self.run(f"cp {config_php}.default {config_php}", "Create config.php")
        self.run(
            Sed.replace_cmd(config_php, "$config['db_user'] = 'USERNAME';", f"$config['db_user'] = '{DB_USER}';"),
            "Set Observium database user",
        )
        self.run(
            Sed.replace_cmd(config_php, "$config['db_pass'] = 'PASSWORD';", f"$config['db_pass'] = '{db_pass}';"),
            "Set Observium database password",
        )
        self.run(f"cd {shlex.quote(install_dir)} && ./discovery.php -u", "Initialise Observium schema")
        self.run(FileOps.chown_cmd(install_dir, "www-data:www-data", recursive=True), "Set Observium ownership")

        vhost = VHOST_TEMPLATE.format(install_dir=install_dir, hostname=self.spec.hostname)
        self.run(FileOps.write_cmd("/etc/apache2/sites-available/observium.conf", vhost), "Write Apache site")
        self.run("a2dissite 000-default && a2ensite observium && a2enmod rewrite", "Enable Observium site")
        self.run(SystemCtl.restart_cmd("apache2"), "Restart Apache")

        admin_pass = generate_password()
        self.run(
            f"cd {shlex.quote(install_dir)} && ./adduser.php {admin_user} {shlex.quote(admin_pass)} {ADMIN_LEVEL}",
            "Create Observium admin user",
        )
        return InstallOutcome(
            credentials={
                "Username": admin_user,
                "Password": admin_pass,
                "Database password": db_pass,
            },
        )
