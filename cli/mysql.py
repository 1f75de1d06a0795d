"""
MySQL/MariaDB client command wrapper
"""

import shlex

from .base import CommandWrapper


def _sql_string(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


class MySQL(CommandWrapper):
    """Wrapper for running SQL through the local mysql client as root."""

    @staticmethod
    def execute_cmd(statement: str) -> str:
        """Generate command to run one SQL statement"""
        return f"mysql -e {shlex.quote(statement)} 2>&1"

    @staticmethod
    def create_database_cmd(database: str) -> str:
        return MySQL.execute_cmd(
            f"CREATE DATABASE IF NOT EXISTS {database} DEFAULT CHARACTER SET utf8 COLLATE utf8_general_ci;"
        )

    @staticmethod
    def create_user_cmd(user: str, password: str, database: str) -> str:
        """Generate command creating a local user with full rights on ``database``"""
        account = f"{_sql_string(user)}@'localhost'"
        return MySQL.execute_cmd(
            f"CREATE USER {account} IDENTIFIED BY {_sql_string(password)}; "
            f"GRANT ALL PRIVILEGES ON {database}.* TO {account}; "
            "FLUSH PRIVILEGES;"
        )
