"""Migration module - RxJS 5 to 6 rewrite rules and the fix driver.

Only the plain data types are exported here; import ``MigrationOps`` from
``rxmigrate.migrate.ops`` (the oracle package imports the tables from this
package).
"""

from rxmigrate.migrate.models import (
    Chain,
    Diagnostic,
    Edit,
    FileMigration,
    Finding,
    MigrationReport,
    PassResult,
)

__all__ = [
    "Chain",
    "Diagnostic",
    "Edit",
    "FileMigration",
    "Finding",
    "MigrationReport",
    "PassResult",
]
