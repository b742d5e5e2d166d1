"""Controllers package for the Trello board maintainer."""

from board_maintainer.controllers.maintenance import (
    GroupStats,
    MaintenanceReport,
    MutationFailedError,
    process_list,
    run_group,
    run_maintenance,
)

__all__ = [
    "GroupStats",
    "MaintenanceReport",
    "MutationFailedError",
    "process_list",
    "run_group",
    "run_maintenance",
]
