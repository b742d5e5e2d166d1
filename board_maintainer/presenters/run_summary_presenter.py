"""Run summary presenter for the Trello board maintainer.

Converts a ``MaintenanceReport.to_dict()`` payload into the human-readable
summary logged at the end of a run. No business logic and no side effects.
"""

from typing import Any, Dict, List

_GROUP_FIELDS = {
    "archive": "archived",
    "delete": "deleted",
    "reorder": "repositioned",
}


def _present_group(group: Dict[str, Any], dry_run: bool) -> str:
    name = group.get("group", "?")
    field = _GROUP_FIELDS.get(name, "")
    verb = field or "changed"
    cards = group.get("cards", 0)
    lists = group.get("lists", 0)

    if dry_run:
        changed = group.get("dry_run", 0)
        verb = f"would be {verb}"
    else:
        changed = group.get(field, 0) if field else 0

    parts: List[str] = [f"{name}: {changed}/{cards} card(s) {verb} across {lists} list(s)"]
    if group.get("skipped"):
        parts.append(f"{group['skipped']} skipped")
    if group.get("failed"):
        parts.append(f"{group['failed']} failed")
    return ", ".join(parts)


def present_run_summary(report: Dict[str, Any]) -> str:
    """Render a report dict as a one-line-per-group summary.

    Examples:
        >>> present_run_summary({"run_id": "r1", "dry_run": False, "groups": [
        ...     {"group": "archive", "lists": 1, "cards": 3, "archived": 1,
        ...      "skipped": 0, "failed": 0, "dry_run": 0}]})
        'Done. archive: 1/3 card(s) archived across 1 list(s)'
    """

    groups = report.get("groups") or []
    if not groups:
        return "Done. No lists were processed."

    dry_run = bool(report.get("dry_run"))
    lines = [_present_group(group, dry_run) for group in groups]
    prefix = "Done (dry run)." if dry_run else "Done."
    if len(lines) == 1:
        return f"{prefix} {lines[0]}"
    return prefix + "\n" + "\n".join(f"- {line}" for line in lines)
