# Output formatters for CLI commands

import json


def format_text(issues: list[dict], verbose: bool = False) -> str:
    """
    Format issues as plain text.

    Returns - Formatted text string
    """
    if not issues:
        return "No issues found.\n"

    output = []
    for i, issue in enumerate(issues, 1):
        output.append(f"\n{i}. {issue.get('title', 'N/A')}")
        output.append(f"   URL: {issue.get('html_url', 'N/A')}")
        if verbose:
            output.append(f"   Repo: {issue.get('repo_name', 'N/A')}#{issue.get('number', 'N/A')}")
            output.append(f"   Author: {issue.get('user', 'N/A')}")
            output.append(f"   Updated: {issue.get('updated_at', 'N/A')}")
            output.append(f"   Fetched: {issue.get('fetched_at', 'N/A')}")
        output.append("")

    return "\n".join(output)


def format_json(data) -> str:
    """
    Format issues (or any summary dict) as JSON.

    Returns - JSON string
    """
    return json.dumps(data, indent=2, default=str)


def format_summary(summary: dict, title: str) -> str:
    """
    Format a flat summary dictionary as a banner block.

    Returns - Text block
    """
    lines = ["", "=" * 80, title.upper(), "=" * 80]
    for key, value in summary.items():
        label = key.replace("_", " ").capitalize()
        if isinstance(value, list):
            lines.append(f"{label}: {len(value)}")
            for entry in value:
                lines.append(f"  - {entry}")
        else:
            lines.append(f"{label}: {value}")
    lines.append("=" * 80)
    return "\n".join(lines)


def format_assignments(assignments: list[dict]) -> str:
    """
    Format triage assignments as a table.

    Returns - Table string
    """
    if not assignments:
        return "No assignments.\n"

    columns = ["#", "Priority", "Developer", "Repo", "Title"]
    rows = [
        [
            str(i),
            str(a.get("priority", "")),
            str(a.get("assigned_dev", "")),
            str(a.get("repo", "")),
            str(a.get("issue_title", ""))[:60],
        ]
        for i, a in enumerate(assignments, 1)
    ]
    widths = [max(len(col), *(len(row[idx]) for row in rows)) for idx, col in enumerate(columns)]

    header = " | ".join(col.ljust(widths[idx]) for idx, col in enumerate(columns))
    separator = "-+-".join("-" * w for w in widths)
    body = [" | ".join(cell.ljust(widths[idx]) for idx, cell in enumerate(row)) for row in rows]
    return "\n".join([header, separator, *body]) + "\n"


def format_output(issues: list[dict], format_type: str, verbose: bool = False) -> str:
    """
    Format issues based on the specified format.

    Args:
        issues: List of issue dictionaries
        format_type: One of 'text', 'json'
        verbose: Whether to include detailed information

    Returns:
        Formatted string
    """
    format_type = str(format_type).lower()

    if format_type == "text":
        return format_text(issues, verbose)
    elif format_type == "json":
        return format_json(issues)
    else:
        raise ValueError(f"Unsupported format: {format_type}")
