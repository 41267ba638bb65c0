"""Plain-text rendering of records for the CLI."""


def format_table(rows: list[dict], columns: list[str] | None = None) -> str:
    """Format dict rows as a left-aligned, column-padded table.

    Args:
        rows: Records as returned by ``to_dict()``.
        columns: Column order. Defaults to the keys of the first row.

    Returns:
        Formatted table string.
    """
    if not rows:
        return "No results found."

    col_order = columns or list(rows[0].keys())
    widths = {col: len(col) for col in col_order}
    for row in rows:
        for col in col_order:
            widths[col] = max(widths[col], len(str(row.get(col, ""))))

    header_line = "  ".join(col.ljust(widths[col]) for col in col_order)
    separator = "  ".join("─" * widths[col] for col in col_order)

    lines = [header_line, separator]
    for row in rows:
        line = "  ".join(str(row.get(col, "")).ljust(widths[col]) for col in col_order)
        lines.append(line.rstrip())

    return "\n".join(lines)
