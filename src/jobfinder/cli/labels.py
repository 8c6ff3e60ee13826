"""CLI command: labels."""

from rich.table import Table

from jobfinder.models.labels import (
    APPLICATION_STATUS_LABELS,
    CONTRACT_TYPE_LABELS,
    EXPERIENCE_LEVEL_LABELS,
    WORK_MODALITY_LABELS,
)

from .app import app
from .shared import console


@app.command()
def labels() -> None:
    """Show the filter values accepted by search and their display labels."""
    tables = (
        ("Contract type (--contract)", CONTRACT_TYPE_LABELS),
        ("Work modality (--modality)", WORK_MODALITY_LABELS),
        ("Experience level (--level)", EXPERIENCE_LEVEL_LABELS),
        ("Application status", APPLICATION_STATUS_LABELS),
    )
    for title, mapping in tables:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Value", style="green")
        table.add_column("Label")
        for member, text in mapping.items():
            table.add_row(member.value, text)
        console.print(table)
