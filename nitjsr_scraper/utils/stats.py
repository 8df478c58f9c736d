from collections import defaultdict
from datetime import datetime, timezone

from rich.table import Table

COLUMNS = ("pages", "words", "internal", "external", "pdf", "image", "errors", "ignored")


class StatsReporter:
    """Centralize all crawl counters and table-generation logic."""

    def __init__(self):
        self.stats = defaultdict(int)
        self.per_category = defaultdict(lambda: defaultdict(int))

    def bump(self, key: str, category: str = None, n: int = 1):
        self.stats[key] += n
        if category:
            self.per_category[category][key] += n

    def get_table(self, start_time: datetime) -> Table:
        """
        Return a rich.Table summarizing current stats.
        `start_time` used to compute elapsed time.
        """
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Category", style="cyan")
        for col in COLUMNS:
            table.add_column(col.capitalize(), justify="right")

        for category in sorted(self.per_category):
            c = self.per_category[category]
            table.add_row(category, *(str(c[col]) for col in COLUMNS))

        table.add_row("─" * 20, *([""] * len(COLUMNS)))
        elapsed = str(datetime.now(timezone.utc) - start_time).split(".")[0]
        table.add_row(
            f"SUMMARY ⏱ {elapsed}",
            *(str(self.stats[col]) for col in COLUMNS),
            style="bold green",
        )
        return table
