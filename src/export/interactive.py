"""
Interactive terminal view of an extraction result, rendered with rich.

Citation groups start collapsed. Expansion state belongs to the view
instance and is never persisted.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text
from rich.tree import Tree

from src.export.report_view import BucketView, EntryView, Report, build_report
from src.models import Bucket, BulletStatus, SREDOutput

EMPTY_BUCKET_MESSAGE = "No content extracted for this bucket"

BADGE_STYLES: Dict[str, str] = {
    "High": "bold white on red",
    "Medium": "black on yellow",
    "Low": "black on green",
    "goal": "white on blue",
    "constraint": "black on yellow",
    "uncertainty": "white on magenta",
    "complete": "black on green",
    "incomplete": "black on yellow",
    "unresolved": "white on red",
}


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


class InteractiveView:
    """Five bucket panels with collapsible citation groups.

    Each entry's citations form one group addressed by the entry id
    (e.g. ``work_performed.0``); ``toggle`` flips a group.
    """

    def __init__(self, output: SREDOutput, model_used: Optional[str] = None):
        self.report: Report = build_report(output)
        self.model_used = model_used
        self._expanded: Set[str] = set()

    @property
    def group_ids(self) -> List[str]:
        return [entry.entry_id for bucket in self.report.buckets for entry in bucket.entries if entry.citations]

    def is_expanded(self, group_id: str) -> bool:
        return group_id in self._expanded

    def toggle(self, group_id: str) -> bool:
        """Flip one citation group; returns the new expanded state."""
        if group_id not in self.group_ids:
            raise KeyError(f"Unknown citation group: {group_id}")
        if group_id in self._expanded:
            self._expanded.discard(group_id)
            return False
        self._expanded.add(group_id)
        return True

    def expand_all(self) -> None:
        self._expanded = set(self.group_ids)

    def collapse_all(self) -> None:
        self._expanded.clear()

    def item_badge(self, bucket: BucketView) -> str:
        return _plural(bucket.count, "item")

    def _entry_label(self, entry: EntryView, badge_first: bool) -> Text:
        label = Text()
        badge = Text(f" {entry.badge} ", style=BADGE_STYLES.get(entry.badge or "", "reverse"))
        if entry.badge and badge_first:
            label.append_text(badge)
            label.append(" ")
        label.append(entry.title or "", style="bold")
        if entry.badge and not badge_first:
            label.append(" ")
            label.append_text(badge)
        return label

    def _add_entry(self, parent: Tree, entry: EntryView, bucket: Bucket) -> None:
        if bucket == Bucket.DRAFTING_MATERIAL:
            ready = entry.badge == BulletStatus.DRAFT_READY.value
            label = Text("✓ " if ready else "! ", style="green" if ready else "yellow")
            label.append(entry.body)
            node = parent.add(label)
            if not ready and entry.note:
                node.add(Text(f"Needs clarification: {entry.note}", style="yellow"))
        else:
            node = parent.add(self._entry_label(entry, badge_first=bucket == Bucket.BIG_PICTURE))
            if entry.body and entry.body != entry.title:
                node.add(Text(entry.body, style="dim"))
            for field_label, value in entry.fields:
                line = Text(f"{field_label}: ", style="dim")
                line.append(value)
                node.add(line)
        self._add_citations(node, entry)

    def _add_citations(self, node: Tree, entry: EntryView) -> None:
        if not entry.citations:
            return
        expanded = self.is_expanded(entry.entry_id)
        marker = "▾" if expanded else "▸"
        group = node.add(
            Text(f"{marker} {_plural(len(entry.citations), 'citation')} [{entry.entry_id}]", style="cyan")
        )
        if not expanded:
            return
        for citation in entry.citations:
            quote = Text(f'"{citation.quote or ""}"', style="italic")
            if citation.location:
                quote.append(f"\n{citation.location}", style="dim")
            group.add(quote)

    def _bucket_entries(self, tree: Tree, bucket: BucketView) -> None:
        if bucket.key == Bucket.DRAFTING_MATERIAL:
            for group in bucket.non_empty_groups():
                section = tree.add(Text(group.title, style="bold"))
                for entry in group.entries:
                    self._add_entry(section, entry, bucket.key)
            return
        for entry in bucket.entries:
            self._add_entry(tree, entry, bucket.key)

    def render_bucket(self, bucket: BucketView) -> Panel:
        tree = Tree(Text(bucket.description, style="dim"), guide_style="dim")
        if bucket.is_empty:
            tree.add(Text(EMPTY_BUCKET_MESSAGE, style="italic dim"))
        else:
            self._bucket_entries(tree, bucket)
        return Panel(
            tree,
            title=Text(bucket.title, style="bold"),
            title_align="left",
            subtitle=self.item_badge(bucket),
            subtitle_align="right",
            border_style="blue",
        )

    def renderables(self) -> Iterable[Panel]:
        return [self.render_bucket(bucket) for bucket in self.report.buckets]

    def __rich__(self) -> Group:
        header: List = []
        if self.model_used:
            header.append(Text(f"Results  ({self.model_used})", style="bold"))
        return Group(*header, *self.renderables())

    def print(self, console: Optional[Console] = None) -> None:
        (console or Console()).print(self)
