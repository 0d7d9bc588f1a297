"""Dashboard-layout slice.

Section ids are partitioned between an ordered ``visible`` tuple and an
unordered ``hidden`` set: every known id is in exactly one of them. Each
transition is a single ``set()`` so the partition is never observed half
updated. Ids outside the known universe are ignored.
"""

from typing import Iterable


class DashboardSlice:
    """Actions for ``dashboard_visible_section_ids`` and ``dashboard_hidden_section_ids``."""

    _dashboard_sections: tuple[str, ...]

    def set_dashboard_sections(self, visible: Iterable[str], hidden: Iterable[str]) -> None:
        """Replace the layout, repairing it into a valid partition.

        Unknown and duplicate ids are dropped, ids listed as both visible and
        hidden stay visible, and known ids missing from both lists are
        appended to the visible order.
        """
        known = set(self._dashboard_sections)
        ordered: list[str] = []
        for section_id in visible:
            if section_id in known and section_id not in ordered:
                ordered.append(section_id)
        hidden_ids = {s for s in hidden if s in known and s not in ordered}
        for section_id in self._dashboard_sections:
            if section_id not in ordered and section_id not in hidden_ids:
                ordered.append(section_id)

        self.set({
            "dashboard_visible_section_ids": tuple(ordered),
            "dashboard_hidden_section_ids": frozenset(hidden_ids),
        })

    def move_dashboard_section_to_hidden(self, section_id: str) -> None:
        if section_id not in self._dashboard_sections:
            return
        self.set(lambda state: {
            "dashboard_visible_section_ids": tuple(
                s for s in state.dashboard_visible_section_ids if s != section_id
            ),
            "dashboard_hidden_section_ids": state.dashboard_hidden_section_ids | {section_id},
        })

    def move_dashboard_section_to_visible(self, section_id: str) -> None:
        """Show a hidden section, appending it at the end of the visible order."""
        if section_id not in self._dashboard_sections:
            return

        def transition(state):
            visible = state.dashboard_visible_section_ids
            if section_id not in visible:
                visible = visible + (section_id,)
            return {
                "dashboard_visible_section_ids": visible,
                "dashboard_hidden_section_ids": state.dashboard_hidden_section_ids - {section_id},
            }

        self.set(transition)

    def reorder_dashboard_visible(self, from_index: int, to_index: int) -> None:
        """Move one visible section; out-of-range ``from_index`` is a no-op."""

        def transition(state):
            visible = list(state.dashboard_visible_section_ids)
            if not 0 <= from_index < len(visible):
                return {}
            section_id = visible.pop(from_index)
            visible.insert(max(to_index, 0), section_id)
            return {"dashboard_visible_section_ids": tuple(visible)}

        self.set(transition)
