"""In-memory group membership directory."""

from __future__ import annotations

from collections import defaultdict


class InMemoryGroupDirectory:
    """Answers membership questions from in-process sets.

    Organizers are implicitly members of their group.
    """

    def __init__(self) -> None:
        self._members: defaultdict[str, set[str]] = defaultdict(set)
        self._organizers: defaultdict[str, set[str]] = defaultdict(set)

    def add_member(self, group_id: str, member_id: str) -> None:
        self._members[group_id].add(member_id)

    def add_organizer(self, group_id: str, member_id: str) -> None:
        self._organizers[group_id].add(member_id)
        self._members[group_id].add(member_id)

    def remove_member(self, group_id: str, member_id: str) -> None:
        self._members[group_id].discard(member_id)
        self._organizers[group_id].discard(member_id)

    def is_member(self, group_id: str, member_id: str) -> bool:
        return member_id in self._members.get(group_id, ())

    def is_organizer(self, group_id: str, member_id: str) -> bool:
        return member_id in self._organizers.get(group_id, ())
