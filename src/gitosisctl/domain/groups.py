"""Group and member rules on top of :mod:`gitosisctl.domain.conffile`.

A group is a ``[group <name>]`` section whose ``members`` option holds a
space-separated member list.

INVARIANT: Member order is insertion order, never sorted. Consumers of
``gitosis.conf`` may rely on the most recently added member being last.

Every operation validates fully before mutating, so a failed call leaves
the document exactly as it was.
"""

from __future__ import annotations

from gitosisctl.domain import conffile
from gitosisctl.domain.conffile import ConfigDocument
from gitosisctl.domain.errors import (
    DuplicateSection,
    GroupAlreadyExists,
    GroupNotFound,
    InvalidName,
    MemberAlreadyInGroup,
    MemberNotInGroup,
    SectionNotFound,
)
from gitosisctl.domain.sections import GroupSection, classify, group_section

MEMBERS_OPTION = "members"
MEMBER_ALREADY_IN_GROUP_MSG = "This user is already member of this group"


def _validate(kind: str, value: str) -> None:
    if not value or any(ch.isspace() for ch in value) or "]" in value:
        raise InvalidName(f"Invalid {kind} name: {value!r}", **{kind: value})


def split_members(raw: str | None) -> list[str]:
    """Decode a ``members`` value; absent or blank means no members."""
    if not raw:
        return []
    return raw.split()


def join_members(members: list[str]) -> str:
    return " ".join(members)


def add_group(doc: ConfigDocument, name: str) -> None:
    """Create an empty group.

    No check is made against any repository list: a group may be created
    for a project that does not exist yet.

    Raises:
        InvalidName: *name* is empty or contains whitespace.
        GroupAlreadyExists: the group section is already present.
    """
    _validate("group", name)
    try:
        conffile.add_section(doc, group_section(name))
    except DuplicateSection as exc:
        raise GroupAlreadyExists(f"Group {name} already exists", group=name) from exc


def remove_group(doc: ConfigDocument, name: str) -> None:
    """Delete a group and its options.

    Raises:
        GroupNotFound: no such group.
    """
    try:
        conffile.remove_section(doc, group_section(name))
    except SectionNotFound as exc:
        raise GroupNotFound(f"Group {name} does not exist", group=name) from exc


def get_members(doc: ConfigDocument, name: str) -> list[str]:
    """Return the ordered member list of group *name*.

    Raises:
        GroupNotFound: no such group.
    """
    section = conffile.get_section(doc, group_section(name))
    if section is None:
        raise GroupNotFound(f"Group {name} does not exist", group=name)
    return split_members(section.get(MEMBERS_OPTION))


def add_member(doc: ConfigDocument, group: str, member: str) -> None:
    """Append *member* to the end of *group*'s member list.

    Raises:
        InvalidName: *member* is empty or contains whitespace.
        GroupNotFound: no such group.
        MemberAlreadyInGroup: exact-match duplicate.
    """
    _validate("member", member)
    members = get_members(doc, group)
    if member in set(members):
        raise MemberAlreadyInGroup(MEMBER_ALREADY_IN_GROUP_MSG, group=group, member=member)
    members.append(member)
    conffile.set_option(doc, group_section(group), MEMBERS_OPTION, join_members(members))


def remove_member(doc: ConfigDocument, group: str, member: str) -> None:
    """Drop *member* from *group*, keeping the order of the others.

    Raises:
        GroupNotFound: no such group.
        MemberNotInGroup: *member* is not listed.
    """
    members = get_members(doc, group)
    if member not in members:
        raise MemberNotInGroup(
            f"{member} is not a member of group {group}", group=group, member=member
        )
    members.remove(member)
    conffile.set_option(doc, group_section(group), MEMBERS_OPTION, join_members(members))


def list_groups(doc: ConfigDocument) -> list[str]:
    """Group names in file order."""
    names: list[str] = []
    for section in doc:
        kind = classify(section.name)
        if isinstance(kind, GroupSection):
            names.append(kind.name)
    return names
