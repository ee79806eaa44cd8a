"""Section-name kinds.

Section headers take the form ``"<kind> <identifier>"``. The ``"group "``
prefix convention lives here and nowhere else: :func:`group_section`
builds a name, :func:`classify` takes one apart.
"""

from __future__ import annotations

from dataclasses import dataclass

GROUP_PREFIX = "group "


@dataclass(frozen=True)
class GroupSection:
    """A ``[group <name>]`` section."""

    name: str

    @property
    def section_name(self) -> str:
        return f"{GROUP_PREFIX}{self.name}"


@dataclass(frozen=True)
class OtherSection:
    """Any section that is not a group (``[gitosis]``, ``[repo x]``, ...)."""

    raw: str

    @property
    def section_name(self) -> str:
        return self.raw


SectionKind = GroupSection | OtherSection


def group_section(name: str) -> str:
    """Return the section name for group *name*."""
    return GroupSection(name).section_name


def classify(section_name: str) -> SectionKind:
    """Map a raw section name onto its kind.

    Examples:
        >>> classify("group devs")
        GroupSection(name='devs')
        >>> classify("gitosis")
        OtherSection(raw='gitosis')
    """
    if section_name.startswith(GROUP_PREFIX) and len(section_name) > len(GROUP_PREFIX):
        return GroupSection(section_name[len(GROUP_PREFIX) :])
    return OtherSection(section_name)
