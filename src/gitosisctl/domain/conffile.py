"""In-memory model of ``gitosis.conf`` — parse, mutate, serialize.

Format::

    [group devs]
    members = alice bob

Blank lines and ``#`` / ``;`` comment lines are accepted on input and not
reproduced on output. Option values are single-line; surrounding whitespace
is not part of the value.

INVARIANT: Section names are unique within a document. Section order and
option order are insertion order, and both survive a serialize/parse
round-trip unchanged.

Pure functions over :class:`ConfigDocument`; nothing here touches disk.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from gitosisctl.domain.errors import DuplicateSection, MalformedConfig, SectionNotFound

ENCODING = "utf-8"
_COMMENT_PREFIXES = ("#", ";")
_OPTION_SEPARATORS = ("=", ":")


@dataclass
class Section:
    """A named section owning an ordered option mapping.

    ``options`` is a plain dict: insertion-ordered, and its keys double as
    the uniqueness index for option names.
    """

    name: str
    options: dict[str, str] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Section):
            return NotImplemented
        return self.name == other.name and list(self.options.items()) == list(
            other.options.items()
        )

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.options.get(key, default)


@dataclass
class ConfigDocument:
    """Ordered sequence of uniquely named sections.

    ``_sections`` holds the order; ``_index`` enforces uniqueness and gives
    O(1) lookup. Both are kept in step by :func:`add_section` and
    :func:`remove_section`.
    """

    _sections: list[Section] = field(default_factory=list)
    _index: dict[str, Section] = field(default_factory=dict, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigDocument):
            return NotImplemented
        return self._sections == other._sections

    def __iter__(self) -> Iterator[Section]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    @property
    def section_names(self) -> list[str]:
        return [s.name for s in self._sections]


# ---------------------------------------------------------------------------
# Parsing / serialization
# ---------------------------------------------------------------------------


def parse(data: bytes | str) -> ConfigDocument:
    """Parse config file content into a :class:`ConfigDocument`.

    Raises:
        MalformedConfig: unterminated section header, option line before
            any header, option line without a separator, empty section
            name, or a section name that appears twice.
    """
    if isinstance(data, bytes):
        try:
            text = data.decode(ENCODING)
        except UnicodeDecodeError as exc:
            raise MalformedConfig(f"Config is not valid {ENCODING}: {exc}") from exc
    else:
        text = data

    doc = ConfigDocument()
    current: Section | None = None

    # Only "\n" ends a line; a trailing "\r" is removed by strip().
    for lineno, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.strip()
        if not line or line.startswith(_COMMENT_PREFIXES):
            continue

        if line.startswith("["):
            if not line.endswith("]"):
                raise MalformedConfig(
                    f"Unterminated section header at line {lineno}: {raw_line!r}",
                    line=lineno,
                )
            name = line[1:-1].strip()
            if not name:
                raise MalformedConfig(f"Empty section name at line {lineno}", line=lineno)
            try:
                current = add_section(doc, name)
            except DuplicateSection as exc:
                raise MalformedConfig(
                    f"Duplicate section [{name}] at line {lineno}", line=lineno
                ) from exc
            continue

        if current is None:
            raise MalformedConfig(
                f"Option outside of any section at line {lineno}: {raw_line!r}",
                line=lineno,
            )

        key, value = _split_option(line, lineno)
        current.options[key] = value

    return doc


def _split_option(line: str, lineno: int) -> tuple[str, str]:
    """Split ``key = value`` (or ``key: value``) at the first separator."""
    positions = [line.find(sep) for sep in _OPTION_SEPARATORS if sep in line]
    if not positions:
        raise MalformedConfig(f"Expected 'key = value' at line {lineno}: {line!r}", line=lineno)
    pos = min(positions)
    key = line[:pos].strip()
    if not key:
        raise MalformedConfig(f"Missing option name at line {lineno}: {line!r}", line=lineno)
    return key, line[pos + 1 :].strip()


def serialize(doc: ConfigDocument) -> bytes:
    """Render *doc* back to file content (UTF-8, trailing newline).

    Sections are separated by one blank line.
    """
    blocks: list[str] = []
    for section in doc:
        lines = [f"[{section.name}]"]
        lines.extend(f"{key} = {value}".rstrip() for key, value in section.options.items())
        blocks.append("\n".join(lines))
    if not blocks:
        return b""
    return ("\n\n".join(blocks) + "\n").encode(ENCODING)


# ---------------------------------------------------------------------------
# Section / option operations
# ---------------------------------------------------------------------------


def get_section(doc: ConfigDocument, name: str) -> Section | None:
    """Return the section called *name*, or None."""
    return doc._index.get(name)


def add_section(doc: ConfigDocument, name: str) -> Section:
    """Append an empty section called *name*.

    Raises:
        DuplicateSection: *name* is already present. The document is unchanged.
        ValueError: *name* is empty, multi-line, or padded with whitespace.
    """
    if not name or name != name.strip() or "\n" in name:
        msg = f"Invalid section name: {name!r}"
        raise ValueError(msg)
    if name in doc._index:
        raise DuplicateSection(f"Section [{name}] already exists", section=name)
    section = Section(name=name)
    doc._sections.append(section)
    doc._index[name] = section
    return section


def remove_section(doc: ConfigDocument, name: str) -> None:
    """Remove the section called *name*.

    Raises:
        SectionNotFound: no such section. The document is unchanged.
    """
    section = doc._index.pop(name, None)
    if section is None:
        raise SectionNotFound(f"Section [{name}] does not exist", section=name)
    doc._sections.remove(section)


def set_option(doc: ConfigDocument, section: str, key: str, value: str) -> None:
    """Insert or overwrite ``key = value`` in *section*.

    Overwriting keeps the option's original position; inserting appends.

    Raises:
        SectionNotFound: *section* does not exist.
        ValueError: *key* is not a valid option name or *value* spans
            more than one line.
    """
    target = get_section(doc, section)
    if target is None:
        raise SectionNotFound(f"Section [{section}] does not exist", section=section)
    if not _valid_key(key):
        msg = f"Invalid option name: {key!r}"
        raise ValueError(msg)
    if "\n" in value or "\r" in value:
        msg = f"Option values must be single-line: {key!r}"
        raise ValueError(msg)
    target.options[key] = value.strip()


def _valid_key(key: str) -> bool:
    if not key or key != key.strip() or "\n" in key:
        return False
    if key.startswith(("[", *_COMMENT_PREFIXES)):
        return False
    return not any(sep in key for sep in _OPTION_SEPARATORS)
