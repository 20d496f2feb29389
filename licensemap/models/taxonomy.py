# licensemap/models/taxonomy.py

from typing import Any, Iterator
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator


# ============================================
# Group paths
# ============================================

PATH_DELIMITER = ">"
PATH_SEPARATOR = " > "
UNCLASSIFIED = "Unclassified"

GroupPath = tuple[str, ...]


class TaxonomyError(ValueError):
    """Raised when a taxonomy definition is malformed."""


def join_path(segments: GroupPath) -> str:
    """Display form of a path: segments joined with ' > '."""
    return PATH_SEPARATOR.join(segments)


def split_path(path: str) -> GroupPath:
    """Split a display path back into its trimmed, non-empty segments."""
    if not path:
        return ()
    return tuple(s.strip() for s in path.split(PATH_DELIMITER) if s.strip())


# ============================================
# Taxonomy tree
# ============================================

class TaxonomyNode(BaseModel):
    """A category in the taxonomy. Leaves carry the canonical member names."""

    name: str
    children: list["TaxonomyNode"] = Field(default_factory=list)
    members: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("taxonomy node name must not be blank")
        if PATH_DELIMITER in value:
            raise ValueError(f"taxonomy node name {value!r} must not contain {PATH_DELIMITER!r}")
        return value

    @field_validator("children", "members", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("members")
    @classmethod
    def _dedupe_members(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for member in value:
            member = member.strip()
            if member and member not in seen:
                seen.append(member)
        return seen

    @model_validator(mode="after")
    def _check_shape(self) -> "TaxonomyNode":
        if self.children and self.members:
            raise ValueError(f"taxonomy node {self.name!r} has both children and members")
        _check_unique_names(self.children, self.name)
        return self


TaxonomyNode.model_rebuild()


class Taxonomy(BaseModel):
    """A full taxonomy definition: the ordered top-level groups."""

    groups: list[TaxonomyNode] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_groups(self) -> "Taxonomy":
        _check_unique_names(self.groups, "<root>")
        if any(group.name == UNCLASSIFIED for group in self.groups):
            raise ValueError(f"{UNCLASSIFIED!r} is reserved and cannot be a top-level group")
        return self

    @classmethod
    def parse(cls, definition: Any) -> "Taxonomy":
        """
        Build a Taxonomy from a definition.

        Accepts a Taxonomy, a {"groups": [...]} mapping or a bare list of nodes.
        Raises TaxonomyError for anything malformed.
        """
        if isinstance(definition, Taxonomy):
            return definition
        if isinstance(definition, list):
            definition = {"groups": definition}
        if not isinstance(definition, dict):
            raise TaxonomyError(
                f"Unsupported taxonomy definition type: {type(definition).__name__}"
            )
        try:
            return cls.model_validate(definition)
        except ValidationError as e:
            raise TaxonomyError(f"Invalid taxonomy definition: {e}") from e

    def walk(self) -> Iterator[tuple[GroupPath, TaxonomyNode]]:
        """Depth-first, pre-order walk yielding (segments, node)."""
        stack: list[tuple[GroupPath, TaxonomyNode]] = [
            ((group.name,), group) for group in reversed(self.groups)
        ]
        while stack:
            segments, node = stack.pop()
            yield segments, node
            for child in reversed(node.children):
                stack.append((segments + (child.name,), child))


def _check_unique_names(nodes: list[TaxonomyNode], parent: str) -> None:
    names = [node.name for node in nodes]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"duplicate child names under {parent!r}: {', '.join(duplicates)}")
