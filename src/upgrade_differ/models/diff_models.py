"""Models for edit scripts, hunks and patch documents."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OpType(str, Enum):
    """Kind of a single edit operation."""

    EQUAL = "equal"
    DELETE = "delete"
    INSERT = "insert"


class EditOperation(BaseModel):
    """One step of an edit script.

    Equal names a position in both sequences, Delete only a source
    position, Insert only a target position. Indices are 0-based.
    """

    model_config = ConfigDict(frozen=True)

    op: OpType
    source_index: int | None = None
    target_index: int | None = None

    @model_validator(mode="after")
    def _check_indices(self) -> "EditOperation":
        needs_source = self.op in (OpType.EQUAL, OpType.DELETE)
        needs_target = self.op in (OpType.EQUAL, OpType.INSERT)
        if needs_source != (self.source_index is not None):
            raise ValueError(f"{self.op.value} operation source_index mismatch")
        if needs_target != (self.target_index is not None):
            raise ValueError(f"{self.op.value} operation target_index mismatch")
        return self

    @classmethod
    def equal(cls, source_index: int, target_index: int) -> "EditOperation":
        return cls(op=OpType.EQUAL, source_index=source_index, target_index=target_index)

    @classmethod
    def delete(cls, source_index: int) -> "EditOperation":
        return cls(op=OpType.DELETE, source_index=source_index)

    @classmethod
    def insert(cls, target_index: int) -> "EditOperation":
        return cls(op=OpType.INSERT, target_index=target_index)


class EditScript(BaseModel):
    """Ordered edit operations turning the source sequence into the target."""

    model_config = ConfigDict(frozen=True)

    operations: list[EditOperation] = Field(default_factory=list)
    source_length: int = 0
    target_length: int = 0

    @property
    def delete_count(self) -> int:
        return sum(1 for op in self.operations if op.op == OpType.DELETE)

    @property
    def insert_count(self) -> int:
        return sum(1 for op in self.operations if op.op == OpType.INSERT)

    @property
    def edit_distance(self) -> int:
        return self.delete_count + self.insert_count

    @property
    def has_changes(self) -> bool:
        return any(op.op != OpType.EQUAL for op in self.operations)


class Hunk(BaseModel):
    """A context-bounded run of edit operations.

    Starts are 0-based positions in the source and target sequences; the
    renderer converts them to unified-diff line numbers.
    """

    model_config = ConfigDict(frozen=True)

    source_start: int
    source_count: int
    target_start: int
    target_count: int
    operations: list[EditOperation] = Field(default_factory=list)


class PatchDocument(BaseModel):
    """Header labels, both line sequences and the hunks to render."""

    model_config = ConfigDict(frozen=True)

    source_label: str
    target_label: str
    source_lines: list[str] = Field(default_factory=list)
    target_lines: list[str] = Field(default_factory=list)
    hunks: list[Hunk] = Field(default_factory=list)
    line_terminator: str = "\n"
