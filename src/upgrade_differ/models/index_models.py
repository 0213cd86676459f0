"""Models for source roots, reconciliation indexes and modification entries."""

from enum import Enum
from typing import Annotated, Iterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class IndexSide(str, Enum):
    """Which source set an index was built from."""

    BASELINE = "baseline"
    WORKING = "working"


class SourceRoot(BaseModel):
    """A named source root with its prefix in each source set."""

    model_config = ConfigDict(frozen=True)

    name: str
    baseline_prefix: str
    working_prefix: str

    def prefix_for(self, side: IndexSide) -> str:
        if side == IndexSide.BASELINE:
            return self.baseline_prefix
        return self.working_prefix


DEFAULT_SOURCE_ROOTS: tuple[SourceRoot, ...] = (
    SourceRoot(name="portal-impl", baseline_prefix="portal-impl/src/", working_prefix="ext-impl/src/"),
    SourceRoot(name="portal-service", baseline_prefix="portal-service/src/", working_prefix="ext-service/src/"),
    SourceRoot(name="portal-web", baseline_prefix="portal-web/docroot/", working_prefix="ext-web/docroot/"),
    SourceRoot(name="util-bridges", baseline_prefix="util-bridges/src/", working_prefix="ext-util-bridges/src/"),
    SourceRoot(name="util-java", baseline_prefix="util-java/src/", working_prefix="ext-util-java/src/"),
    SourceRoot(name="util-taglib", baseline_prefix="util-taglib/src/", working_prefix="ext-util-taglib/src/"),
)


class SourceKey(BaseModel):
    """A root-relative path used to pair working files with baseline files."""

    model_config = ConfigDict(frozen=True)

    root: str
    key: str

    def __str__(self) -> str:
        return f"{self.root}:{self.key}"


class ReconciliationIndex(BaseModel):
    """Mapping of (root name, source key) to a location for one source set.

    Built once, then only read. Insertion order follows discovery order.
    """

    model_config = ConfigDict(frozen=True)

    side: IndexSide
    entries: dict[SourceKey, str] = Field(default_factory=dict)

    def lookup(self, source_key: SourceKey) -> str | None:
        return self.entries.get(source_key)

    def keys(self) -> Iterator[SourceKey]:
        return iter(self.entries)

    def __contains__(self, source_key: object) -> bool:
        return source_key in self.entries

    def __len__(self) -> int:
        return len(self.entries)


class NewFile(BaseModel):
    """A working file with no baseline counterpart."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["new"] = "new"
    source_key: SourceKey
    working_location: str


class ModifiedFile(BaseModel):
    """A working file paired with its baseline counterpart."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["modified"] = "modified"
    source_key: SourceKey
    baseline_location: str
    working_location: str


ModificationEntry = Annotated[Union[NewFile, ModifiedFile], Field(discriminator="kind")]
