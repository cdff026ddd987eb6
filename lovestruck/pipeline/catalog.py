"""
Static registries of filters, overlays and countdown prompts.

Catalogs are fixed at import time. What the user picks lives in a Selection,
which holds exactly one entry and is replaced on every choice.
"""

from dataclasses import dataclass
from typing import Generic, Iterator, Tuple, TypeVar

from .filters import Chain, chain_css, parse_chain


@dataclass(frozen=True)
class Filter:
    id: str
    name: str
    chain: Chain = ()

    @property
    def css(self) -> str:
        """CSS ``filter`` value for live display."""
        return chain_css(self.chain)

    @property
    def is_identity(self) -> bool:
        return not self.chain


OVERLAY_KINDS = ("none", "hearts", "sparkles", "vignette", "grain")


@dataclass(frozen=True)
class Overlay:
    id: str
    name: str
    kind: str = "none"

    def __post_init__(self):
        if self.kind not in OVERLAY_KINDS:
            raise ValueError(f"Unknown overlay kind '{self.kind}', expected one of {OVERLAY_KINDS}")

    @property
    def is_texture(self) -> bool:
        return self.kind in ("sparkles", "grain")


T = TypeVar("T", Filter, Overlay)


class Catalog(Generic[T]):
    """Immutable ordered collection keyed by ``id``."""

    def __init__(self, entries):
        self._entries: Tuple[T, ...] = tuple(entries)
        if not self._entries:
            raise ValueError("Catalog needs at least one entry")

        self._by_id = {}
        for entry in self._entries:
            if entry.id in self._by_id:
                raise ValueError(f"Duplicate catalog id '{entry.id}'")
            self._by_id[entry.id] = entry

    def __iter__(self) -> Iterator[T]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id) -> bool:
        return entry_id in self._by_id

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(e.id for e in self._entries)

    @property
    def default(self) -> T:
        """First entry; the initial selection."""
        return self._entries[0]

    def get(self, entry_id: str) -> T:
        try:
            return self._by_id[entry_id]
        except KeyError:
            raise KeyError(f"No entry '{entry_id}', expected one of {self.ids}") from None


class Selection(Generic[T]):
    """Single current choice from a catalog; last one chosen wins."""

    def __init__(self, catalog: Catalog[T]):
        self.catalog = catalog
        self.current: T = catalog.default

    def select(self, entry_id: str) -> T:
        self.current = self.catalog.get(entry_id)
        return self.current


FILTERS: Catalog[Filter] = Catalog([
    Filter("normal", "Natural"),
    Filter("warm", "Golden Hour", parse_chain("sepia(30%) contrast(110%) saturate(125%) hue-rotate(-10deg)")),
    Filter("vintage", "Vintage", parse_chain("sepia(60%) contrast(90%) brightness(90%) saturate(85%)")),
    Filter("bw", "Classic B&W", parse_chain("grayscale(100%) contrast(110%) brightness(110%)")),
    Filter("noir", "Noir", parse_chain("grayscale(100%) contrast(150%) brightness(90%)")),
    Filter("soft", "Pastel", parse_chain("contrast(90%) brightness(110%) saturate(85%)")),
    Filter("cyber", "Cyberpunk", parse_chain("contrast(125%) saturate(150%) hue-rotate(180deg) brightness(110%)")),
    Filter("cool", "Cool Tone", parse_chain("hue-rotate(30deg) saturate(90%) contrast(110%)")),
])

OVERLAYS: Catalog[Overlay] = Catalog([
    Overlay("none", "None", "none"),
    Overlay("hearts", "Hearts", "hearts"),
    Overlay("sparkles", "Sparkles", "sparkles"),
    Overlay("vignette", "Vignette", "vignette"),
    Overlay("grain", "Film Grain", "grain"),
])

PROMPTS: Tuple[str, ...] = (
    "Lean in close...",
    "Give a gentle hug!",
    "Big smiles!",
    "Look at each other...",
    "Blow a kiss!",
    "Make a silly face!",
    "Strike a pose!",
    "Chin up, smile!",
)
