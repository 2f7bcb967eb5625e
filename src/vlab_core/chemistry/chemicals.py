# src/vlab_core/chemistry/chemicals.py
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Tuple, Union

from ..catalog import ChemistryCatalogParser, ParsedChemistryCatalog
from ..errors import ConfigurationError, DiagnosableError

logger = logging.getLogger(__name__)

DEFAULT_CHEMISTRY_CATALOG = Path(__file__).resolve().parent.parent / "catalog" / "data" / "chemistry.yaml"

NEUTRAL_PH = 7.0


@dataclass(frozen=True)
class Chemical:
    """A reagent on the lab shelf. `ph` and `concentration` are demo values used by the pH estimate."""
    id: int
    name: str
    formula: str
    description: str
    ph: float
    concentration: float

    @property
    def is_acid(self) -> bool:
        return self.ph < NEUTRAL_PH

    @property
    def is_base(self) -> bool:
        return self.ph > NEUTRAL_PH


@dataclass(frozen=True)
class Reaction:
    reactants: FrozenSet[int]
    description: str
    products: Tuple[int, ...] = ()

    @property
    def is_visible(self) -> bool:
        return bool(self.products)


def demo_properties(index: int) -> Tuple[float, float]:
    """(pH, concentration) assigned to the shelf entry at 0-based position `index`."""
    return 1.0 + (index % 14), 0.1 + (index % 10) * 0.1


class ChemicalCatalog:
    """
    The chemistry lab's reagent shelf plus its known reaction pairs.

    Pairs are unordered; any pair without a known reaction gets the catalog's default
    description and no products.
    """

    def __init__(self, chemicals: Iterable[Chemical], reactions: Iterable[Reaction], default_reaction: str):
        self._chemicals: Tuple[Chemical, ...] = tuple(chemicals)
        self._by_id: Dict[int, Chemical] = {c.id: c for c in self._chemicals}
        self._reactions: Dict[FrozenSet[int], Reaction] = {r.reactants: r for r in reactions}
        self.default_reaction = default_reaction

    @classmethod
    def from_parsed(cls, parsed: ParsedChemistryCatalog) -> "ChemicalCatalog":
        chemicals = []
        for index, chem_ir in enumerate(parsed.chemicals):
            ph, concentration = demo_properties(index)
            chemicals.append(Chemical(
                id=chem_ir.chemical_id,
                name=chem_ir.name,
                formula=chem_ir.formula,
                description=chem_ir.description,
                ph=ph,
                concentration=concentration,
            ))
        reactions = [
            Reaction(reactants=frozenset(r.reactants), description=r.description, products=tuple(r.products))
            for r in parsed.reactions
        ]
        return cls(chemicals, reactions, parsed.default_reaction)

    def get(self, chemical_id: int) -> Optional[Chemical]:
        return self._by_id.get(chemical_id)

    def list(self) -> Tuple[Chemical, ...]:
        return self._chemicals

    def search(self, text: str = "") -> Tuple[Chemical, ...]:
        """Chemicals whose name or formula contains `text`, ignoring case."""
        needle = text.strip().casefold()
        if not needle:
            return self._chemicals
        return tuple(
            c for c in self._chemicals
            if needle in c.name.casefold() or needle in c.formula.casefold()
        )

    def reaction_for(self, chemical_ids: Iterable[int]) -> Reaction:
        pair = frozenset(chemical_ids)
        known = self._reactions.get(pair)
        if known is not None:
            return known
        return Reaction(reactants=pair, description=self.default_reaction)

    def __len__(self) -> int:
        return len(self._chemicals)

    def __iter__(self) -> Iterator[Chemical]:
        return iter(self._chemicals)

    def __contains__(self, chemical_id: object) -> bool:
        return chemical_id in self._by_id


def load_chemical_catalog(yaml_path: Union[str, Path, None] = None) -> ChemicalCatalog:
    """
    Loads the chemistry shelf from `yaml_path` (the packaged catalog by default).

    Raises:
        ConfigurationError: if the file is missing or fails the schema.
    """
    if yaml_path is None:
        return _load_default_catalog()
    try:
        parsed = ChemistryCatalogParser().parse(yaml_path)
    except DiagnosableError as e:
        raise ConfigurationError(e.get_diagnostic_report()) from e
    catalog = ChemicalCatalog.from_parsed(parsed)
    logger.info(f"Chemical catalog loaded: {len(catalog)} chemical(s), {len(parsed.reactions)} known reaction(s).")
    return catalog


@lru_cache(maxsize=1)
def _load_default_catalog() -> ChemicalCatalog:
    return load_chemical_catalog(DEFAULT_CHEMISTRY_CATALOG)
