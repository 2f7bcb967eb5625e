# src/vlab_core/api/context.py
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from ..chemistry import ChemicalCatalog, ChemistryExperiment, load_chemical_catalog
from ..config import AppSettings
from ..constants import LAB_HISTORY_KEYS
from ..engine import EvaluationEngine
from ..history import HistoryRecorder, JsonHistoryStore, Snapshot
from ..labs import LABS, SIMULATION_LABS, load_lab_registry
from ..registry import SimulationRegistry
from ..analysis import ReactionAnalysisService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """
    Runtime state of one web app instance.

    Registries and the chemical catalog are immutable and shared; history recorders
    and the analysis service are created on first use so a test can inject its own.
    """
    settings: AppSettings = field(default_factory=AppSettings.from_env)
    engine: EvaluationEngine = field(default_factory=EvaluationEngine)
    registry_loader: Callable[[str], SimulationRegistry] = load_lab_registry
    chemical_catalog: Optional[ChemicalCatalog] = None
    analysis_service: Optional[ReactionAnalysisService] = None
    clock: Callable[[], float] = time.time
    recorders: Dict[str, HistoryRecorder] = field(default_factory=dict)

    def registry_for(self, lab: str) -> Optional[SimulationRegistry]:
        """The lab's registry, or None when `lab` is not a simulation lab."""
        if lab not in SIMULATION_LABS:
            return None
        return self.registry_loader(lab)

    def get_chemical_catalog(self) -> ChemicalCatalog:
        if self.chemical_catalog is None:
            self.chemical_catalog = load_chemical_catalog()
        return self.chemical_catalog

    def get_analysis_service(self) -> ReactionAnalysisService:
        if self.analysis_service is None:
            self.analysis_service = ReactionAnalysisService(self.settings)
        return self.analysis_service

    def recorder_for(self, lab: str) -> Optional[HistoryRecorder]:
        if lab not in LABS:
            return None
        if lab not in self.recorders:
            entry_type = ChemistryExperiment if lab == "chemistry" else Snapshot
            self.recorders[lab] = HistoryRecorder(
                capacity=self.settings.history_capacity,
                store=JsonHistoryStore(self.settings.history_dir),
                key=LAB_HISTORY_KEYS[lab],
                entry_type=entry_type,
            )
        return self.recorders[lab]

    async def aclose(self) -> None:
        if self.analysis_service is not None:
            await self.analysis_service.aclose()
