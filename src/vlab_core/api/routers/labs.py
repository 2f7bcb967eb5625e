# src/vlab_core/api/routers/labs.py
import logging
from typing import Optional, Tuple, Union

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from ...constants import ALL_CATEGORIES
from ...data_structures import SimulationDefinition
from ...engine import UnknownVariableKey
from ...labs import LABS
from ...registry import SimulationRegistry
from ...selection import SimulationQuery, filter_definitions
from ..context import AppContext
from ..models import EvaluateRequest, evaluation_payload, simulation_detail, simulation_summary

logger = logging.getLogger(__name__)


def unknown_lab_response(lab: str) -> JSONResponse:
    return JSONResponse({"error": f"Unknown simulation lab '{lab}'", "lab": lab}, status_code=404)


def setup_labs_router(context: AppContext) -> APIRouter:
    router = APIRouter(prefix="/api/labs", tags=["labs"])

    def _lookup(lab: str, simulation_id: Optional[str] = None
                ) -> Union[JSONResponse, Tuple[SimulationRegistry, Optional[SimulationDefinition]]]:
        registry = context.registry_for(lab)
        if registry is None:
            return unknown_lab_response(lab)
        if simulation_id is None:
            return registry, None
        definition = registry.get(simulation_id)
        if definition is None:
            return JSONResponse(
                {"error": f"Unknown simulation '{simulation_id}'", "lab": lab, "id": simulation_id},
                status_code=404,
            )
        return registry, definition

    @router.get("")
    async def list_labs() -> JSONResponse:
        return JSONResponse({"labs": list(LABS)})

    @router.get("/{lab}/categories")
    async def list_categories(lab: str) -> JSONResponse:
        found = _lookup(lab)
        if isinstance(found, JSONResponse):
            return found
        registry, _ = found
        return JSONResponse({"lab": lab, "categories": list(registry.categories())})

    @router.get("/{lab}/simulations")
    async def list_simulations(
        lab: str,
        text: str = Query(default=""),
        category: str = Query(default=ALL_CATEGORIES),
    ) -> JSONResponse:
        found = _lookup(lab)
        if isinstance(found, JSONResponse):
            return found
        registry, _ = found
        matches = filter_definitions(registry, SimulationQuery(text=text, category=category))
        return JSONResponse({
            "lab": lab,
            "count": len(matches),
            "simulations": [simulation_summary(d) for d in matches],
        })

    @router.get("/{lab}/simulations/{simulation_id}")
    async def get_simulation(lab: str, simulation_id: str) -> JSONResponse:
        found = _lookup(lab, simulation_id)
        if isinstance(found, JSONResponse):
            return found
        _, definition = found
        return JSONResponse(simulation_detail(definition))

    @router.post("/{lab}/simulations/{simulation_id}/evaluate")
    async def evaluate_simulation(lab: str, simulation_id: str,
                                  request: Optional[EvaluateRequest] = None) -> JSONResponse:
        found = _lookup(lab, simulation_id)
        if isinstance(found, JSONResponse):
            return found
        _, definition = found
        overrides = request.variables if request is not None else {}
        try:
            assignment = context.engine.initial_assignment(definition)
            for key, value in overrides.items():
                assignment = context.engine.set_variable(assignment, key, value)
        except UnknownVariableKey as e:
            return JSONResponse({"error": str(e), "key": e.key}, status_code=422)
        outputs = context.engine.evaluate(definition, assignment)
        return JSONResponse(evaluation_payload(assignment, outputs))

    return router
