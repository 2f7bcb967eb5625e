# src/vlab_core/api/routers/history.py
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ...chemistry import ChemistryExperiment
from ...engine import UnknownVariableKey
from ...history import Snapshot
from ..context import AppContext
from ..models import ChemistryExperimentRequest, SimulationSnapshotRequest

logger = logging.getLogger(__name__)


def setup_history_router(context: AppContext) -> APIRouter:
    router = APIRouter(prefix="/api/labs", tags=["history"])

    def _unknown_lab(lab: str) -> JSONResponse:
        return JSONResponse({"error": f"Unknown lab '{lab}'", "lab": lab}, status_code=404)

    @router.get("/{lab}/history")
    async def list_history(lab: str) -> JSONResponse:
        recorder = context.recorder_for(lab)
        if recorder is None:
            return _unknown_lab(lab)
        records = [entry.to_record() for entry in recorder.list()]
        return JSONResponse({"lab": lab, "count": len(records), "records": records})

    @router.post("/{lab}/history")
    async def record_history(lab: str, payload: Dict[str, Any] = Body(...)) -> JSONResponse:
        """
        Simulation labs take {simulationId, variables?, score?} and record a snapshot of
        that evaluation; the chemistry lab takes {chemicals, temperature, ph, result, score}.
        """
        recorder = context.recorder_for(lab)
        if recorder is None:
            return _unknown_lab(lab)
        try:
            if lab == "chemistry":
                request = ChemistryExperimentRequest.model_validate(payload)
                entry = ChemistryExperiment(
                    chemicals=request.chemicals,
                    temperature=request.temperature,
                    ph=request.ph,
                    result=request.result,
                    timestamp=context.clock(),
                    score=request.score,
                )
            else:
                request = SimulationSnapshotRequest.model_validate(payload)
                entry = _snapshot(context, lab, request)
                if isinstance(entry, JSONResponse):
                    return entry
        except ValidationError as e:
            details = e.errors(include_url=False, include_context=False)
            return JSONResponse({"error": "Invalid history record", "details": details}, status_code=422)
        except UnknownVariableKey as e:
            return JSONResponse({"error": str(e), "key": e.key}, status_code=422)

        recorder.record(entry)
        logger.info(f"Recorded {lab} history entry; {len(recorder)} retained.")
        return JSONResponse(entry.to_record(), status_code=201)

    @router.delete("/{lab}/history")
    async def clear_history(lab: str) -> JSONResponse:
        recorder = context.recorder_for(lab)
        if recorder is None:
            return _unknown_lab(lab)
        recorder.clear()
        return JSONResponse({"lab": lab, "count": 0})

    return router


def _snapshot(context: AppContext, lab: str, request: SimulationSnapshotRequest):
    registry = context.registry_for(lab)
    definition = registry.get(request.simulationId)
    if definition is None:
        return JSONResponse({"error": f"Unknown simulation '{request.simulationId}'", "lab": lab},
                            status_code=404)
    assignment = context.engine.initial_assignment(definition)
    for key, value in request.variables.items():
        assignment = context.engine.set_variable(assignment, key, value)
    outputs = context.engine.evaluate(definition, assignment)
    return Snapshot(
        definition_id=definition.id,
        variables=assignment.to_dict(),
        outputs=outputs,
        timestamp=context.clock(),
        score=request.score,
    )
