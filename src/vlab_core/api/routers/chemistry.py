# src/vlab_core/api/routers/chemistry.py
import logging
from dataclasses import asdict

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from ...chemistry import Mixture, ReactionContext, build_analysis_request
from ..context import AppContext
from ..models import MixtureRequest

logger = logging.getLogger(__name__)


def setup_chemistry_router(context: AppContext) -> APIRouter:
    router = APIRouter(prefix="/api/labs/chemistry", tags=["chemistry"])

    @router.get("/chemicals")
    async def list_chemicals(text: str = Query(default="")) -> JSONResponse:
        chemicals = context.get_chemical_catalog().search(text)
        return JSONResponse({"count": len(chemicals), "chemicals": [asdict(c) for c in chemicals]})

    @router.post("/mixture")
    async def describe_mixture(request: MixtureRequest) -> JSONResponse:
        """
        Estimates the pH of a mixture, looks up the known reaction for a two-chemical
        mixture, and returns the analysis request body the client would send.
        """
        catalog = context.get_chemical_catalog()
        mixture = Mixture()
        for item in request.items:
            chemical = catalog.get(item.id)
            if chemical is None:
                return JSONResponse({"error": f"Unknown chemical id {item.id}", "id": item.id}, status_code=404)
            mixture.add(chemical, item.volume)

        ph = mixture.estimate_ph()
        content = {"ph": ph, "reaction": None}
        if len(set(mixture.chemical_ids)) == 2:
            reaction = catalog.reaction_for(mixture.chemical_ids)
            content["reaction"] = {
                "reactants": sorted(reaction.reactants),
                "description": reaction.description,
                "products": list(reaction.products),
            }
        reaction_context = ReactionContext(
            temperature_c=request.temperatureC,
            heating=request.heating,
            ph=ph,
            notes=request.notes,
            volumes={entry.chemical.name: entry.volume_ml for entry in mixture.entries},
        )
        content["request"] = build_analysis_request(mixture, reaction_context)
        return JSONResponse(content)

    return router
