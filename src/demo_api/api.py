from fastapi import FastAPI, APIRouter, HTTPException
import structlog

from . import models
from .building import load_building

log = structlog.get_logger(
    processors=[
        structlog.processors.JSONRenderer(indent=2),
    ],
)

# Create the FastAPI app
app = FastAPI(title="Crystal Ball Drop Demo API")

# Create the router for API endpoints
router = APIRouter()

building = load_building()


@router.get("/building", response_model=models.BuildingResponse)
def get_building():
    """ Number of floors of the hidden building. The breaking floor stays secret. """
    return models.BuildingResponse(floors=building.floors)


@router.post("/drop", response_model=models.DropResponse)
def drop(req: models.DropRequest):
    """ Drop a probe from the requested floor and report whether it broke. """
    try:
        broke = building.drop(req.floor)
    except ValueError as e:
        log.warning("drop rejected", floor=req.floor, floors=building.floors)
        raise HTTPException(status_code=400, detail=f"{e}")

    log.info("drop", floor=req.floor, broke=broke)
    return models.DropResponse(floor=req.floor, broke=broke)


# Include the router in the app (after all routes are defined)
app.include_router(router, prefix="/api")
