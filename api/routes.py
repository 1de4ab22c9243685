# api/routes.py
from fastapi import APIRouter, HTTPException, Request

from domain.catalog import catalog_payload
from domain.portfolio import state_payload

router = APIRouter(prefix="/api")


@router.get("/state")
async def current_state(request: Request):
    """Full snapshot of the running match, same shape as GAME_STATE."""
    return state_payload(request.app.state.engine.state)


@router.get("/catalog")
async def catalog():
    return catalog_payload()


@router.get("/results")
async def results(request: Request):
    engine = request.app.state.engine
    if engine.last_results is None:
        raise HTTPException(status_code=404, detail="match not finished")
    return {"results": [r.to_dict() for r in engine.last_results]}
