"""
Helpers shared by route modules.
"""

from fastapi.responses import JSONResponse

from fitdash.features.connections import ActionResult


def action_response(result: ActionResult) -> JSONResponse:
    """Render a connect/sync/disconnect outcome with its notice."""
    return JSONResponse(status_code=result.status_code, content=result.to_payload())
