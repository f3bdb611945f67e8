"""Public redirect route."""

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

router = APIRouter()


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the long URL, counting the click.

    Unknown or malformed codes fall through to the error handlers as 404/400.
    """
    service = request.app.state.service

    long_url = service.resolve_for_redirect(short_code)

    # 302 so browsers keep coming back and every click is counted
    return RedirectResponse(url=long_url, status_code=status.HTTP_302_FOUND)
