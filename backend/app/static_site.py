"""
Single-page-app static file serving.

Files that exist under the build directory are served as-is; every other
GET falls back to the entry document so the client-side router can take
over.
"""

from typing import Iterable

from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles
from starlette.types import Scope
from starlette.responses import Response


class SPAStaticFiles(StaticFiles):
    """StaticFiles that answers unknown paths with ``index.html``."""

    def __init__(
        self,
        *,
        directory: str,
        index: str = "index.html",
        reserved_paths: Iterable[str] = (),
    ):
        super().__init__(directory=directory, html=True)
        self.index = index
        # API paths reaching here only do so with the wrong method
        self.reserved_paths = {p.strip("/") for p in reserved_paths}

    async def get_response(self, path: str, scope: Scope) -> Response:
        if path.strip("/") in self.reserved_paths:
            raise HTTPException(status_code=405)

        try:
            response = await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise
        else:
            if response.status_code != 404:
                return response

        return await super().get_response(self.index, scope)
