"""Seven-stage request dispatch.

resolve -> before -> action -> after -> exception -> always -> finish
"""

import logging
import mimetypes
import threading
import time
from typing import Any, Callable, Dict, Optional

from resourceful.errors import Redirect
from resourceful.mapping import MappingTable
from resourceful.types import Request, Response


class Dispatcher:
    """Run requests through a mapping table."""

    def __init__(
        self,
        mapping: MappingTable,
        log: Optional[logging.Logger] = None,
        synchronize: bool = False,
        reload: Optional[Callable[[], None]] = None,
        default_content_type: str = "text/html",
    ) -> None:
        """Initialize dispatcher.

        ``synchronize`` serializes every request behind one process-wide
        lock. ``reload`` is called at the start of each request.
        """
        self.mapping = mapping
        self.log = log or logging.getLogger(__name__)
        self.lock = threading.Lock() if synchronize else None
        self.reload = reload
        self.default_content_type = default_content_type

    def __call__(self, request: Request) -> Dict[str, Any]:
        """Dispatch ``request`` and return the finished response."""
        if self.lock is not None:
            with self.lock:
                return self._call(request)
        return self._call(request)

    def deferred(self, request: Request) -> bool:
        """Check if the transport should run ``request`` off the main thread."""
        return self.mapping.threaded(request)

    def _call(self, request: Request) -> Dict[str, Any]:
        response = request.response
        start = time.perf_counter()
        try:
            self.safe(request)
        except Exception:
            self.log.error(
                f"Unhandled error for: {request.method} - {request.url}", exc_info=True
            )
            raise
        finally:
            elapsed = round((time.perf_counter() - start) * 1000)
            self.log.info(f"{request.method}: {request.url} handled in {elapsed} ms.")
        return response.finish()

    def safe(self, request: Request) -> Response:
        """Run the pipeline for ``request``.

        Exceptions no handler claims propagate to the caller once the
        always filters have run.
        """
        response = request.response
        if self.reload is not None:
            self.reload()
        response.content_type = self._content_type(request.path)

        try:
            binding = self.mapping.resolve(request)
            for before in self.mapping.applicable("before", request):
                before(request)

            redirected = False
            try:
                response.write(binding.call(request))
            except Redirect:
                redirected = True
                raise
            finally:
                if not redirected:
                    for after in self.mapping.applicable("after", request):
                        after(request)

        except Redirect as redirect:
            self._redirect(response, redirect)

        except Exception as err:
            try:
                handled = self.mapping.handle(err, request)
            except Redirect as redirect:
                self._redirect(response, redirect)
                handled = True
            if not handled:
                raise

        finally:
            for always in self.mapping.filters["always"]:
                try:
                    if always.applies(request):
                        always(request)
                except Exception:
                    self.log.exception(f"always filter failed: {always.body!r}")

        return response

    @staticmethod
    def _redirect(response: Response, redirect: Redirect) -> None:
        response.status_code = redirect.status
        response.location = redirect.location

    def _content_type(self, path: str) -> str:
        content_type, _ = mimetypes.guess_type(path)
        return content_type or self.default_content_type
