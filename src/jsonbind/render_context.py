"""jsonbind RenderContext: per-pass state kept out of the data context.

The data context seen by expressions is exactly the JSON value in scope
(the whole document, or a single array element). Bookkeeping that a pass
needs for diagnostics and runaway-nesting protection lives here instead,
in a ContextVar, so it never collides with user data keys.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

from jsonbind.environment.exceptions import ArrayDepthError


@dataclass
class RenderContext:
    """Per-pass state isolated from the data context.

    Attributes:
        container_id: Id (or description) of the container being rendered
        source_id: Id of the data-bearing node feeding this pass
        depth: Current array-marker nesting depth
        max_depth: Maximum allowed nesting depth
        marker_stack: Paths of the enclosing array markers, outermost first
        items_rendered: Item fragments cloned so far in this pass
    """

    container_id: str | None = None
    source_id: str | None = None
    depth: int = 0
    max_depth: int = 32
    marker_stack: list[str] = field(default_factory=list)
    items_rendered: int = 0

    def check_depth(self, path: str) -> None:
        """Check whether entering marker ``path`` would exceed the limit.

        Raises:
            ArrayDepthError: If depth >= max_depth
        """
        if self.depth >= self.max_depth:
            raise ArrayDepthError(path, self.max_depth, self.marker_stack)

    @contextmanager
    def enter_marker(self, path: str) -> Iterator[None]:
        """Track one level of array-marker nesting for the with block."""
        self.check_depth(path)
        self.depth += 1
        self.marker_stack.append(path)
        try:
            yield
        finally:
            self.marker_stack.pop()
            self.depth -= 1

    def describe(self) -> str:
        """Location string for diagnostics, e.g. ``#people > teams > members``."""
        parts = [f"#{self.container_id}" if self.container_id else "<container>"]
        parts.extend(self.marker_stack)
        return " > ".join(parts)


# Module-level ContextVar
_render_context: ContextVar[RenderContext | None] = ContextVar(
    "jsonbind_render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None outside a render pass)."""
    return _render_context.get()


@contextmanager
def render_context(
    container_id: str | None = None,
    source_id: str | None = None,
    max_depth: int = 32,
) -> Iterator[RenderContext]:
    """Context manager for pass-scoped state.

    Creates a new RenderContext and makes it current for the duration of
    the with block, restoring the previous one on exit.

    Example:
        with render_context(container_id="people", source_id="data") as ctx:
            fragment = render_fragment(template, data)
        print(ctx.items_rendered)
    """
    ctx = RenderContext(container_id=container_id, source_id=source_id, max_depth=max_depth)
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
