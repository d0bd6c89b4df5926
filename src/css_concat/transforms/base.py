from __future__ import annotations

import inspect
from typing import Awaitable, Protocol, Sequence, Union

from css_concat.context import ConcatContext
from css_concat.core import InputError, TransformError
from css_concat.events import EventType
from css_concat.model import Stylesheet

TransformResult = Union[Stylesheet, Awaitable[Stylesheet]]


class Transform(Protocol):
    """
    A pipeline step. Receives the tree left by the previous step and
    returns a new one (directly or as an awaitable). Must not mutate its input.
    """

    def __call__(self, sheet: Stylesheet, ctx: ConcatContext) -> TransformResult: ...


def transform_name(transform: object) -> str:
    return getattr(transform, "name", None) or getattr(
        transform, "__name__", type(transform).__name__
    )


def validate_transforms(transforms: Sequence[object]) -> list[Transform]:
    out: list[Transform] = []
    for i, t in enumerate(transforms):
        if not callable(t):
            raise InputError(
                f"plugins[{i}] is not callable ({type(t).__name__}); omit absent steps"
            )
        out.append(t)
    return out


async def run_transforms(
    sheet: Stylesheet, transforms: Sequence[Transform], ctx: ConcatContext
) -> Stylesheet:
    """
    Apply transforms in order. Exceptions raised by a step propagate unmodified.
    """
    for index, transform in enumerate(transforms):
        name = transform_name(transform)
        ctx.emit(EventType.TRANSFORM_START, index=index, transform=name)

        result = transform(sheet, ctx)
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, Stylesheet):
            raise TransformError(
                f"Transform {name} returned {type(result).__name__}, expected Stylesheet"
            )
        sheet = result

        ctx.emit(
            EventType.TRANSFORM_FINISH,
            index=index,
            transform=name,
            nodes=len(sheet.nodes),
        )
    return sheet
