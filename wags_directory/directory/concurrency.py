"""Helpers de concurrencia para lecturas paralelas contra el store."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable


async def gather_cancelling(*aws: Awaitable[Any]) -> list[Any]:
    """
    Como ``asyncio.gather``, pero si una lectura falla (o el caller es
    cancelado) cancela las hermanas pendientes y espera a que terminen
    antes de propagar el error. Así ninguna lectura sigue corriendo contra
    un store que el request ya está cerrando.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
