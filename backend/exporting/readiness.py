"""
Render-completion wait.

The print page sets window.__printReady and dispatches a one-shot "print-ready"
event once every image has loaded (or failed) and document.fonts is ready.
wait_for_render_ready resolves on the earlier of that signal and a bounded
fallback delay, so an export can never hang on a page that never signals.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

READY_EVENT = "print-ready"
READY_FLAG = "__printReady"

READY_SIGNAL = "signal"
READY_FALLBACK = "fallback"

# Resolves "signal" when the page is (or becomes) ready. Pages that cannot
# observe font loading only get the fallback timer.
READY_SIGNAL_JS = """
(fallbackMs) => new Promise((resolve) => {
  if (window.%(flag)s === true) {
    resolve("%(signal)s");
    return;
  }
  setTimeout(() => resolve("%(fallback)s"), fallbackMs);
  if (!document.fonts || typeof window.addEventListener !== "function") {
    return;
  }
  window.addEventListener("%(event)s", () => resolve("%(signal)s"), { once: true });
  const imagesLoaded = Array.from(document.images).every((img) => img.complete);
  if (imagesLoaded && document.fonts.status === "loaded") {
    resolve("%(signal)s");
  }
})
""" % {
    "flag": READY_FLAG,
    "event": READY_EVENT,
    "signal": READY_SIGNAL,
    "fallback": READY_FALLBACK,
}


async def wait_for_render_ready(
    signal: Awaitable[Any],
    fallback_ms: int,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> str:
    """
    Wait for `signal` or `fallback_ms`, whichever comes first.

    Returns READY_SIGNAL when the signal won, READY_FALLBACK otherwise. A signal
    that resolves to READY_FALLBACK (the page's own timer) counts as fallback.
    Errors raised by the signal propagate; the losing side is cancelled.
    """
    signal_task = asyncio.ensure_future(signal)
    fallback_task = asyncio.ensure_future(sleep(max(fallback_ms, 0) / 1000))
    try:
        done, _ = await asyncio.wait(
            {signal_task, fallback_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        if signal_task in done:
            outcome = signal_task.result()
            return READY_FALLBACK if outcome == READY_FALLBACK else READY_SIGNAL
        return READY_FALLBACK
    finally:
        for task in (signal_task, fallback_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(signal_task, fallback_task, return_exceptions=True)
