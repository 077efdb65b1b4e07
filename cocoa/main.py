"""Cocoa Signal — application entry point.

Boots the FastAPI server and provides the CLI entry point for the
``serve`` and ``once`` modes.
"""

import logging

from fastapi import FastAPI

from cocoa.api.routers import router

app = FastAPI(title="Cocoa Signal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("cocoa")


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


def build_cache(config, market=None, commentary=None):
    """Wire the market client, analysis engine and result cache."""
    from cocoa.coordinator import SingleFlightCache
    from cocoa.engine import FutureAnalysisEngine
    from cocoa.market.yahoo_client import YahooFinanceClient

    engine = FutureAnalysisEngine(
        config=config,
        market=market or YahooFinanceClient(config),
        commentary=commentary,
    )
    return SingleFlightCache(engine.build, ttl_ms=config.cache_ttl_ms)


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli() -> None:
    """Parse CLI arguments and dispatch to the appropriate mode."""
    import argparse
    import asyncio
    import json

    from cocoa.api.routers import configure_routers
    from cocoa.cli.dashboard import print_analysis
    from cocoa.config import load_config

    parser = argparse.ArgumentParser(description="Cocoa futures signal engine")
    parser.add_argument(
        "--mode",
        choices=["serve", "once"],
        default="serve",
        help="Serve the HTTP API or print one analysis and exit (default: serve)",
    )
    parser.add_argument("--json", action="store_true", help="With --mode once, print raw JSON")
    args = parser.parse_args()

    config = load_config()

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    cache = build_cache(config)

    if args.mode == "once":
        response = asyncio.run(cache.get())
        if args.json:
            print(json.dumps(response, indent=2, ensure_ascii=False))
        else:
            print_analysis(response)
        return

    import uvicorn

    configure_routers(cache, weights=config.certificate_weights)
    logger.info("Starting Cocoa Signal API on port %d (cache TTL %d ms)",
                config.port, config.cache_ttl_ms)
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_level="info")


if __name__ == "__main__":
    _run_cli()
