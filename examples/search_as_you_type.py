"""
Search-as-you-type example using api_connector.

This example demonstrates single-flight requests: every keystroke
starts a search, and each new search cancels the previous one that
is still pending, so only the latest query produces results.
"""

import asyncio
import logging

from api_connector import ApiConnector

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def search_as_you_type():
    """Type a query one character at a time."""
    async with ApiConnector(
        validate=lambda response: response.status == 200,
        base_url="https://httpbin.org",
    ) as api:
        handles = []
        for query in ["p", "py", "pyt", "pyth", "pytho", "python"]:
            request = (
                api.get("/delay/1", {"q": query})
                .on_ok(lambda response: response.json()["args"]["q"])
                .on_cancel(lambda marker: logger.info(f"Search cancelled: {marker}"))
                .on_error(lambda error: logger.error(f"Search errored: {error}") or error)
            )
            handles.append(request.start_single("search", throwable=False))
            await asyncio.sleep(0.1)

        results = await asyncio.gather(*(handle.task for handle in handles))
        logger.info(f"Final search results for: {results[-1]}")


async def status_dispatch():
    """React to specific status codes before classification."""
    async with ApiConnector(base_url="https://httpbin.org") as api:
        request = (
            api.get("/status/201")
            .on_status(lambda response: logger.info("Resource created"), 201)
            .on_any(lambda response: logger.info("Redirect or not modified"), "onStatus=[301, 302, 304]")
            .on_response(lambda response: response.status)
        )
        status = await request.start()
        logger.info(f"Response status: {status}")


async def main():
    """Run all examples."""
    logger.info("Starting api_connector examples")

    try:
        await search_as_you_type()
        await status_dispatch()
    except Exception as e:
        logger.error(f"Example failed: {e}")
        raise


if __name__ == "__main__":
    asyncio.run(main())
