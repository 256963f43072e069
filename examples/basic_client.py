"""
Basic pathfetch example.

Creates a client for a JSON API, fetches a resource through a path
template and shows how failures surface with and without nothrow.
"""

import asyncio
import logging

from pathfetch import RequestFailure, create

# Configure logging
logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


async def main():
    api = create({
        "base_url": "http://httpbin.org",
        "headers": {"Accept": "application/json"},
        "debug": True,
    })

    # GET http://httpbin.org/anything/users/42?expand=teams
    result = await api.get("/anything/users/:id", {"id": 42, "query": {"expand": "teams"}})
    logger.info(f"Echoed URL: {result['url']}")

    created = await api.post("/post", {"name": "bob"})
    logger.info(f"Echoed JSON body: {created['json']}")

    try:
        await api.get("/status/:code", {"code": 404, "result_type": "text"})
    except RequestFailure as e:
        logger.info(f"Request failed: {e.to_dict()}")

    # Same request, but failures resolve to the extracted body
    quiet = api.clone({"nothrow": True}, immutable=True)
    body = await quiet.get("/status/:code", {"code": 500, "result_type": "text"})
    logger.info(f"nothrow result: {body!r}")


if __name__ == "__main__":
    asyncio.run(main())
