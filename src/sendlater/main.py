from typing import TYPE_CHECKING, Optional

import uvicorn

if TYPE_CHECKING:
    from sendlater.config.main import Config


def main(config: Optional["Config"] = None) -> None:
    if config is None:
        from sendlater.config import get_config

        config = get_config()

    uvicorn.run(
        "sendlater.app:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.reload_uvicorn,
        reload_includes=["*.py", "*.yml", "*.yaml"],
        lifespan="on",
        access_log=False,
    )
